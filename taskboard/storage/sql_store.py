"""SQLAlchemy 任务存储

SQLAlchemy 会话是同步阻塞的，所有数据库操作都放到线程池中执行。
"""

import asyncio
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from ..exceptions import StoreError, StoreIntegrityError
from ..models.task import TITLE_MAX_LENGTH, Task, TaskCreate, TaskStatus, TaskUpdate
from .task_store import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Base(DeclarativeBase):
    pass


class TaskRecord(Base):
    """tasks 表"""

    __tablename__ = "tasks"

    # 自增序号保证同一时间戳下的插入顺序
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TaskStatus.PENDING.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


def _aware(value: datetime) -> datetime:
    # SQLite 不保存时区
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def record_to_task(record: TaskRecord) -> Task:
    """将数据库记录转换为 Task 模型"""
    return Task(
        id=record.id,
        title=record.title,
        description=record.description or "",
        status=TaskStatus(record.status),
        created_at=_aware(record.created_at),
        updated_at=_aware(record.updated_at),
    )


class SqlTaskStore:
    """基于 SQLAlchemy 的持久化任务存储（PostgreSQL / SQLite）"""

    def __init__(
        self,
        database_url: str,
        max_workers: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        try:
            self.engine = create_engine(
                database_url,
                connect_args=connect_args,
                pool_pre_ping=True,
            )
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"数据库初始化失败: {e}") from e

        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="taskboard-db")
        self._clock = clock
        logger.info(f"✅ 数据表 '{TaskRecord.__tablename__}' 已就绪")

    async def _run(self, func: Callable[[Session], T]) -> T:
        """在线程池中执行数据库操作，并转换 SQLAlchemy 异常"""

        def execute():
            with self._sessions() as session:
                try:
                    result = func(session)
                    session.commit()
                    return result
                except SQLAlchemyError:
                    session.rollback()
                    raise

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, execute)
        except (IntegrityError, DataError) as e:
            raise StoreIntegrityError(str(e.orig) if e.orig else str(e)) from e
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e

    async def create(self, data: TaskCreate) -> Task:
        def insert(session: Session) -> Task:
            now = self._clock()
            record = TaskRecord(
                id=str(uuid.uuid4()),
                title=data.title,
                description=data.description,
                status=data.status.value,
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            session.flush()
            return record_to_task(record)

        return await self._run(insert)

    async def get(self, task_id: str) -> Optional[Task]:
        def fetch(session: Session) -> Optional[Task]:
            record = session.scalar(select(TaskRecord).where(TaskRecord.id == task_id))
            return record_to_task(record) if record else None

        return await self._run(fetch)

    async def list_all(self) -> List[Task]:
        def fetch_all(session: Session) -> List[Task]:
            query = select(TaskRecord).order_by(TaskRecord.created_at.desc(), TaskRecord.seq.desc())
            return [record_to_task(record) for record in session.scalars(query)]

        return await self._run(fetch_all)

    async def update(self, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        def apply(session: Session) -> Optional[Task]:
            record = session.scalar(select(TaskRecord).where(TaskRecord.id == task_id))
            if record is None:
                return None

            for field, value in changes.changes().items():
                setattr(record, field, value.value if isinstance(value, TaskStatus) else value)
            record.updated_at = max(self._clock(), _aware(record.created_at))
            session.flush()
            return record_to_task(record)

        return await self._run(apply)

    async def delete(self, task_id: str) -> bool:
        def remove(session: Session) -> bool:
            record = session.scalar(select(TaskRecord).where(TaskRecord.id == task_id))
            if record is None:
                return False
            session.delete(record)
            return True

        return await self._run(remove)

    async def close(self) -> None:
        self._executor.shutdown(wait=True)
        self.engine.dispose()
        logger.info("数据库连接已关闭")
