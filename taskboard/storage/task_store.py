import itertools
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from ..models.task import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore(Protocol):
    """任务持久化存储接口，所有方法都可能挂起"""

    async def create(self, data: TaskCreate) -> Task: ...

    async def get(self, task_id: str) -> Optional[Task]: ...

    async def list_all(self) -> List[Task]: ...

    async def update(self, task_id: str, changes: TaskUpdate) -> Optional[Task]: ...

    async def delete(self, task_id: str) -> bool: ...

    async def close(self) -> None: ...


class InMemoryTaskStore:
    """内存任务存储（未配置数据库时使用）"""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._store: Dict[str, Tuple[int, Task]] = {}
        self._sequence = itertools.count()
        self._clock = clock

    async def create(self, data: TaskCreate) -> Task:
        now = self._clock()
        task = Task(
            id=str(uuid.uuid4()),
            title=data.title,
            description=data.description,
            status=data.status,
            created_at=now,
            updated_at=now,
        )
        self._store[task.id] = (next(self._sequence), task)
        return task

    async def get(self, task_id: str) -> Optional[Task]:
        entry = self._store.get(task_id)
        return entry[1] if entry else None

    async def list_all(self) -> List[Task]:
        """按创建时间倒序，时间相同时后插入的在前"""
        entries = sorted(
            self._store.values(),
            key=lambda entry: (entry[1].created_at, entry[0]),
            reverse=True,
        )
        return [task for _, task in entries]

    async def update(self, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        entry = self._store.get(task_id)
        if entry is None:
            return None

        sequence, task = entry
        update_data = changes.changes()
        update_data["updated_at"] = max(self._clock(), task.created_at)
        updated = task.model_copy(update=update_data)
        self._store[task_id] = (sequence, updated)
        return updated

    async def delete(self, task_id: str) -> bool:
        if task_id in self._store:
            del self._store[task_id]
            return True
        return False

    async def close(self) -> None:
        logger.debug(f"内存存储关闭，共 {len(self._store)} 条任务")
