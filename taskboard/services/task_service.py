import logging
import uuid
from typing import Any, List

from pydantic import TypeAdapter

from ..exceptions import CacheError, StoreError, StoreIntegrityError
from ..models.result import Err, ErrorKind, Ok, Result
from ..models.task import DeleteConfirmation, Task, TaskListing
from ..storage.cache import TaskListCache
from ..storage.task_store import TaskStore
from .validation import is_valid_identifier, validate_create, validate_update

logger = logging.getLogger(__name__)

_listing_adapter = TypeAdapter(List[Task])


def serialize_listing(tasks: List[Task]) -> str:
    """序列化任务列表（与接口响应格式一致）"""
    return _listing_adapter.dump_json(tasks, by_alias=True).decode("utf-8")


def _store_error(e: StoreError) -> Err:
    if isinstance(e, StoreIntegrityError):
        return Err(ErrorKind.STORE_INTEGRITY, str(e))
    return Err(ErrorKind.STORE_FAILURE, str(e))


def _invalid_identifier() -> Err:
    return Err(ErrorKind.INVALID_IDENTIFIER, "Invalid task id")


def _not_found() -> Err:
    return Err(ErrorKind.NOT_FOUND, "Task not found")


class TaskService:
    """
    任务业务逻辑

    负责请求校验、存储与列表缓存的编排。缓存失效只在这里触发，
    每次成功的创建/更新/删除恰好失效一次。
    """

    def __init__(self, store: TaskStore, cache: TaskListCache):
        self.store = store
        self.cache = cache

    async def create_task(self, payload: Any) -> Result[Task]:
        """创建任务"""
        validated = validate_create(payload)
        if isinstance(validated, Err):
            return validated

        try:
            task = await self.store.create(validated.value)
        except StoreError as e:
            logger.error(f"创建任务失败: {e}")
            return _store_error(e)

        await self._invalidate_listing()
        logger.info(f"任务已创建: {task.id}")
        return Ok(task)

    async def get_task(self, task_id: str) -> Result[Task]:
        """查询单个任务（不经过列表缓存）"""
        if not is_valid_identifier(task_id):
            return _invalid_identifier()

        try:
            task = await self.store.get(_canonical(task_id))
        except StoreError as e:
            logger.error(f"查询任务失败: {task_id}, 错误: {e}")
            return _store_error(e)

        if task is None:
            return _not_found()
        return Ok(task)

    async def list_tasks(self) -> Result[TaskListing]:
        """
        查询任务列表

        优先读缓存；未命中时读存储并回填缓存。缓存不可用时直接读存储，
        且本次不回填。

        读存储与回填之间若有并发写操作完成失效，回填的可能是旧列表，
        陈旧时间以 TTL 为上限（与并发更新的后写覆盖一样，不做额外处理）。
        """
        cache_available = True
        try:
            cached = await self.cache.get()
        except CacheError as e:
            logger.warning(f"读取列表缓存失败，降级读取存储: {e}")
            cached = None
            cache_available = False

        if cached is not None:
            return Ok(TaskListing(payload=cached, cached=True))

        try:
            tasks = await self.store.list_all()
        except StoreError as e:
            logger.error(f"查询任务列表失败: {e}")
            return _store_error(e)

        payload = serialize_listing(tasks)

        if cache_available:
            try:
                await self.cache.put(payload)
            except CacheError as e:
                logger.warning(f"写入列表缓存失败: {e}")

        return Ok(TaskListing(payload=payload, cached=False))

    async def update_task(self, task_id: str, payload: Any) -> Result[Task]:
        """部分更新任务，只修改请求中出现的字段"""
        if not is_valid_identifier(task_id):
            return _invalid_identifier()
        task_id = _canonical(task_id)

        try:
            existing = await self.store.get(task_id)
        except StoreError as e:
            logger.error(f"查询任务失败: {task_id}, 错误: {e}")
            return _store_error(e)

        if existing is None:
            return _not_found()

        validated = validate_update(payload)
        if isinstance(validated, Err):
            return validated

        try:
            task = await self.store.update(task_id, validated.value)
        except StoreError as e:
            logger.error(f"更新任务失败: {task_id}, 错误: {e}")
            return _store_error(e)

        # 查询与更新之间被并发删除
        if task is None:
            return _not_found()

        await self._invalidate_listing()
        logger.info(f"任务已更新: {task_id}")
        return Ok(task)

    async def delete_task(self, task_id: str) -> Result[DeleteConfirmation]:
        """删除任务"""
        if not is_valid_identifier(task_id):
            return _invalid_identifier()
        task_id = _canonical(task_id)

        try:
            deleted = await self.store.delete(task_id)
        except StoreError as e:
            logger.error(f"删除任务失败: {task_id}, 错误: {e}")
            return _store_error(e)

        if not deleted:
            return _not_found()

        await self._invalidate_listing()
        logger.info(f"任务已删除: {task_id}")
        return Ok(DeleteConfirmation())

    async def _invalidate_listing(self) -> None:
        try:
            await self.cache.invalidate()
        except CacheError as e:
            logger.warning(f"清除列表缓存失败: {e}")


def _canonical(task_id: str) -> str:
    return str(uuid.UUID(task_id))
