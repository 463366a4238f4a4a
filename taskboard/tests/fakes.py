"""测试替身对象"""

from collections import Counter
from datetime import datetime, timedelta, timezone

from taskboard.exceptions import CacheError
from taskboard.storage.cache import InMemoryCacheBackend
from taskboard.storage.task_store import InMemoryTaskStore


class CountingTaskStore(InMemoryTaskStore):
    """记录每个方法调用次数的内存存储"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = Counter()

    async def create(self, data):
        self.calls["create"] += 1
        return await super().create(data)

    async def get(self, task_id):
        self.calls["get"] += 1
        return await super().get(task_id)

    async def list_all(self):
        self.calls["list_all"] += 1
        return await super().list_all()

    async def update(self, task_id, changes):
        self.calls["update"] += 1
        return await super().update(task_id, changes)

    async def delete(self, task_id):
        self.calls["delete"] += 1
        return await super().delete(task_id)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


class CountingCacheBackend(InMemoryCacheBackend):
    """记录调用次数的内存缓存"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = Counter()

    async def get(self, key):
        self.calls["get"] += 1
        return await super().get(key)

    async def set(self, key, value, ttl_seconds):
        self.calls["set"] += 1
        await super().set(key, value, ttl_seconds)

    async def delete(self, key):
        self.calls["delete"] += 1
        await super().delete(key)


class FailingCacheBackend:
    """所有操作都失败的缓存后端，模拟缓存不可用"""

    def __init__(self):
        self.calls = Counter()

    async def get(self, key):
        self.calls["get"] += 1
        raise CacheError("cache unavailable")

    async def set(self, key, value, ttl_seconds):
        self.calls["set"] += 1
        raise CacheError("cache unavailable")

    async def delete(self, key):
        self.calls["delete"] += 1
        raise CacheError("cache unavailable")

    async def close(self):
        pass


class ReadOnlyCacheBackend(InMemoryCacheBackend):
    """读取正常（总是未命中），写入失败的缓存后端"""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = Counter()

    async def get(self, key):
        self.calls["get"] += 1
        return None

    async def set(self, key, value, ttl_seconds):
        self.calls["set"] += 1
        raise CacheError("cache is read-only")


class ManualClock:
    """手动推进的时钟"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedDateClock:
    """每次调用返回同一时刻，除非手动推进"""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


