"""任务列表缓存

整个系统只有一个缓存键：完整的任务列表（序列化后的 JSON 文本）。
任何写操作都会删除该键，过期时间兜底限制陈旧窗口。
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..exceptions import CacheError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "tasks:all"
DEFAULT_TTL_SECONDS = 300


class CacheBackend(Protocol):
    """缓存后端接口，传输失败时抛出 CacheError"""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


class InMemoryCacheBackend:
    """进程内 TTL 缓存（未配置 Redis 时使用）"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def close(self) -> None:
        self._entries.clear()


class RedisCacheBackend:
    """Redis 缓存后端"""

    def __init__(self, client: Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> "RedisCacheBackend":
        """
        根据 URL 创建后端（连接延迟到第一次调用时建立）

        Args:
            url: Redis 连接地址
            socket_timeout: 连接与读写超时（秒）
        """
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            raise CacheError(f"Redis GET 失败: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self.client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            raise CacheError(f"Redis SET 失败: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            raise CacheError(f"Redis DEL 失败: {e}") from e

    async def close(self) -> None:
        await self.client.aclose()


class TaskListCache:
    """单键任务列表缓存"""

    def __init__(
        self,
        backend: CacheBackend,
        key: str = DEFAULT_CACHE_KEY,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ):
        self.backend = backend
        self.key = key
        self.ttl_seconds = ttl_seconds

    async def get(self) -> Optional[str]:
        """返回缓存的列表 JSON，未命中或已过期返回 None"""
        return await self.backend.get(self.key)

    async def put(self, payload: str) -> None:
        """写入列表 JSON，覆盖旧值，过期时间从本次调用开始计算"""
        await self.backend.set(self.key, payload, self.ttl_seconds)

    async def invalidate(self) -> None:
        """删除列表缓存，没有缓存时为空操作"""
        await self.backend.delete(self.key)

    async def close(self) -> None:
        await self.backend.close()
