import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """服务配置，从环境变量和 .env 文件读取"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Taskboard API"
    # 仅 development 环境在 500 响应中返回错误详情
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    # 未配置时使用内存存储
    database_url: Optional[str] = None
    db_workers: int = 5

    # 未配置时使用内存缓存
    redis_url: Optional[str] = None
    redis_socket_timeout: float = 2.0

    cache_key: str = "tasks:all"
    cache_ttl_seconds: int = 300

    cors_origin: str = "http://localhost:3000"

    # start_multi_workers.py 使用
    web_workers: int = 4

    @property
    def has_shared_state(self) -> bool:
        """存储与缓存是否都是进程外共享的（多 worker 的前提）"""
        return bool(self.database_url and self.redis_url)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def effective_workers(self) -> int:
        """
        计算实际 worker 数

        内存存储和内存缓存不在进程间共享：一个 worker 的写操作无法让其他
        worker 的列表缓存失效。缺少 DATABASE_URL 或 REDIS_URL 时只启动一个 worker。
        """
        if self.web_workers > 1 and not self.has_shared_state:
            logger.warning(
                f"未同时配置 DATABASE_URL 与 REDIS_URL，worker 数从 {self.web_workers} 降为 1"
            )
            return 1
        return max(self.web_workers, 1)


settings = Settings()
