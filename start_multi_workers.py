#!/usr/bin/env python3
"""
多 worker 模式启动 Taskboard

worker 之间不共享内存，只有同时配置 DATABASE_URL 和 REDIS_URL 时才按
WEB_WORKERS 启动多个 worker，否则退回单 worker，保证写操作后的下一次
列表查询不会读到其他 worker 的旧缓存。
"""
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main() -> None:
    import uvicorn
    from taskboard.config import settings

    logging.basicConfig(level=settings.log_level)
    workers = settings.effective_workers()

    print(f"🚀 Taskboard {settings.environment} | {settings.host}:{settings.port} | workers={workers}")
    print(f"   store={'sql' if settings.database_url else 'memory'}, cache={'redis' if settings.redis_url else 'memory'}")

    uvicorn.run(
        "taskboard.main:app",
        host=settings.host,
        port=settings.port,
        workers=workers,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
