import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .api import tasks
from .models.task import ErrorResponse, HealthResponse
from .services.task_service import TaskService
from .storage.cache import InMemoryCacheBackend, RedisCacheBackend, TaskListCache
from .storage.sql_store import SqlTaskStore
from .storage.task_store import InMemoryTaskStore, TaskStore

# 配置日志
logging.basicConfig(
    level=default_settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_task_store(settings: Settings) -> TaskStore:
    """根据配置创建任务存储"""
    if settings.database_url:
        return SqlTaskStore(settings.database_url, max_workers=settings.db_workers)
    logger.warning("未配置 DATABASE_URL，使用内存存储")
    return InMemoryTaskStore()


def build_list_cache(settings: Settings) -> TaskListCache:
    """根据配置创建列表缓存"""
    if settings.redis_url:
        backend = RedisCacheBackend.from_url(settings.redis_url, settings.redis_socket_timeout)
    else:
        logger.warning("未配置 REDIS_URL，使用内存缓存")
        backend = InMemoryCacheBackend()
    return TaskListCache(backend, key=settings.cache_key, ttl_seconds=settings.cache_ttl_seconds)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
    cache: Optional[TaskListCache] = None,
) -> FastAPI:
    """
    创建应用

    Args:
        settings: 服务配置，默认读取环境变量
        store: 任务存储，默认根据配置创建
        cache: 列表缓存，默认根据配置创建

    Returns:
        FastAPI 应用
    """
    settings = settings or default_settings
    if store is None:
        store = build_task_store(settings)
    if cache is None:
        cache = build_list_cache(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 启动时初始化
        logger.info(f"🚀 {settings.app_name} 启动")
        logger.info(f"📍 Environment: {settings.environment}")
        logger.info(f"📦 Store: {type(store).__name__}")
        logger.info(f"🧠 Cache: {type(cache.backend).__name__}, TTL {cache.ttl_seconds}s")
        yield
        # 关闭时清理
        await cache.close()
        await store.close()
        logger.info(f"👋 {settings.app_name} 关闭")

    app = FastAPI(
        title=settings.app_name,
        description="任务管理 CRUD 服务，任务列表带读穿缓存",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.task_service = TaskService(store, cache)

    # CORS 配置
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 路由注册
    app.include_router(tasks.router)

    @app.get("/health", response_model=HealthResponse, summary="健康检查", tags=["系统"])
    async def health():
        """检查服务健康状态"""
        return HealthResponse(timestamp=datetime.now(timezone.utc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [error.get("msg", "Invalid request") for error in exc.errors()]
        body = ErrorResponse(error="Validation error", details=details)
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 未匹配的路由与不支持的方法统一返回 404
        if exc.status_code in (404, 405):
            body = ErrorResponse(error="Route not found")
            return JSONResponse(status_code=404, content=body.model_dump(exclude_none=True))
        body = ErrorResponse(error=str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理的异常: {request.method} {request.url.path}, 错误: {exc}", exc_info=exc)
        body = ErrorResponse(
            error="Internal server error",
            message=str(exc) if settings.is_development else "Something went wrong",
        )
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskboard.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=True,
    )
