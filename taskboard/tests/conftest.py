"""测试夹具"""

import pytest
from fastapi.testclient import TestClient

from taskboard.config import Settings
from taskboard.main import create_app
from taskboard.services.task_service import TaskService
from taskboard.storage.cache import TaskListCache

from .fakes import CountingCacheBackend, CountingTaskStore


@pytest.fixture()
def store() -> CountingTaskStore:
    return CountingTaskStore()


@pytest.fixture()
def cache_backend() -> CountingCacheBackend:
    return CountingCacheBackend()


@pytest.fixture()
def cache(cache_backend) -> TaskListCache:
    return TaskListCache(cache_backend, key="tasks:all", ttl_seconds=300)


@pytest.fixture()
def service(store, cache) -> TaskService:
    return TaskService(store, cache)


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(_env_file=None, environment="test", database_url=None, redis_url=None)


@pytest.fixture()
def client(test_settings, store, cache):
    app = create_app(settings=test_settings, store=store, cache=cache)
    with TestClient(app) as test_client:
        yield test_client
