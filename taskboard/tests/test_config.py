"""配置测试用例"""

import pytest

from taskboard.config import Settings


class TestEnvironment:
    """测试运行环境默认值"""

    def test_default_hides_error_details(self, monkeypatch):
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        assert Settings(_env_file=None).is_development is False

    def test_development_must_be_explicit(self):
        assert Settings(_env_file=None, environment="development").is_development


class TestWorkers:
    """测试多 worker 数量计算"""

    @pytest.mark.parametrize("database_url, redis_url", [
        (None, None),
        ("sqlite:///tasks.db", None),
        (None, "redis://localhost:6379/0"),
    ])
    def test_single_worker_without_shared_state(self, database_url, redis_url):
        settings = Settings(_env_file=None, web_workers=4, database_url=database_url, redis_url=redis_url)
        assert settings.has_shared_state is False
        assert settings.effective_workers() == 1

    def test_multiple_workers_with_database_and_redis(self):
        settings = Settings(
            _env_file=None,
            web_workers=4,
            database_url="postgresql+psycopg2://u:p@db/taskboard",
            redis_url="redis://localhost:6379/0",
        )
        assert settings.effective_workers() == 4

    def test_worker_count_at_least_one(self):
        settings = Settings(_env_file=None, web_workers=0, database_url=None, redis_url=None)
        assert settings.effective_workers() == 1
