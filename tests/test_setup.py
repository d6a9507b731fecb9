"""
Smoke tests to verify project setup
Tests configuration, logging and database connectivity
"""

import logging

import pytest
from sqlalchemy import text

from src.app.config import (
    Config,
    get_config,
    reload_config,
    reset_config,
    setup_logging,
    validate_config,
)
from src.app.database import DatabaseManager


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


class TestConfiguration:
    """Test configuration system"""

    def test_config_loads(self):
        config = get_config()

        assert config is not None
        assert config is get_config()
        assert config.content.max_tags == 10
        assert config.content.redaction_marker == "[Comment deleted]"
        assert "other" in config.content.categories

    def test_config_validation(self):
        result = validate_config()

        assert isinstance(result, dict)
        assert result["valid"] is True
        assert result["errors"] == []

    def test_invalid_default_category(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text("content:\n  default_category: cooking\n")

        result = validate_config(Config(str(path)))

        assert result["valid"] is False
        assert any("cooking" in error for error in result["errors"])

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "app.yaml"
        path.write_text(
            "app:\n  name: test\ncontent:\n  max_tags: 3\nconcurrency:\n  retry_attempts: 9\n"
        )

        config = reload_config(str(path))

        assert config.content.max_tags == 3
        assert config.concurrency.retry_attempts == 9
        assert config.get_summary()["app"]["name"] == "test"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CONTENT_COMMENT_MAX_LENGTH", "280")
        monkeypatch.setenv("DB_URL", "sqlite+aiosqlite:///:memory:")

        config = Config(str(tmp_path / "absent.yaml"))

        assert config.content.comment_max_length == 280
        assert config.database.url.endswith(":memory:")

    def test_config_summary(self):
        summary = get_config().get_summary()

        assert "database" in summary
        assert "content" in summary
        assert "concurrency" in summary
        assert "celery" in summary
        assert set(get_config().to_dict()) == {
            "database",
            "logging",
            "content",
            "concurrency",
            "celery",
        }


class TestLogging:
    def test_setup_logging_with_file(self, tmp_path, monkeypatch):
        log_file = tmp_path / "logs" / "core.log"
        monkeypatch.setenv("LOG_FILE_PATH", str(log_file))
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging(Config(str(tmp_path / "absent.yaml")))
            logging.getLogger("src.tests").info("hello")

            assert root.level == logging.DEBUG
            assert log_file.parent.exists()
        finally:
            root.setLevel(level)
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()


class TestDatabase:
    @pytest.mark.asyncio
    async def test_database_manager_roundtrip(self):
        manager = DatabaseManager(url="sqlite+aiosqlite:///:memory:")
        try:
            await manager.create_tables()
            async with manager.session() as session:
                result = await session.execute(text("SELECT count(*) FROM videos"))
                assert result.scalar_one() == 0

            await manager.drop_tables()
            async with manager.session() as session:
                result = await session.execute(
                    text("SELECT count(*) FROM sqlite_master WHERE type = 'table'")
                )
                assert result.scalar_one() == 0
        finally:
            await manager.close()
