"""
Tests for application configuration.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from global_connection_core.config import (
    AppConfig,
    LoggingConfig,
    NamingConfig,
    get_config,
    parse_piece_prefixes,
    reset_config,
    set_config,
)
from global_connection_core.db.db_config import DatabaseConfig, get_app_database_config
from global_connection_core.exceptions import ValidationError


class TestAppConfig:
    def test_defaults(self, app_config):
        assert app_config.environment == "test"
        assert app_config.is_development
        assert app_config.platform.platform_id == "default"
        assert app_config.security.encryption_key is None
        assert app_config.security.admin_api_keys == []
        assert app_config.database.statement_timeout == 30.0
        assert app_config.features.enable_project_scope_check is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "production")
        monkeypatch.setenv("PLATFORM_ID", "platform-9")
        monkeypatch.setenv("ADMIN_API_KEYS", "key-a, key-b")
        monkeypatch.setenv("DB_STATEMENT_TIMEOUT", "2.5")

        config = AppConfig()

        assert not config.is_development
        assert config.platform.platform_id == "platform-9"
        assert config.security.admin_api_keys == ["key-a", "key-b"]
        assert config.database.statement_timeout == 2.5

    def test_from_env_reads_dotenv_file(self, tmp_path, monkeypatch):
        # Register both variables so monkeypatch removes what load_dotenv sets
        for name in ("PLATFORM_ID", "LOG_LEVEL"):
            monkeypatch.setenv(name, "unset")
            monkeypatch.delenv(name)
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("PLATFORM_ID=from-dotenv\nLOG_LEVEL=debug\n")

        config = AppConfig.from_env(str(dotenv_file))

        assert config.platform.platform_id == "from-dotenv"
        assert config.logging.level == "DEBUG"

    def test_global_config_accessors(self):
        custom = AppConfig(environment="staging")
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom

    def test_log_level_from_environment_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert AppConfig().logging.level == "WARNING"

    def test_invalid_log_level_from_environment_is_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        with pytest.raises(PydanticValidationError):
            AppConfig()

    def test_empty_platform_id_from_environment_is_rejected(self, monkeypatch):
        monkeypatch.setenv("PLATFORM_ID", "")

        with pytest.raises(PydanticValidationError):
            AppConfig()


class TestSubConfigs:
    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            LoggingConfig(level="LOUD")

    @pytest.mark.parametrize("raw", ["no-separator", "=prefix", "@acme/piece="])
    def test_invalid_piece_prefix_mapping(self, raw):
        with pytest.raises(ValueError):
            parse_piece_prefixes(raw)

    def test_empty_prefix_rejected(self):
        with pytest.raises(PydanticValidationError):
            NamingConfig(piece_prefixes={"@acme/piece": " "})


class TestDatabaseConfig:
    def test_sqlite_connection_string(self):
        assert DatabaseConfig(db_type="sqlite", database=":memory:").get_connection_string() == (
            "sqlite:///:memory:"
        )

    def test_postgres_requires_credentials(self):
        with pytest.raises(ValidationError):
            DatabaseConfig(db_type="postgres", database="db").get_connection_string()

    def test_postgres_uses_psycopg(self):
        config = DatabaseConfig(
            db_type="postgres", host="h", database="d", username="u", password="p"
        )

        assert config.get_connection_string() == "postgresql+psycopg://u:p@h:5432/d"
        assert "p@" not in repr(config)

    def test_app_database_config_uses_url(self, app_config):
        app_config.database.connection_string = "sqlite:///./local.db"

        config = get_app_database_config(app_config)

        assert config.is_sqlite
        assert config.get_connection_string() == "sqlite:///./local.db"
        assert config.development_mode is True
