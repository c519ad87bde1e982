"""
Tests for Config.from_env().

Run with: pytest src/greenhouse/config_test.py -v
"""
from greenhouse.config import Config


def test_defaults(monkeypatch):
    for name in ["DATABASE_URL", "GREENHOUSE_COLLECTION", "DB_POOL_MAX_SIZE", "GREENHOUSE_PORT", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)

    result = Config.from_env()

    assert result.environment == "test"
    assert result.database_url == "postgresql://localhost:5432/greenhouse_test"
    assert result.collection_name == "plants"
    assert result.pool_max_size == 20
    assert result.port == 8081
    assert result.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://db.internal:5432/garden")
    monkeypatch.setenv("GREENHOUSE_COLLECTION", "houseplants")
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    result = Config.from_env()

    assert result.database_url == "postgresql://db.internal:5432/garden"
    assert result.collection_name == "houseplants"
    assert result.pool_max_size == 5
    assert result.log_level == "DEBUG"
