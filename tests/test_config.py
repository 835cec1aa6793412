"""
Tests for configuration and application wiring.
"""

import pytest
from pydantic import ValidationError

from vehicle_registry.app import create_repository
from vehicle_registry.config import Settings
from vehicle_registry.repositories.memory_repository import InMemoryVehicleRepository
from vehicle_registry.repositories.sql_repository import SqlVehicleRepository


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.STORAGE_BACKEND == "memory"
        assert settings.RESTRICT_COLORS is False
        assert settings.PORT == 8000
        assert settings.cors_origins == ["*"]

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "SQL")
        monkeypatch.setenv("RESTRICT_COLORS", "true")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example")

        settings = Settings(_env_file=None)

        assert settings.STORAGE_BACKEND == "sql"
        assert settings.RESTRICT_COLORS is True
        assert settings.cors_origins == ["http://a.example", "http://b.example"]

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, STORAGE_BACKEND="redis")

    def test_empty_database_url_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="  ")

    def test_invalid_port_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, PORT=0)


class TestCreateRepository:
    def test_memory_backend(self):
        repository, engine = create_repository(Settings(_env_file=None))

        assert isinstance(repository, InMemoryVehicleRepository)
        assert engine is None

    @pytest.mark.asyncio
    async def test_sql_backend(self):
        repository, engine = create_repository(
            Settings(_env_file=None, STORAGE_BACKEND="sql", DATABASE_URL="sqlite://")
        )
        try:
            assert isinstance(repository, SqlVehicleRepository)
            assert await repository.count() == 0
        finally:
            engine.dispose()
