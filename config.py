"""Application configuration objects."""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from typing import Any, Type

from sqlalchemy.pool import NullPool, StaticPool


class BaseConfig:
    """Shared defaults across all environments."""

    APP_NAME = "Nutri Coach"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite+pysqlite:///coach_dev.db",
    )
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change_me")
    JWT_TOKEN_LOCATION = ("headers",)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_SEC", "43200"))
    )
    AI_API_KEY = os.getenv("GROQ_API_KEY") or os.getenv("AI_API_KEY", "")
    AI_API_BASE = os.getenv("AI_API_BASE", "https://api.groq.com/openai/v1")
    AI_API_MAX_RETRIES = int(os.getenv("AI_API_MAX_RETRIES", "3"))
    AI_API_RETRY_BACKOFF = float(os.getenv("AI_API_RETRY_BACKOFF", "2.0"))
    AI_CONNECT_TIMEOUT_SEC = int(os.getenv("AI_CONNECT_TIMEOUT_SEC", "10"))
    AI_READ_TIMEOUT_SEC = int(os.getenv("AI_READ_TIMEOUT_SEC", "30"))
    AI_ASSISTANT_MODEL = os.getenv("AI_ASSISTANT_MODEL", "llama-3.1-8b-instant")
    AI_INJECTION_GUARD_MODEL = os.getenv("AI_INJECTION_GUARD_MODEL", "llama-prompt-guard-2-86m")
    AI_SAFETY_GUARD_MODEL = os.getenv("AI_SAFETY_GUARD_MODEL", "llama-guard-4-12b")
    AI_ASSISTANT_DAILY_LIMIT = int(os.getenv("AI_ASSISTANT_DAILY_LIMIT", "20"))
    AI_ASSISTANT_LESSON_LIMIT = int(os.getenv("AI_ASSISTANT_LESSON_LIMIT", "5"))
    AI_ASSISTANT_TEMPERATURE = float(os.getenv("AI_ASSISTANT_TEMPERATURE", "0.3"))
    AI_ASSISTANT_MAX_TOKENS = int(os.getenv("AI_ASSISTANT_MAX_TOKENS", "400"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    RATE_LIMIT_DEFAULTS = [limit.strip() for limit in os.getenv("RATE_LIMIT_DEFAULTS", "200 per minute;1000 per day").split(";") if limit.strip()]
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    DIAGNOSTICS_RATE_LIMIT = os.getenv("DIAGNOSTICS_RATE_LIMIT", "40 per minute")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    JSON_SORT_KEYS = False
    LOCALE_COOKIE_NAME = os.getenv("LOCALE_COOKIE_NAME", "coach_locale")
    LOCALE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365
    SEED_PATIENT_EMAIL = os.getenv("SEED_PATIENT_EMAIL", "paciente@example.com")
    SEED_PATIENT_PASSWORD = os.getenv("SEED_PATIENT_PASSWORD", "PatientPass123!")
    SEED_NUTRI_EMAIL = os.getenv("SEED_NUTRI_EMAIL", "nutri@example.com")
    SEED_NUTRI_PASSWORD = os.getenv("SEED_NUTRI_PASSWORD", "NutriPass123!")
    SQLITE_TIMEOUT_SEC = int(os.getenv("SQLITE_TIMEOUT_SEC", "15"))
    SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "15000"))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "poolclass": NullPool,
            "connect_args": {"timeout": SQLITE_TIMEOUT_SEC, "check_same_thread": False},
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
            "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", "30")),
        }


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False


class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    # A single shared connection keeps the in-memory database alive across sessions.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    AI_API_KEY = "test-key"
    AI_API_MAX_RETRIES = 2
    AI_API_RETRY_BACKOFF = 0.0
    LOG_LEVEL = "WARNING"


CONFIG_ALIASES: dict[str, Type[BaseConfig]] = {
    "dev": DevConfig,
    "development": DevConfig,
    "prod": ProdConfig,
    "production": ProdConfig,
    "test": TestConfig,
    "testing": TestConfig,
}


@lru_cache
def resolve_config(name_or_class: Any) -> Any:
    """Resolve config argument to the object expected by `app.config.from_object`."""

    if name_or_class is None:
        return DevConfig
    if isinstance(name_or_class, str):
        return CONFIG_ALIASES.get(name_or_class, name_or_class)
    return name_or_class
