import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str

    store_backend: str
    store_rest_url: str
    store_rest_key: str
    store_table: str
    store_timeout_seconds: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///measurebook.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        store_backend=_getenv("STORE_BACKEND", "sql").lower(),
        store_rest_url=_getenv("STORE_REST_URL", ""),
        store_rest_key=_getenv("STORE_REST_KEY", ""),
        store_table=_getenv("STORE_TABLE", "customers"),
        store_timeout_seconds=_getenv_int("STORE_TIMEOUT_SECONDS", 15),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "STORE_BACKEND": s.store_backend,
        "STORE_REST_URL": s.store_rest_url,
        "STORE_REST_KEY": s.store_rest_key,
        "STORE_TABLE": s.store_table,
        "STORE_TIMEOUT_SECONDS": s.store_timeout_seconds,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,
    }
