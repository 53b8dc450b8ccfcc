import os
import re
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./expenses.db"


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc


def _read_list_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    # Accept "a,b", "a b" and "a, b"
    return [item for item in re.split(r"[\s,]+", raw) if item]


@dataclass
class Settings:
    """Runtime settings, read from the environment (and a local .env file)."""

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    host: str = "127.0.0.1"
    port: int = 3000
    title: str = "Expense Tracker API"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv(find_dotenv(usecwd=True))
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=_read_list_env("CORS_ORIGINS", ["*"]),
            host=os.getenv("API_HOST", "127.0.0.1"),
            port=_read_int_env("API_PORT", 3000),
            title=os.getenv("APP_TITLE", "Expense Tracker API"),
        )
