import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


@dataclass
class Settings:
    db_url: str
    db_echo: bool
    host: str
    port: int
    log_level: str


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    raw_port = os.getenv("PORT", "") or "8000"
    try:
        port = int(raw_port)
    except ValueError:
        port = 8000

    log_level = (os.getenv("LOG_LEVEL", "") or "INFO").strip().upper()

    return Settings(
        db_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./inventory.db"),
        db_echo=_env_flag("DB_ECHO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=log_level,
    )
