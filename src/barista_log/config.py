"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = "~/.barista_log"
DATABASE_FILENAME = "barista_log.sqlite3"
PREFERENCES_FILENAME = "preferences.json"


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _clean_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip().strip('"').strip("'")
    return value or None


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path = Path(DEFAULT_DATA_DIR).expanduser()
    database_url: str | None = None
    preferences_path: Path | None = None
    coach_provider: str = "gemini"
    coach_model: str | None = None
    gemini_api_key: str | None = None
    echo_sql: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        data_dir = Path(_clean_env("BARISTA_LOG_DATA_DIR") or DEFAULT_DATA_DIR).expanduser()
        preferences = _clean_env("BARISTA_LOG_PREFERENCES_PATH")
        return cls(
            data_dir=data_dir,
            database_url=_clean_env("BARISTA_LOG_DATABASE_URL"),
            preferences_path=Path(preferences).expanduser() if preferences else None,
            coach_provider=(_clean_env("BARISTA_LOG_COACH_PROVIDER") or "gemini").lower(),
            coach_model=_clean_env("BARISTA_LOG_COACH_MODEL"),
            gemini_api_key=_clean_env("GEMINI_API_KEY"),
            echo_sql=_parse_bool(os.getenv("BARISTA_LOG_ECHO_SQL"), False),
        )

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / DATABASE_FILENAME}"

    @property
    def resolved_preferences_path(self) -> Path:
        return self.preferences_path or self.data_dir / PREFERENCES_FILENAME
