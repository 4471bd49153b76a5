# src/sequent/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Malformed values fall back to defaults instead of failing at import time.
- Components take settings as an argument; get_settings() is only the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import BusyPolicy

ENV_PREFIX = "SEQUENT"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path
    log_to_file: bool

    # ---- Execution ----
    taskfile: Path
    busy_policy: BusyPolicy

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "sequent").strip() or "sequent"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/sequent"))
        log_to_file = _env_bool(_k("LOG_TO_FILE"), False)

        taskfile = _env_path(_k("TASKFILE"), Path("tasks.py"))
        busy_policy = BusyPolicy.from_env(os.getenv(_k("BUSY_POLICY")))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            log_to_file=log_to_file,
            taskfile=taskfile,
            busy_policy=busy_policy,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
