"""Location of the session store."""

from pathlib import Path
from typing import Optional

import click

APP_NAME = "focus-cli"
DATABASE_FILE_NAME = "focus-cli.db"
DB_PATH_ENV = "FOCUS_CLI_DB"


def get_data_dir() -> Path:
    """Per-user application data directory."""
    return Path(click.get_app_dir(APP_NAME))


def get_database_path(override: Optional[str] = None) -> Path:
    """Resolve the store file, preferring an explicit path."""
    if override:
        return Path(override).expanduser()
    return get_data_dir() / DATABASE_FILE_NAME
