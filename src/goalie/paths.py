"""Locations of the tracker's data files."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "Goalie"
DB_ENV_VAR = "GOALIE_DB"


def get_data_dir() -> Path:
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_NAME, roaming=True)
    path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    """Return the topic database path; ``$GOALIE_DB`` overrides the default."""
    override = os.environ.get(DB_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_data_dir() / "topics.sqlite3"
