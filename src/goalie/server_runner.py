"""Helpers to launch the local JSON API."""

from __future__ import annotations

import logging
import threading
import webbrowser
from pathlib import Path
from typing import Optional

import uvicorn

from .config import TrackerSettings
from .paths import get_db_path
from .webapp import create_app

logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.0


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8766,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    open_browser: bool = False,
    log_level: str = "info",
) -> None:
    """Serve the API for one database, optionally opening today's view."""
    resolved_db_path = Path(db_path or get_db_path()).expanduser()
    resolved_settings = settings or TrackerSettings()
    resolved_db_path.parent.mkdir(parents=True, exist_ok=True)

    app = create_app(db_path=resolved_db_path, settings=resolved_settings)
    base_url = f"http://{host}:{port}"
    logger.info(
        "Serving topics from %s on %s (timezone %s, weeks start on day %d, "
        "minimum %d days in week 1, clamp running session: %s, default topic %s).",
        resolved_db_path,
        base_url,
        resolved_settings.timezone,
        resolved_settings.first_weekday,
        resolved_settings.minimum_days_in_first_week,
        "on" if resolved_settings.clamp_active_session else "off",
        resolved_settings.default_topic_id,
    )

    if open_browser:
        url = f"{base_url}/api/topics/{resolved_settings.default_topic_id}/today"
        timer = threading.Timer(BROWSER_DELAY_SECONDS, _open_in_browser, args=(url,))
        timer.daemon = True
        timer.start()

    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _open_in_browser(url: str) -> None:
    if not webbrowser.open_new_tab(url):
        logger.warning("No browser available to open %s", url)
