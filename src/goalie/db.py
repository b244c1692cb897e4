"""SQLite persistence for topics, their sessions and their goals."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional
from uuid import UUID

from .errors import PersistenceError
from .models import Goal, Session, Topic

logger = logging.getLogger(__name__)


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    try:
        conn = sqlite3.connect(
            path,
            isolation_level=None,
            check_same_thread=check_same_thread,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        initialize_schema(conn)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Cannot open topic database at {path}: {exc}") from exc
    return conn


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS topics (
            id TEXT PRIMARY KEY,
            active_session_start TEXT
        );

        CREATE TABLE IF NOT EXISTS sessions (
            id TEXT PRIMARY KEY,
            topic_id TEXT NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_sessions_topic
            ON sessions(topic_id, position);

        CREATE TABLE IF NOT EXISTS goals (
            id TEXT PRIMARY KEY,
            topic_id TEXT NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            start_time TEXT NOT NULL,
            duration_seconds REAL
        );

        CREATE INDEX IF NOT EXISTS idx_goals_topic
            ON goals(topic_id, position);
        """
    )


@contextmanager
def _transaction(conn: sqlite3.Connection, action: str) -> Iterator[None]:
    try:
        conn.execute("BEGIN")
        try:
            yield
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    except sqlite3.Error as exc:
        raise PersistenceError(f"Failed to {action}: {exc}") from exc


def write_topic(conn: sqlite3.Connection, topic: Topic) -> None:
    """Replace the stored copy of ``topic``."""
    topic_key = str(topic.id)
    with _transaction(conn, f"write topic {topic_key}"):
        conn.execute(
            """
            INSERT INTO topics (id, active_session_start) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET
                active_session_start = excluded.active_session_start
            """,
            (topic_key, _format_timestamp(topic.active_session_start)),
        )
        conn.execute("DELETE FROM sessions WHERE topic_id = ?", (topic_key,))
        conn.executemany(
            """
            INSERT INTO sessions (id, topic_id, position, start_time, end_time)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    str(session.id),
                    topic_key,
                    position,
                    _format_timestamp(session.start),
                    _format_timestamp(session.end),
                )
                for position, session in enumerate(topic.sessions)
            ],
        )
        conn.execute("DELETE FROM goals WHERE topic_id = ?", (topic_key,))
        conn.executemany(
            """
            INSERT INTO goals (id, topic_id, position, start_time, duration_seconds)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    str(goal.id),
                    topic_key,
                    position,
                    _format_timestamp(goal.start),
                    goal.duration,
                )
                for position, goal in enumerate(topic.goals)
            ],
        )
    logger.debug(
        "Wrote topic %s (%d sessions, %d goals).",
        topic_key,
        len(topic.sessions),
        len(topic.goals),
    )


def read_topic(conn: sqlite3.Connection, topic_id: UUID) -> Optional[Topic]:
    """Load a topic, or return ``None`` when it was never saved."""
    topic_key = str(topic_id)
    try:
        row = conn.execute(
            "SELECT id, active_session_start FROM topics WHERE id = ?", (topic_key,)
        ).fetchone()
        if row is None:
            return None
        session_rows = conn.execute(
            """
            SELECT id, start_time, end_time
            FROM sessions
            WHERE topic_id = ?
            ORDER BY position;
            """,
            (topic_key,),
        ).fetchall()
        goal_rows = conn.execute(
            """
            SELECT id, start_time, duration_seconds
            FROM goals
            WHERE topic_id = ?
            ORDER BY position;
            """,
            (topic_key,),
        ).fetchall()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Failed to read topic {topic_key}: {exc}") from exc

    return Topic(
        id=UUID(row["id"]),
        active_session_start=_parse_timestamp(row["active_session_start"]),
        sessions=tuple(
            Session(
                id=UUID(r["id"]),
                start=_parse_timestamp(r["start_time"]),
                end=_parse_timestamp(r["end_time"]),
            )
            for r in session_rows
        ),
        goals=tuple(
            Goal(
                id=UUID(r["id"]),
                start=_parse_timestamp(r["start_time"]),
                duration=r["duration_seconds"],
            )
            for r in goal_rows
        ),
    )


def remove_topic(conn: sqlite3.Connection, topic_id: UUID) -> None:
    topic_key = str(topic_id)
    with _transaction(conn, f"remove topic {topic_key}"):
        cur = conn.execute("DELETE FROM topics WHERE id = ?", (topic_key,))
    if cur.rowcount == 0:
        logger.debug("Topic %s was not stored; nothing removed.", topic_key)


def list_topic_ids(conn: sqlite3.Connection) -> list[UUID]:
    try:
        rows = conn.execute("SELECT id FROM topics ORDER BY id").fetchall()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Failed to list topics: {exc}") from exc
    return [UUID(row["id"]) for row in rows]


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value is not None else None
