"""Keyed access to topics with save-after-mutation."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from uuid import UUID

from .commands import Command, Environment, MutationResult, mutate
from .db import list_topic_ids, open_database, read_topic, remove_topic, write_topic
from .models import Topic

logger = logging.getLogger(__name__)


class TopicStore:
    """Load topics by id, apply commands, and persist the results.

    A topic that was never saved loads as a fresh empty topic; it is written
    the first time a command changes it. Every call reads the stored copy, so
    writes made by another process (the CLI next to a running server) are
    kept. Calls within one process are serialized with a lock.
    """

    def __init__(self, db_path: Path, env: Environment) -> None:
        self.db_path = Path(db_path)
        self.env = env
        self._conn = open_database(self.db_path, check_same_thread=False)
        self._lock = threading.Lock()

    def get(self, topic_id: UUID) -> Topic:
        with self._lock:
            return self._load_locked(topic_id)

    def apply(self, topic_id: UUID, command: Command) -> MutationResult:
        with self._lock:
            topic = self._load_locked(topic_id)
            result = mutate(topic, command, self.env)
            if result.needs_save:
                write_topic(self._conn, result.topic)
            return result

    def topic_ids(self) -> list[UUID]:
        """Ids of every saved topic."""
        with self._lock:
            return list_topic_ids(self._conn)

    def remove(self, topic_id: UUID) -> None:
        with self._lock:
            remove_topic(self._conn, topic_id)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _load_locked(self, topic_id: UUID) -> Topic:
        topic = read_topic(self._conn, topic_id)
        if topic is None:
            logger.info("No stored topic %s; starting a new one.", topic_id)
            return Topic.new(topic_id)
        logger.debug("Loaded topic %s with %d sessions.", topic_id, len(topic.sessions))
        return topic
