from uuid import UUID

import pytest

from goalie.db import list_topic_ids, open_database, read_topic, remove_topic, write_topic
from goalie.errors import PersistenceError
from goalie.models import Goal, Session, Topic


@pytest.fixture
def conn(tmp_path):
    connection = open_database(tmp_path / "topics.sqlite3")
    yield connection
    connection.close()


@pytest.fixture
def topic(at) -> Topic:
    return (
        Topic.new(UUID(int=7))
        .with_session(Session(UUID(int=1), at(2023, 7, 10, 9), at(2023, 7, 10, 10)))
        .with_session(Session(UUID(int=2), at(2023, 7, 11, 9), at(2023, 7, 11, 9, 30)))
        .with_goal(Goal(UUID(int=3), at(2023, 7, 10), 3600))
        .with_goal(Goal(UUID(int=4), at(2023, 7, 11), None))
        .with_active_session_start(at(2023, 7, 12, 9))
    )


def test_round_trip(conn, topic) -> None:
    write_topic(conn, topic)
    loaded = read_topic(conn, topic.id)
    assert loaded == topic
    assert loaded.sessions[0].start.utcoffset() == topic.sessions[0].start.utcoffset()


def test_missing_topic_reads_as_none(conn) -> None:
    assert read_topic(conn, UUID(int=99)) is None


def test_rewrite_replaces_history(conn, topic) -> None:
    write_topic(conn, topic)
    trimmed = topic.without_session(UUID(int=1)).with_active_session_start(None)
    write_topic(conn, trimmed)
    loaded = read_topic(conn, topic.id)
    assert [s.id for s in loaded.sessions] == [UUID(int=2)]
    assert loaded.active_session_start is None


def test_list_and_remove(conn, topic) -> None:
    write_topic(conn, topic)
    write_topic(conn, Topic.new(UUID(int=1)))
    assert list_topic_ids(conn) == [UUID(int=1), UUID(int=7)]

    remove_topic(conn, topic.id)
    assert list_topic_ids(conn) == [UUID(int=1)]
    assert read_topic(conn, topic.id) is None
    orphans = conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
    assert orphans == 0


def test_remove_missing_topic_is_harmless(conn) -> None:
    remove_topic(conn, UUID(int=99))


def test_unusable_path_raises(tmp_path) -> None:
    with pytest.raises(PersistenceError):
        open_database(tmp_path)


def test_failed_write_rolls_back(conn, topic, at) -> None:
    write_topic(conn, topic)
    # Reusing a session id across topics violates the primary key.
    clash = Topic.new(UUID(int=8)).with_session(
        Session(UUID(int=1), at(2023, 7, 13, 9), at(2023, 7, 13, 10))
    )
    with pytest.raises(PersistenceError):
        write_topic(conn, clash)
    assert read_topic(conn, UUID(int=8)) is None
    assert read_topic(conn, topic.id) == topic
