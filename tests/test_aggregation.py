from uuid import UUID

import pytest

from goalie.aggregation import (
    session_count_between,
    sessions_before,
    sessions_between,
    total_interval_between,
    total_seconds,
)
from goalie.errors import IntervalOrderError
from goalie.models import Session, Topic


@pytest.fixture
def day_topic(at) -> Topic:
    """Three sessions on 2023-07-12: 08:00-09:00, 10:00-10:30, 23:30-00:30 (+1 day)."""
    topic = Topic.new()
    spans = [
        (at(2023, 7, 12, 8), at(2023, 7, 12, 9)),
        (at(2023, 7, 12, 10), at(2023, 7, 12, 10, 30)),
        (at(2023, 7, 12, 23, 30), at(2023, 7, 13, 0, 30)),
    ]
    for n, (start, end) in enumerate(spans, start=1):
        topic = topic.with_session(Session(UUID(int=n), start, end))
    return topic


class TestTotalIntervalBetween:
    def test_running_session_only(self, at) -> None:
        topic = Topic.new().with_active_session_start(at(2023, 7, 12, 9))
        total = total_interval_between(topic, at(2023, 7, 12, 9), at(2023, 7, 12, 9, 30))
        assert total == 1800

    def test_empty_topic(self, at) -> None:
        assert total_interval_between(Topic.new(), at(2023, 7, 12), at(2023, 7, 13)) == 0

    def test_sessions_are_clamped_to_bounds(self, day_topic, at) -> None:
        start, end = at(2023, 7, 12), at(2023, 7, 12, 23, 59, 59)
        # 3600 + 1800 + the 23:30-23:59:59 part of the last session
        assert total_interval_between(day_topic, start, end) == 3600 + 1800 + 1799

    def test_session_spilling_into_next_day(self, day_topic, at) -> None:
        start, end = at(2023, 7, 13), at(2023, 7, 13, 23, 59, 59)
        assert total_interval_between(day_topic, start, end) == 1800

    def test_containing_session_is_not_counted(self, at) -> None:
        topic = Topic.new().with_session(
            Session(UUID(int=1), at(2023, 7, 12, 10), at(2023, 7, 12, 14))
        )
        assert total_interval_between(topic, at(2023, 7, 12, 11), at(2023, 7, 12, 12)) == 0

    def test_running_session_started_before_range_is_not_clamped(self, at) -> None:
        topic = Topic.new().with_active_session_start(at(2023, 7, 11, 23))
        total = total_interval_between(topic, at(2023, 7, 12), at(2023, 7, 12, 1))
        assert total == 7200

    def test_running_session_clamped_on_request(self, at) -> None:
        topic = Topic.new().with_active_session_start(at(2023, 7, 11, 23))
        total = total_interval_between(
            topic, at(2023, 7, 12), at(2023, 7, 12, 1), clamp_active_session=True
        )
        assert total == 3600

    def test_running_session_after_range(self, at) -> None:
        topic = Topic.new().with_active_session_start(at(2023, 7, 12, 12))
        start, end = at(2023, 7, 12), at(2023, 7, 12, 11)
        assert total_interval_between(topic, start, end) == -3600
        assert total_interval_between(topic, start, end, clamp_active_session=True) == 0

    def test_grows_with_end(self, day_topic, at) -> None:
        start = at(2023, 7, 12)
        totals = [
            total_interval_between(day_topic, start, at(2023, 7, 12, hour))
            for hour in range(0, 24)
        ]
        assert totals == sorted(totals)

    def test_start_after_end_raises(self, at) -> None:
        with pytest.raises(IntervalOrderError) as excinfo:
            total_interval_between(Topic.new(), at(2023, 7, 13), at(2023, 7, 12))
        assert excinfo.value.start == at(2023, 7, 13)
        assert isinstance(excinfo.value, ValueError)

    def test_empty_range_is_allowed(self, day_topic, at) -> None:
        moment = at(2023, 7, 12, 8, 30)
        assert total_interval_between(day_topic, moment, moment) == 0


class TestSessionsBetween:
    def test_newest_first(self, day_topic, at) -> None:
        found = sessions_between(day_topic.sessions, at(2023, 7, 12), at(2023, 7, 12, 23, 59, 59))
        assert [s.id.int for s in found] == [3, 2, 1]

    def test_matches_on_either_endpoint(self, day_topic, at) -> None:
        found = sessions_between(day_topic.sessions, at(2023, 7, 13), at(2023, 7, 13, 12))
        assert [s.id.int for s in found] == [3]
        found = sessions_between(day_topic.sessions, at(2023, 7, 12, 8, 30), at(2023, 7, 12, 9, 30))
        assert [s.id.int for s in found] == [1]

    def test_bounds_are_inclusive(self, day_topic, at) -> None:
        found = sessions_between(day_topic.sessions, at(2023, 7, 12, 9), at(2023, 7, 12, 10))
        assert [s.id.int for s in found] == [2, 1]

    def test_containing_session_not_matched(self, at) -> None:
        session = Session(UUID(int=1), at(2023, 7, 12, 10), at(2023, 7, 12, 14))
        assert sessions_between((session,), at(2023, 7, 12, 11), at(2023, 7, 12, 12)) == ()

    def test_stops_after_matching_block(self, at) -> None:
        # Deliberately unsorted: the stale entry at the front must not be reached.
        stale = Session(UUID(int=9), at(2023, 7, 12, 10), at(2023, 7, 12, 10, 5))
        older = Session(UUID(int=1), at(2023, 7, 10, 10), at(2023, 7, 10, 11))
        recent = Session(UUID(int=2), at(2023, 7, 12, 9), at(2023, 7, 12, 9, 30))
        found = sessions_between((stale, older, recent), at(2023, 7, 12), at(2023, 7, 12, 23))
        assert [s.id.int for s in found] == [2]

    def test_start_after_end_raises(self, at) -> None:
        with pytest.raises(IntervalOrderError):
            sessions_between((), at(2023, 7, 13), at(2023, 7, 12))


class TestSessionCount:
    def test_counts_recorded_sessions(self, day_topic, at) -> None:
        assert session_count_between(day_topic, at(2023, 7, 12), at(2023, 7, 12, 12)) == 2

    def test_running_session_always_counts(self, day_topic, at) -> None:
        topic = day_topic.with_active_session_start(at(2023, 7, 20, 9))
        assert session_count_between(topic, at(2023, 7, 12), at(2023, 7, 12, 12)) == 3


class TestSessionsBefore:
    def test_no_history(self, at) -> None:
        assert not sessions_before(Topic.new(), at(2023, 7, 12))

    def test_uses_earliest_session(self, day_topic, at) -> None:
        assert sessions_before(day_topic, at(2023, 7, 12, 8))
        assert not sessions_before(day_topic, at(2023, 7, 12, 7, 59))

    def test_falls_back_to_running_session(self, at) -> None:
        topic = Topic.new().with_active_session_start(at(2023, 7, 12, 9))
        assert sessions_before(topic, at(2023, 7, 12, 9))
        assert not sessions_before(topic, at(2023, 7, 12, 8))


def test_total_seconds(day_topic) -> None:
    assert total_seconds(day_topic.sessions) == 3600 + 1800 + 3600
    assert total_seconds(()) == 0
