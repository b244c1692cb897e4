from dataclasses import dataclass
from uuid import UUID

import pytest

from goalie.commands import (
    CancelActiveSession,
    DeleteGoal,
    DeleteSession,
    GoalDeleted,
    GoalSet,
    SessionCancelled,
    SessionDeleted,
    SessionStarted,
    SessionStopped,
    SetGoal,
    ToggleSession,
    mutate,
)
from goalie.errors import InvalidGoalError, InvalidSessionError, NotFoundError
from goalie.models import Topic


class TestToggle:
    def test_starts_a_session(self, env, clock) -> None:
        result = mutate(Topic.new(), ToggleSession(), env)
        assert result.topic.active_session_start == clock.now
        assert result.events == (SessionStarted(clock.now),)
        assert result.needs_save

    def test_stops_and_records_the_session(self, env, clock) -> None:
        started = mutate(Topic.new(), ToggleSession(), env).topic
        clock.advance(minutes=45)
        result = mutate(started, ToggleSession(), env)

        assert result.topic.active_session_start is None
        (session,) = result.topic.sessions
        assert session.id == UUID(int=1)
        assert session.duration_seconds == 2700
        assert result.events == (SessionStopped(session),)

    def test_does_not_modify_input(self, env) -> None:
        topic = Topic.new()
        mutate(topic, ToggleSession(), env)
        assert topic.active_session_start is None

    def test_clock_going_backwards_is_rejected(self, env, clock) -> None:
        started = mutate(Topic.new(), ToggleSession(), env).topic
        clock.advance(minutes=-5)
        with pytest.raises(InvalidSessionError):
            mutate(started, ToggleSession(), env)


class TestCancel:
    def test_discards_running_session(self, env, clock) -> None:
        started = mutate(Topic.new(), ToggleSession(), env).topic
        result = mutate(started, CancelActiveSession(), env)
        assert result.topic.active_session_start is None
        assert result.topic.sessions == ()
        assert result.events == (SessionCancelled(clock.now),)

    def test_nothing_running(self, env) -> None:
        result = mutate(Topic.new(), CancelActiveSession(), env)
        assert result.events == ()
        assert not result.needs_save


class TestSetGoal:
    def test_goal_starts_at_local_midnight(self, env, at) -> None:
        result = mutate(Topic.new(), SetGoal(3600), env)
        (goal,) = result.topic.goals
        assert goal.start == at(2023, 7, 12)
        assert goal.duration == 3600
        assert result.events == (GoalSet(goal),)

    def test_same_duration_is_a_no_op(self, env, clock) -> None:
        topic = mutate(Topic.new(), SetGoal(3600), env).topic
        clock.advance(days=1)
        result = mutate(topic, SetGoal(3600), env)
        assert len(result.topic.goals) == 1
        assert result.topic is topic
        assert not result.needs_save

    def test_clearing_without_a_goal_is_a_no_op(self, env) -> None:
        assert not mutate(Topic.new(), SetGoal(None), env).needs_save
        assert not mutate(Topic.new(), SetGoal(0), env).needs_save

    def test_non_finite_goal_is_rejected(self, env) -> None:
        topic = mutate(Topic.new(), SetGoal(3600), env).topic
        with pytest.raises(InvalidGoalError):
            mutate(topic, SetGoal(float("inf")), env)
        assert topic.goals[0].duration == 3600

    def test_change_appends_to_history(self, env, clock) -> None:
        topic = mutate(Topic.new(), SetGoal(3600), env).topic
        clock.advance(days=2)
        topic = mutate(topic, SetGoal(1800), env).topic
        topic = mutate(topic, SetGoal(None), env).topic
        assert [goal.duration for goal in topic.goals] == [3600, 1800, None]

    def test_same_day_changes_keep_order(self, env) -> None:
        topic = mutate(Topic.new(), SetGoal(3600), env).topic
        topic = mutate(topic, SetGoal(7200), env).topic
        assert topic.goals[0].start == topic.goals[1].start
        assert topic.goals[-1].duration == 7200


class TestDelete:
    def test_delete_session(self, env, clock) -> None:
        topic = mutate(Topic.new(), ToggleSession(), env).topic
        clock.advance(minutes=10)
        topic = mutate(topic, ToggleSession(), env).topic
        session_id = topic.sessions[0].id

        result = mutate(topic, DeleteSession(session_id), env)
        assert result.topic.sessions == ()
        assert result.events == (SessionDeleted(session_id),)

    def test_delete_goal(self, env) -> None:
        topic = mutate(Topic.new(), SetGoal(3600), env).topic
        goal_id = topic.goals[0].id
        result = mutate(topic, DeleteGoal(goal_id), env)
        assert result.topic.goals == ()
        assert result.events == (GoalDeleted(goal_id),)

    def test_unknown_ids(self, env) -> None:
        with pytest.raises(NotFoundError):
            mutate(Topic.new(), DeleteSession(UUID(int=5)), env)
        with pytest.raises(NotFoundError):
            mutate(Topic.new(), DeleteGoal(UUID(int=5)), env)


def test_unknown_command(env) -> None:
    @dataclass(frozen=True)
    class Rename:
        name: str

    with pytest.raises(TypeError):
        mutate(Topic.new(), Rename("x"), env)  # type: ignore[arg-type]
