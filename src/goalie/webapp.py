"""FastAPI application that exposes the goal tracker as a local JSON API."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .calendar import CalendarAdapter
from .commands import (
    CancelActiveSession,
    Command,
    DeleteGoal,
    DeleteSession,
    Environment,
    MutationResult,
    SetGoal,
    ToggleSession,
)
from .config import TrackerSettings
from .errors import (
    CalendarAdapterError,
    InvalidGoalError,
    InvalidSessionError,
    NotFoundError,
    OrderingError,
    PersistenceError,
)
from .goals import current_goal
from .models import Topic, TopicWeek, Week
from .paths import get_db_path
from .projection import WeekView, project_today, project_week
from .rollover import DayRollover
from .store import TopicStore
from .weeks import shift_week, week_of

logger = logging.getLogger(__name__)


class GoalUpdate(BaseModel):
    duration_seconds: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Daily goal in seconds; null or 0 clears the goal.",
    )

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    env: Optional[Environment] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = Path(db_path or get_db_path())
    resolved_settings = settings or TrackerSettings()
    resolved_env = env or Environment(calendar=resolved_settings.calendar())
    calendar = resolved_env.calendar
    store = TopicStore(resolved_db_path, resolved_env)
    rollover = DayRollover(calendar, now=resolved_env.now)
    clamp = resolved_settings.clamp_active_session

    app = FastAPI(title="Goalie", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path
    app.state.store = store
    app.state.rollover = rollover

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        rollover.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        rollover.stop()
        store.close()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        return {
            "database_path": str(request.app.state.db_path),
            "timezone": str(calendar.timezone),
            "first_weekday": calendar.first_weekday,
            "minimum_days_in_first_week": calendar.minimum_days_in_first_week,
            "clamp_active_session": clamp,
            "default_topic_id": str(resolved_settings.default_topic_id),
            "start_of_today": rollover.start_of_today.isoformat(),
            "rollover_running": rollover.is_running(),
        }

    @app.get("/api/topics")
    def list_topics() -> Dict[str, Any]:
        try:
            topic_ids = store.topic_ids()
        except PersistenceError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return {"topics": [str(topic_id) for topic_id in topic_ids]}

    @app.get("/api/topics/{topic_id}")
    def get_topic(topic_id: UUID) -> Dict[str, Any]:
        return _topic_payload(_load(store, topic_id))

    @app.delete("/api/topics/{topic_id}")
    def remove_topic(topic_id: UUID) -> Dict[str, Any]:
        try:
            store.remove(topic_id)
        except PersistenceError as exc:
            logger.exception("Failed to remove topic %s", topic_id)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return {"removed": str(topic_id)}

    @app.post("/api/topics/{topic_id}/toggle")
    def toggle(topic_id: UUID) -> Dict[str, Any]:
        return _mutation_payload(_apply(store, topic_id, ToggleSession()))

    @app.post("/api/topics/{topic_id}/cancel")
    def cancel(topic_id: UUID) -> Dict[str, Any]:
        return _mutation_payload(_apply(store, topic_id, CancelActiveSession()))

    @app.put("/api/topics/{topic_id}/goal")
    def set_goal(topic_id: UUID, payload: GoalUpdate) -> Dict[str, Any]:
        return _mutation_payload(
            _apply(store, topic_id, SetGoal(payload.duration_seconds))
        )

    @app.delete("/api/topics/{topic_id}/sessions/{session_id}")
    def delete_session(topic_id: UUID, session_id: UUID) -> Dict[str, Any]:
        return _mutation_payload(_apply(store, topic_id, DeleteSession(session_id)))

    @app.delete("/api/topics/{topic_id}/goals/{goal_id}")
    def delete_goal(topic_id: UUID, goal_id: UUID) -> Dict[str, Any]:
        return _mutation_payload(_apply(store, topic_id, DeleteGoal(goal_id)))

    @app.get("/api/topics/{topic_id}/today")
    def today(topic_id: UUID) -> Dict[str, Any]:
        topic = _load(store, topic_id)
        now = resolved_env.now()
        start_of_today = rollover.start_of_today
        if not start_of_today <= now < calendar.next_start_of_day(start_of_today):
            start_of_today = rollover.refresh()
        view = project_today(topic, start_of_today, now, clamp_active_session=clamp)
        return {
            "topic_id": str(topic.id),
            "start_of_today": start_of_today.isoformat(),
            "timer": view.timer_title,
            "tracked_seconds": view.tracked_seconds,
            "goal": view.goal_title,
            "goal_complete": view.is_goal_complete,
            "running": view.is_running,
            "start_stop": view.start_stop_title,
            "session_count": view.session_count,
            "session_count_title": view.session_count_title,
        }

    @app.get("/api/topics/{topic_id}/week")
    def week(
        topic_id: UUID,
        date: Optional[str] = Query(
            default=None,
            description="Any date in the week, YYYY-MM-DD. Defaults to today.",
        ),
        offset: int = Query(
            default=0, description="Weeks to move from that date; negative goes back."
        ),
    ) -> Dict[str, Any]:
        topic = _load(store, topic_id)
        now = resolved_env.now()
        try:
            anchor = _parse_date(date, calendar) if date else now
            target = week_of(anchor, calendar)
            if offset:
                target = shift_week(target, calendar, offset)
        except CalendarAdapterError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        view = project_week(TopicWeek(topic, target), now, clamp_active_session=clamp)
        return _week_payload(target, view)

    return app


def _load(store: TopicStore, topic_id: UUID) -> Topic:
    try:
        return store.get(topic_id)
    except PersistenceError as exc:
        logger.exception("Failed to load topic %s", topic_id)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _apply(store: TopicStore, topic_id: UUID, command: Command) -> MutationResult:
    try:
        return store.apply(topic_id, command)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidGoalError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (OrderingError, InvalidSessionError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except PersistenceError as exc:
        logger.exception("Failed to save topic %s", topic_id)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _parse_date(value: str, calendar: CalendarAdapter) -> datetime:
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc
    return calendar.localize(parsed)


def _topic_payload(topic: Topic) -> Dict[str, Any]:
    goal = current_goal(topic)
    return {
        "id": str(topic.id),
        "active_session_start": (
            topic.active_session_start.isoformat() if topic.active_session_start else None
        ),
        "current_goal_seconds": goal.duration if goal else None,
        "sessions": [
            {
                "id": str(session.id),
                "start": session.start.isoformat(),
                "end": session.end.isoformat(),
                "duration_seconds": session.duration_seconds,
            }
            for session in topic.sessions
        ],
        "goals": [
            {
                "id": str(g.id),
                "start": g.start.isoformat(),
                "duration_seconds": g.duration,
            }
            for g in topic.goals
        ],
    }


def _mutation_payload(result: MutationResult) -> Dict[str, Any]:
    return {
        "changed": result.needs_save,
        "events": [type(event).__name__ for event in result.events],
        "topic": _topic_payload(result.topic),
    }


def _week_payload(week: Week, view: WeekView) -> Dict[str, Any]:
    return {
        "id": view.id,
        "week_id": week.id,
        "title": view.title,
        "subtitle": view.subtitle,
        "year_for_week_of_year": week.year_for_week_of_year,
        "week_of_year": week.week_of_year,
        "month": week.month,
        "first_day_of_week": week.first_day_of_week,
        "days": [
            {
                "start": interval.start_date.isoformat(),
                "end": interval.end_date.isoformat(),
                "label": day.day_label,
                "duration": day.duration,
                "goal": day.goal_label,
                "completion": day.completion.value,
                "tracked_seconds": day.tracked_seconds,
                "goal_seconds": day.goal_seconds,
            }
            for interval, day in zip(week.week_day_intervals, view.days)
        ],
    }
