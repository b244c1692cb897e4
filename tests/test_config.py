from uuid import UUID

from goalie.config import TrackerSettings
from goalie.models import DEFAULT_TOPIC_ID
from goalie.paths import DB_ENV_VAR, get_db_path


def test_defaults_follow_tz_variable(monkeypatch) -> None:
    monkeypatch.setenv("TZ", "Europe/Paris")
    settings = TrackerSettings()
    assert settings.timezone == "Europe/Paris"
    assert settings.first_weekday == 1
    assert settings.default_topic_id == DEFAULT_TOPIC_ID
    assert not settings.clamp_active_session


def test_defaults_to_utc(monkeypatch) -> None:
    monkeypatch.delenv("TZ", raising=False)
    assert TrackerSettings().timezone == "UTC"


def test_from_options() -> None:
    settings = TrackerSettings.from_options(
        timezone="Asia/Tokyo",
        iso_weeks=True,
        clamp_active_session=True,
        topic_id=UUID(int=3),
    )
    calendar = settings.calendar()
    assert str(calendar.timezone) == "Asia/Tokyo"
    assert (calendar.first_weekday, calendar.minimum_days_in_first_week) == (2, 4)
    assert settings.clamp_active_session
    assert settings.default_topic_id == UUID(int=3)


def test_explicit_first_weekday_wins() -> None:
    settings = TrackerSettings.from_options(timezone="UTC", first_weekday=7, iso_weeks=True)
    assert settings.first_weekday == 7
    assert settings.minimum_days_in_first_week == 4


def test_db_path_override(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv(DB_ENV_VAR, str(tmp_path / "custom.sqlite3"))
    assert get_db_path() == tmp_path / "custom.sqlite3"


def test_db_path_default(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv(DB_ENV_VAR, raising=False)
    monkeypatch.setattr("goalie.paths.get_data_dir", lambda: tmp_path)
    assert get_db_path() == tmp_path / "topics.sqlite3"
