from datetime import date, datetime, timedelta, timezone

import pytest

from icsgen.ics.config import resolve_timezone
from icsgen.ics.errors import InvalidPropertyValueError, MissingRequiredPropertyError
from icsgen.ics.models import Alert, CalendarEvent, CustomRecurrence, Recurrence, WeekDay
from icsgen.ics.validators import (
    build_custom_recurrence,
    parse_event_datetime,
    parse_week_days,
    validate_create_params,
    validate_event,
)


def test_timed_event_defaults_to_one_hour():
    event = validate_create_params(title="Standup", start="2026-02-01T09:00", end=None, all_day=False)

    assert event.start == datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc)
    assert event.end == event.start + timedelta(hours=1)
    assert event.alert is Alert.NONE
    assert event.recurrence is Recurrence.NONE


def test_naive_input_uses_given_timezone():
    event = validate_create_params(
        title="Standup",
        start="2026-02-01T09:00",
        end="2026-02-01T09:15",
        all_day=False,
        tz=resolve_timezone("UTC+02:00"),
    )

    assert event.start == datetime(2026, 2, 1, 7, 0, tzinfo=timezone.utc)
    assert event.end == datetime(2026, 2, 1, 7, 15, tzinfo=timezone.utc)


def test_explicit_offset_wins_over_timezone():
    parsed = parse_event_datetime("2026-02-01T09:00+01:00", all_day=False, tz=resolve_timezone("UTC+05:00"))

    assert parsed == datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)


def test_all_day_end_is_inclusive_on_input():
    event = validate_create_params(title="Holiday", start="2026-12-24", end="2026-12-25", all_day=True)

    assert event.start == date(2026, 12, 24)
    assert event.end == date(2026, 12, 26)


def test_all_day_without_end_lasts_one_day():
    event = validate_create_params(title="Holiday", start="2026-12-24T15:00", end=None, all_day=True)

    assert event.start == date(2026, 12, 24)
    assert event.end == date(2026, 12, 25)


def test_all_day_end_before_start_is_rejected():
    with pytest.raises(InvalidPropertyValueError):
        validate_create_params(title="Holiday", start="2026-12-24", end="2026-12-23", all_day=True)


def test_timed_end_before_start_is_rejected():
    with pytest.raises(InvalidPropertyValueError):
        validate_create_params(title="Standup", start="2026-02-01T09:00", end="2026-02-01T08:00", all_day=False)


@pytest.mark.parametrize("title", ["", "   "])
def test_blank_title_is_rejected(title):
    with pytest.raises(MissingRequiredPropertyError):
        validate_create_params(title=title, start="2026-02-01T09:00", end=None, all_day=False)


def test_unparseable_start_is_rejected():
    with pytest.raises(InvalidPropertyValueError) as exc_info:
        validate_create_params(title="Standup", start="next tuesday", end=None, all_day=False)

    assert exc_info.value.value == "next tuesday"


def test_alert_and_simple_recurrence_are_parsed():
    event = validate_create_params(
        title="Standup",
        start="2026-02-01T09:00",
        end=None,
        all_day=False,
        alert="1_HOUR",
        recurrence="daily",
    )

    assert event.alert is Alert.ONE_HOUR
    assert event.recurrence is Recurrence.DAILY
    assert event.custom_recurrence is None


def test_unknown_alert_is_rejected():
    with pytest.raises(InvalidPropertyValueError):
        validate_create_params(title="Standup", start="2026-02-01T09:00", end=None, all_day=False, alert="3_minutes")


def test_recurrence_parameters_make_the_rule_custom():
    event = validate_create_params(
        title="Standup",
        start="2026-02-01T09:00",
        end=None,
        all_day=False,
        recurrence="WEEKLY",
        interval=2,
        by_day="mo,WE",
    )

    assert event.recurrence is Recurrence.CUSTOM
    assert event.custom_recurrence == CustomRecurrence(
        frequency=Recurrence.WEEKLY,
        interval=2,
        week_days=frozenset({WeekDay.MONDAY, WeekDay.WEDNESDAY}),
    )


def test_custom_recurrence_defaults_to_weekly():
    event = validate_create_params(
        title="Standup",
        start="2026-02-01T09:00",
        end=None,
        all_day=False,
        recurrence="CUSTOM",
        count=4,
    )

    assert event.custom_recurrence.frequency is Recurrence.WEEKLY
    assert event.custom_recurrence.count == 4


def test_recurrence_parameters_without_rule_are_rejected():
    with pytest.raises(InvalidPropertyValueError):
        validate_create_params(title="Standup", start="2026-02-01T09:00", end=None, all_day=False, count=3)


def test_until_wins_over_count():
    custom = build_custom_recurrence(
        Recurrence.DAILY,
        count=3,
        until=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )

    assert custom.count is None
    assert custom.until == datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"frequency": Recurrence.NONE},
        {"frequency": Recurrence.CUSTOM},
        {"frequency": Recurrence.DAILY, "interval": 0},
        {"frequency": Recurrence.DAILY, "count": 0},
    ],
)
def test_invalid_custom_recurrence(kwargs):
    with pytest.raises(InvalidPropertyValueError):
        build_custom_recurrence(**kwargs)


def test_parse_week_days():
    assert parse_week_days(None) == frozenset()
    assert parse_week_days("fr, ,SA") == frozenset({WeekDay.FRIDAY, WeekDay.SATURDAY})
    with pytest.raises(InvalidPropertyValueError):
        parse_week_days("MO,XX")


def _event(**overrides) -> CalendarEvent:
    values = dict(
        title="Review",
        start=datetime(2026, 2, 1, 9, 0, tzinfo=timezone.utc),
        end=datetime(2026, 2, 1, 10, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return CalendarEvent(**values)


def test_validate_event_passes_valid_event_through():
    event = _event()

    assert validate_event(event) is event


def test_validate_event_accepts_all_day_datetimes():
    event = _event(all_day=True, end=datetime(2026, 2, 2, 0, 0, tzinfo=timezone.utc))

    checked = validate_event(event)

    assert checked.start == date(2026, 2, 1)
    assert checked.end == date(2026, 2, 2)


@pytest.mark.parametrize("uid", ["", "EVENT-1\r\nSUMMARY:Injected", "EVENT-1\nX-EXTRA:1", "EVENT-1\r"])
def test_validate_event_rejects_uid_with_line_breaks(uid):
    with pytest.raises(InvalidPropertyValueError) as excinfo:
        validate_event(_event(uid=uid))

    assert excinfo.value.details["field"] == "uid"


def test_validate_event_rejects_bad_records():
    with pytest.raises(InvalidPropertyValueError):
        validate_event(_event(end=datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)))
    with pytest.raises(InvalidPropertyValueError):
        validate_event(_event(travel_time=-5))
    with pytest.raises(MissingRequiredPropertyError):
        validate_event(_event(recurrence=Recurrence.CUSTOM))
    with pytest.raises(InvalidPropertyValueError):
        validate_event(
            _event(recurrence=Recurrence.DAILY, custom_recurrence=CustomRecurrence(frequency=Recurrence.DAILY))
        )
