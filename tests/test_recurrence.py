from datetime import datetime, timezone

import pytest

from icsgen.ics.models import CustomRecurrence, Recurrence, WeekDay
from icsgen.ics.recurrence import check_rrule, from_rrule_string, to_rrule_string


@pytest.mark.parametrize(
    "rule", [Recurrence.DAILY, Recurrence.WEEKLY, Recurrence.MONTHLY, Recurrence.YEARLY]
)
def test_simple_rules_encode_frequency_only(rule):
    assert to_rrule_string(rule) == f"FREQ={rule.value}"


def test_custom_rule_encodes_interval_and_weekdays():
    custom = CustomRecurrence(
        frequency=Recurrence.WEEKLY,
        interval=2,
        week_days=frozenset({WeekDay.WEDNESDAY, WeekDay.MONDAY}),
    )

    assert to_rrule_string(Recurrence.CUSTOM, custom) == "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE"


def test_custom_rule_encodes_count_and_until():
    custom = CustomRecurrence(
        frequency=Recurrence.DAILY,
        count=5,
        until=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )

    assert to_rrule_string(Recurrence.CUSTOM, custom) == "FREQ=DAILY;COUNT=5;UNTIL=20260301T000000Z"


def test_interval_of_one_is_omitted():
    custom = CustomRecurrence(frequency=Recurrence.MONTHLY, interval=1)

    assert to_rrule_string(Recurrence.CUSTOM, custom) == "FREQ=MONTHLY"


def test_no_rule_and_bare_custom_produce_nothing():
    assert to_rrule_string(Recurrence.NONE) is None
    assert to_rrule_string(Recurrence.CUSTOM) is None


def test_decoding_keeps_only_the_frequency():
    assert from_rrule_string("FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE") is Recurrence.WEEKLY
    assert from_rrule_string("freq=daily") is Recurrence.DAILY


def test_decoding_unsupported_frequency():
    assert from_rrule_string("FREQ=HOURLY") is Recurrence.NONE
    assert from_rrule_string("FREQ=HOURLY;BYDAY=MO") is Recurrence.CUSTOM
    assert from_rrule_string("FREQ=MINUTELY;BYMONTHDAY=1") is Recurrence.CUSTOM


@pytest.mark.parametrize(
    "text",
    [
        "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE",
        "FREQ=MONTHLY;BYMONTHDAY=-1",
        "FREQ=DAILY;BYDAY=1MO,-1FR",
        "FREQ=DAILY;UNTIL=20260101",
        "FREQ=DAILY;UNTIL=20260101T000000Z",
        "FREQ=YEARLY;BYMONTH=1,12;COUNT=3",
        "FREQ=HOURLY;BYHOUR=0,23;BYMINUTE=59;BYSECOND=60",
        "FREQ=WEEKLY;WKST=SU",
    ],
)
def test_check_rrule_accepts_valid_rules(text):
    passed, _ = check_rrule(text)

    assert passed


@pytest.mark.parametrize(
    "text, expected",
    [
        ("INTERVAL=2", "FREQ is required"),
        ("FREQ=FORTNIGHTLY", "Invalid FREQ"),
        ("FREQ=YEARLY;BYMONTH=13", "BYMONTH"),
        ("FREQ=MONTHLY;BYMONTHDAY=0", "BYMONTHDAY"),
        ("FREQ=DAILY;BYDAY=XX", "BYDAY"),
        ("FREQ=DAILY;COUNT=0", "COUNT"),
        ("FREQ=DAILY;INTERVAL=abc", "INTERVAL"),
        ("FREQ=DAILY;BYHOUR=24", "BYHOUR"),
        ("FREQ=DAILY;UNTIL=2026-01-01", "UNTIL"),
        ("FREQ", "Malformed"),
        ("FREQ=DAILY;COUNT=²", "COUNT"),
        ("FREQ=DAILY;INTERVAL=٣", "INTERVAL"),
        ("FREQ=DAILY;BYHOUR=²", "BYHOUR"),
        ("FREQ=DAILY;BYDAY=١MO", "BYDAY"),
    ],
)
def test_check_rrule_reports_the_offending_part(text, expected):
    passed, message = check_rrule(text)

    assert not passed
    assert expected in message
