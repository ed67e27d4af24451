"""Date, date-time, duration and alarm-trigger encoding."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from icalendar.prop import vDate, vDatetime, vDuration

from .errors import InvalidPropertyValueError, MalformedDateError
from .models import Alert, to_date, to_utc

_DATE_RE = re.compile(r"[0-9]{8}")
_DATETIME_RE = re.compile(r"[0-9]{8}T[0-9]{6}Z")
_DURATION_RE = re.compile(
    r"(?P<sign>[+-])?P"
    r"(?:(?P<weeks>[0-9]+)W|(?P<days>[0-9]+)D)?"
    r"(?:(?P<time>T)(?:(?P<hours>[0-9]+)H)?(?:(?P<minutes>[0-9]+)M)?(?:(?P<seconds>[0-9]+)S)?)?"
)

ALERT_TRIGGERS: dict[Alert, Optional[str]] = {
    Alert.NONE: None,
    Alert.AT_TIME: "-PT0M",
    Alert.FIVE_MINUTES: "-PT5M",
    Alert.TEN_MINUTES: "-PT10M",
    Alert.FIFTEEN_MINUTES: "-PT15M",
    Alert.THIRTY_MINUTES: "-PT30M",
    Alert.ONE_HOUR: "-PT1H",
    Alert.TWO_HOURS: "-PT2H",
    Alert.ONE_DAY: "-P1D",
    Alert.TWO_DAYS: "-P2D",
    Alert.ONE_WEEK: "-P1W",
}

_missing_alerts = set(Alert) - set(ALERT_TRIGGERS)
if _missing_alerts:  # pragma: no cover - guards edits to the table
    raise RuntimeError(f"ALERT_TRIGGERS is missing {sorted(a.name for a in _missing_alerts)}")


def encode_instant(value: date | datetime, all_day: bool) -> str:
    if all_day:
        return vDate(to_date(value)).to_ical().decode("utf-8")
    return vDatetime(to_utc(value)).to_ical().decode("utf-8")


def decode_instant(text: str, all_day: bool) -> date | datetime:
    pattern = _DATE_RE if all_day else _DATETIME_RE
    if pattern.fullmatch(text) is None:
        expected = "YYYYMMDD" if all_day else "YYYYMMDDTHHMMSSZ"
        raise MalformedDateError(f"Expected {expected}, got '{text}'", field="date", value=text)
    try:
        if all_day:
            return vDate.from_ical(text)
        return vDatetime.from_ical(text).astimezone(timezone.utc)
    except ValueError as exc:
        raise MalformedDateError(f"Not a valid calendar date: '{text}'", field="date", value=text) from exc


def encode_until(value: date | datetime) -> str:
    """RRULE UNTIL values are always written as UTC instants."""
    return encode_instant(value, all_day=False)


def encode_duration(value: timedelta) -> str:
    return vDuration(value).to_ical().decode("utf-8")


def decode_duration(text: str) -> timedelta:
    """Decode a DURATION value.

    icalendar accepts ``P``, ``PT`` and week-plus-day forms, so the grammar is
    checked here before the value is handed to it.
    """
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise InvalidPropertyValueError(f"Invalid duration '{text}'", field="duration", value=text)

    parts = match.groupdict()
    date_parts = [parts["weeks"], parts["days"]]
    time_parts = [parts["hours"], parts["minutes"], parts["seconds"]]
    if parts["time"] and not any(time_parts):
        raise InvalidPropertyValueError(f"Duration '{text}' has no time component after T", field="duration", value=text)
    if not any(date_parts) and not any(time_parts):
        raise InvalidPropertyValueError(f"Duration '{text}' has no components", field="duration", value=text)

    try:
        return vDuration.from_ical(text)
    except ValueError as exc:
        raise InvalidPropertyValueError(f"Invalid duration '{text}'", field="duration", value=text) from exc


def is_valid_duration(text: str) -> bool:
    try:
        decode_duration(text)
    except InvalidPropertyValueError:
        return False
    return True


# Keyed by offset so that "-P7D" or "PT0S" from other producers map like "-P1W" and "-PT0M".
_TRIGGER_ALERTS = {decode_duration(trigger): alert for alert, trigger in ALERT_TRIGGERS.items() if trigger is not None}


def alert_to_trigger(alert: Alert) -> Optional[str]:
    return ALERT_TRIGGERS[alert]


def trigger_to_alert(trigger: str) -> Alert:
    try:
        offset = decode_duration(trigger.strip())
    except InvalidPropertyValueError:
        return Alert.NONE
    return _TRIGGER_ALERTS.get(offset, Alert.NONE)
