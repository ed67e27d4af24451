"""Validation and parsing helpers for building calendar events from user input."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from .errors import InvalidPropertyValueError, MissingRequiredPropertyError
from .models import Alert, CalendarEvent, CustomRecurrence, Recurrence, WeekDay, to_date, to_utc

logger = logging.getLogger(__name__)

DEFAULT_EVENT_LENGTH = timedelta(hours=1)


def validate_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise MissingRequiredPropertyError("Title (SUMMARY) is required", field="title")
    return title


def parse_event_datetime(value: str, all_day: bool, tz: tzinfo = timezone.utc) -> date | datetime:
    if not value:
        raise InvalidPropertyValueError("Date/time value is required", field="datetime")

    if all_day:
        try:
            return date.fromisoformat(value)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(value)
            except ValueError as exc:
                raise InvalidPropertyValueError(
                    "Invalid date format. Use YYYY-MM-DD for all-day events",
                    field="datetime",
                    value=value,
                ) from exc
            return parsed.date()

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed_date = date.fromisoformat(value)
        except ValueError as exc:
            raise InvalidPropertyValueError(
                "Invalid datetime format. Use ISO 8601 (e.g. 2026-02-01T09:00)",
                field="datetime",
                value=value,
            ) from exc
        parsed = datetime.combine(parsed_date, time.min)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(timezone.utc)


def parse_alert(value: Optional[str]) -> Alert:
    if value is None:
        return Alert.NONE
    try:
        return Alert(value.strip().lower())
    except ValueError as exc:
        raise InvalidPropertyValueError(
            f"Invalid alert. Allowed: {', '.join(alert.value for alert in Alert)}",
            field="alert",
            value=value,
        ) from exc


def parse_recurrence(value: Optional[str]) -> Recurrence:
    if value is None:
        return Recurrence.NONE
    try:
        return Recurrence(value.strip().upper())
    except ValueError as exc:
        raise InvalidPropertyValueError(
            f"Invalid recurrence. Allowed: {', '.join(rule.value for rule in Recurrence)}",
            field="recurrence",
            value=value,
        ) from exc


def parse_week_days(value: Optional[str]) -> frozenset[WeekDay]:
    if not value:
        return frozenset()
    days = set()
    for code in value.split(","):
        code = code.strip().upper()
        if not code:
            continue
        try:
            days.add(WeekDay(code))
        except ValueError as exc:
            raise InvalidPropertyValueError(
                f"Invalid weekday '{code}'. Use two-letter codes like MO,WE",
                field="by_day",
                value=value,
            ) from exc
    return frozenset(days)


def build_custom_recurrence(
    frequency: Recurrence,
    interval: int = 1,
    count: Optional[int] = None,
    until: date | datetime | None = None,
    week_days: Iterable[WeekDay] = (),
) -> CustomRecurrence:
    if frequency in (Recurrence.NONE, Recurrence.CUSTOM):
        raise InvalidPropertyValueError(
            "Custom recurrence frequency must be DAILY, WEEKLY, MONTHLY or YEARLY",
            field="frequency",
            value=frequency.value,
        )
    if interval < 1:
        raise InvalidPropertyValueError("interval must be >= 1", field="interval", value=interval)
    if count is not None and count < 1:
        raise InvalidPropertyValueError("count must be >= 1", field="count", value=count)
    if count is not None and until is not None:
        logger.info("Both COUNT and UNTIL given; UNTIL governs the recurrence end")
        count = None
    return CustomRecurrence(
        frequency=frequency,
        interval=interval,
        count=count,
        until=until,
        week_days=frozenset(week_days),
    )


def normalize_event_end(
    start: date | datetime,
    end: Optional[date | datetime],
    all_day: bool,
) -> date | datetime:
    """Fill in a missing end and convert inclusive all-day end dates to exclusive ones."""
    if all_day:
        start_date = to_date(start)
        if end is None:
            return start_date + timedelta(days=1)
        return to_date(end) + timedelta(days=1)
    if end is None:
        return start + DEFAULT_EVENT_LENGTH
    return end


def validate_event(event: CalendarEvent) -> CalendarEvent:
    """Pre-flight checks run before an event is handed to the serializer."""
    validate_title(event.title)

    if not event.uid or "\r" in event.uid or "\n" in event.uid:
        raise InvalidPropertyValueError("UID must be a single non-empty line", field="uid", value=event.uid)

    if event.end < event.start:
        raise InvalidPropertyValueError("End must not be before start", field="end", value=str(event.end))

    if event.travel_time < 0:
        raise InvalidPropertyValueError("Travel time must be >= 0 minutes", field="travel_time", value=event.travel_time)

    if event.recurrence is Recurrence.CUSTOM:
        if event.custom_recurrence is None:
            raise MissingRequiredPropertyError("Custom recurrence requires recurrence parameters", field="custom_recurrence")
        build_custom_recurrence(
            event.custom_recurrence.frequency,
            event.custom_recurrence.interval,
            event.custom_recurrence.count,
            event.custom_recurrence.until,
            event.custom_recurrence.week_days,
        )
    elif event.custom_recurrence is not None:
        raise InvalidPropertyValueError(
            "Recurrence parameters are only allowed for custom recurrence",
            field="custom_recurrence",
            value=event.recurrence.value,
        )

    return event


def validate_create_params(
    title: str,
    start: str,
    end: Optional[str],
    all_day: bool,
    location: Optional[str] = None,
    notes: Optional[str] = None,
    url: Optional[str] = None,
    alert: Optional[str] = None,
    recurrence: Optional[str] = None,
    interval: int = 1,
    count: Optional[int] = None,
    until: Optional[str] = None,
    by_day: Optional[str] = None,
    travel_time: int = 0,
    tz: tzinfo = timezone.utc,
) -> CalendarEvent:
    validated_title = validate_title(title)
    parsed_start = parse_event_datetime(start, all_day=all_day, tz=tz)
    parsed_end = parse_event_datetime(end, all_day=all_day, tz=tz) if end else None
    if all_day and parsed_end is not None and to_date(parsed_end) < to_date(parsed_start):
        raise InvalidPropertyValueError("End date must not be before start date", field="end", value=end)
    normalized_end = normalize_event_end(parsed_start, parsed_end, all_day=all_day)

    rule = parse_recurrence(recurrence)
    custom: Optional[CustomRecurrence] = None
    week_days = parse_week_days(by_day)
    wants_custom = interval > 1 or count is not None or until is not None or bool(week_days)
    if rule is Recurrence.CUSTOM or (rule is not Recurrence.NONE and wants_custom):
        frequency = Recurrence.WEEKLY if rule is Recurrence.CUSTOM else rule
        parsed_until = parse_event_datetime(until, all_day=False, tz=tz) if until else None
        custom = build_custom_recurrence(frequency, interval, count, parsed_until, week_days)
        rule = Recurrence.CUSTOM
    elif wants_custom:
        raise InvalidPropertyValueError(
            "--interval, --count, --until and --by-day need a recurrence",
            field="recurrence",
        )

    return validate_event(
        CalendarEvent(
            title=validated_title,
            start=parsed_start,
            end=normalized_end,
            all_day=all_day,
            location=location,
            notes=notes,
            url=url,
            travel_time=travel_time,
            alert=parse_alert(alert),
            recurrence=rule,
            custom_recurrence=custom,
        )
    )
