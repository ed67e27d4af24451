"""Serialize calendar events into a VCALENDAR document."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from icalendar import Alarm, Calendar, Event
from icalendar.prop import vInline, vText

from .config import CodecConfig
from .constants import CALSCALE, CRLF, ICAL_VERSION, METHOD
from .models import Alert, CalendarEvent, Recurrence, to_date, to_utc
from .recurrence import to_rrule_string
from .temporal import alert_to_trigger
from .text import fold_line, normalize_newlines

logger = logging.getLogger(__name__)


def _text(value: str) -> vText:
    return vText(normalize_newlines(value))


def _add_instant(component: Event, name: str, value, all_day: bool) -> None:
    component.add(name, to_date(value) if all_day else to_utc(value))


def _build_alarm(event: CalendarEvent, config: CodecConfig) -> Alarm:
    alarm = Alarm()
    alarm.add("action", "DISPLAY")
    alarm.add("description", _text(config.alarm_description))
    # Trigger strings are written exactly as the alert table spells them.
    alarm["TRIGGER"] = vInline(alert_to_trigger(event.alert))
    return alarm


def _build_event(event: CalendarEvent, stamp: datetime, config: CodecConfig) -> Event:
    vevent = Event()
    vevent.add("uid", _text(event.uid))
    vevent.add("dtstamp", stamp)
    _add_instant(vevent, "dtstart", event.start, event.all_day)
    _add_instant(vevent, "dtend", event.end, event.all_day)
    vevent.add("summary", _text(event.title))
    for name, value in (("location", event.location), ("description", event.notes), ("url", event.url)):
        if value:
            vevent.add(name, _text(value))

    if event.recurrence is not Recurrence.NONE:
        rrule = to_rrule_string(event.recurrence, event.custom_recurrence)
        if rrule is not None:
            # vRecur would reorder the parts; the rule keeps FREQ, INTERVAL, COUNT, UNTIL, BYDAY.
            vevent["RRULE"] = vInline(rrule)
        else:
            logger.debug("Event %s has custom recurrence without parameters; RRULE omitted", event.uid)

    if event.alert is not Alert.NONE:
        vevent.add_component(_build_alarm(event, config))
    return vevent


def _build_calendar(events: Iterable[CalendarEvent], stamp: datetime, config: CodecConfig) -> Calendar:
    calendar = Calendar()
    calendar.add("version", ICAL_VERSION)
    calendar.add("prodid", config.prod_id)
    calendar.add("calscale", CALSCALE)
    calendar.add("method", METHOD)
    for event in events:
        calendar.add_component(_build_event(event, stamp, config))
    return calendar


def serialize_events(
    events: Iterable[CalendarEvent],
    config: Optional[CodecConfig] = None,
    now: Optional[datetime] = None,
) -> str:
    """Render ``events`` as one VCALENDAR document with CRLF line endings.

    ``now`` is the DTSTAMP value for every event and defaults to the current
    UTC time, so two calls with the same events differ in DTSTAMP only.

    The document is built with icalendar. Its content lines are folded with
    the configured limit and unit instead of ``to_ical()``'s fixed 75 octets.
    """
    config = config or CodecConfig()
    stamp = to_utc(now or datetime.now(tz=timezone.utc))
    calendar = _build_calendar(events, stamp, config)

    lines = [line for line in calendar.content_lines(sorted=False) if line]
    logger.debug("Serialized %d event(s) into %d content line(s)", len(calendar.subcomponents), len(lines))
    folded = [fold_line(line, limit=config.fold_limit, mode=config.fold_mode) for line in lines]
    return CRLF.join(folded) + CRLF


def serialize_event(
    event: CalendarEvent,
    config: Optional[CodecConfig] = None,
    now: Optional[datetime] = None,
) -> str:
    return serialize_events([event], config=config, now=now)
