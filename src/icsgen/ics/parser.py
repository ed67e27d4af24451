"""Parse ICS text into calendar events.

The parser walks unfolded content lines with a stack of open components and
collects the properties of the VEVENT currently open. A VEVENT block that is
missing required data is dropped without affecting the rest of the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from .errors import ICSValidationError
from .models import Alert, CalendarEvent, Recurrence, new_uid
from .recurrence import from_rrule_string
from .temporal import decode_duration, decode_instant, trigger_to_alert
from .text import split_logical_lines, unescape_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentLine:
    name: str
    params: dict[str, str]
    value: str


@dataclass
class _EventState:
    properties: dict[str, str] = field(default_factory=dict)
    alarm: Optional[dict[str, str]] = None
    alert: Optional[Alert] = None


def parse_content_line(line: str) -> Optional[ContentLine]:
    head, sep, value = line.partition(":")
    if not sep:
        return None
    segments = head.split(";")
    name = segments[0].strip().upper()
    if not name:
        return None
    params: dict[str, str] = {}
    for segment in segments[1:]:
        key, eq, param_value = segment.partition("=")
        if eq:
            params[key.strip().upper()] = param_value.strip().strip('"')
    return ContentLine(name=name, params=params, value=unescape_text(value))


def _record(target: dict[str, str], prop: ContentLine) -> None:
    if prop.name in target:
        return
    target[prop.name] = prop.value
    for key, value in prop.params.items():
        target[f"{prop.name}_{key}"] = value


def _is_date_valued(properties: dict[str, str], name: str) -> bool:
    return properties.get(f"{name}_VALUE", "").upper() == "DATE"


def _build_event(state: _EventState) -> Optional[CalendarEvent]:
    properties = state.properties
    title = properties.get("SUMMARY")
    if not title:
        logger.debug("Dropping VEVENT without SUMMARY")
        return None
    if "DTSTART" not in properties:
        logger.debug("Dropping VEVENT '%s' without DTSTART", title)
        return None

    all_day = _is_date_valued(properties, "DTSTART")
    try:
        start = decode_instant(properties["DTSTART"].strip(), all_day=all_day)
        end: date | datetime
        if "DTEND" in properties:
            if _is_date_valued(properties, "DTEND") != all_day:
                logger.debug("Dropping VEVENT '%s': DTSTART and DTEND value types differ", title)
                return None
            end = decode_instant(properties["DTEND"].strip(), all_day=all_day)
        elif "DURATION" in properties:
            end = start + decode_duration(properties["DURATION"].strip())
        else:
            logger.debug("Dropping VEVENT '%s' without DTEND or DURATION", title)
            return None
    except ICSValidationError as exc:
        logger.debug("Dropping VEVENT '%s': %s", title, exc.message)
        return None

    if end < start:
        logger.debug("Dropping VEVENT '%s': end is before start", title)
        return None

    recurrence = from_rrule_string(properties["RRULE"]) if "RRULE" in properties else Recurrence.NONE
    return CalendarEvent(
        uid=properties.get("UID") or new_uid(),
        title=title,
        start=start,
        end=end,
        all_day=all_day,
        location=properties.get("LOCATION"),
        notes=properties.get("DESCRIPTION"),
        url=properties.get("URL"),
        alert=state.alert or Alert.NONE,
        recurrence=recurrence,
    )


def parse_events(text: str) -> list[CalendarEvent]:
    """Extract every well-formed VEVENT from ``text``.

    Only the first event for a given UID is kept. Events without a UID get a
    generated one and are always kept.
    """
    events: list[CalendarEvent] = []
    seen_uids: set[str] = set()
    stack: list[str] = []
    state: Optional[_EventState] = None
    dropped = 0

    for line in split_logical_lines(text):
        prop = parse_content_line(line)
        if prop is None:
            continue

        if prop.name == "BEGIN":
            component = prop.value.strip().upper()
            stack.append(component)
            if component == "VEVENT":
                state = _EventState()
            elif component == "VALARM" and state is not None and len(stack) >= 2 and stack[-2] == "VEVENT":
                state.alarm = {}
            continue

        if prop.name == "END":
            component = prop.value.strip().upper()
            if component not in stack:
                continue
            while stack and stack.pop() != component:
                pass
            if component == "VALARM" and state is not None and state.alarm is not None:
                trigger = state.alarm.get("TRIGGER")
                if trigger and state.alert is None:
                    state.alert = trigger_to_alert(trigger)
                state.alarm = None
            elif component == "VEVENT" and state is not None:
                raw_uid = state.properties.get("UID")
                event = _build_event(state)
                state = None
                if event is None:
                    dropped += 1
                elif raw_uid and raw_uid in seen_uids:
                    logger.debug("Skipping duplicate UID %s", raw_uid)
                    dropped += 1
                else:
                    if raw_uid:
                        seen_uids.add(raw_uid)
                    events.append(event)
            continue

        if not stack or state is None:
            continue
        if stack[-1] == "VEVENT":
            _record(state.properties, prop)
        elif stack[-1] == "VALARM" and state.alarm is not None:
            _record(state.alarm, prop)

    logger.debug("Parsed %d event(s), dropped %d", len(events), dropped)
    return events
