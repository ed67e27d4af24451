"""Conformance checks over raw ICS text.

Each check is a pure function of an :class:`ICSDocument` and returns a
:class:`CheckOutcome`. :func:`validate` runs them in a fixed order and wraps
every outcome into a :class:`~icsgen.ics.models.ValidationCheck`. The report
length depends on the input: conditional checks only run when their marker
appears in the text, and nothing after the basic structure check runs when
that check fails.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Iterable, Optional, Sequence
from urllib.parse import urlparse

from .config import CodecConfig
from .constants import (
    ALARM_ACTIONS,
    ALLOWED_EXTRA_CHARACTERS,
    ATTACHMENT_URL_SCHEMES,
    DATE_PROPERTIES,
    EVENT_STATUSES,
    PRIORITY_RANGE,
    REQUIRED_EVENT_PROPERTIES,
)
from .errors import MalformedDateError
from .models import ValidationCategory, ValidationCheck
from .parser import ContentLine, parse_content_line
from .recurrence import check_rrule
from .temporal import decode_instant, is_valid_duration
from .text import line_length, split_logical_lines, split_physical_lines

logger = logging.getLogger(__name__)

_DATE_VALUE_RE = re.compile(r"[0-9]{8}")
_DATE_TIME_VALUE_RE = re.compile(r"[0-9]{8}(T[0-9]{6}Z?)?")
_MIME_TYPE_RE = re.compile(r"[a-zA-Z0-9]+/[a-zA-Z0-9\-+.]+")
_TZID_RE = re.compile(r"/?[A-Za-z][A-Za-z0-9 ._+\-]*(/[A-Za-z0-9._+\-][A-Za-z0-9 ._+\-]*)*")


@dataclass(frozen=True)
class CheckOutcome:
    passed: bool
    message: str


class ICSDocument:
    """Read-only views over one ICS text, computed lazily and shared by all checks."""

    def __init__(self, text: str, config: CodecConfig) -> None:
        self.text = text
        self.config = config

    @cached_property
    def physical_lines(self) -> list[str]:
        return split_physical_lines(self.text)

    @cached_property
    def logical_lines(self) -> list[str]:
        return split_logical_lines(self.text)

    @cached_property
    def properties(self) -> list[ContentLine]:
        parsed = (parse_content_line(line) for line in self.logical_lines)
        return [prop for prop in parsed if prop is not None]

    def named(self, *names: str) -> list[ContentLine]:
        return [prop for prop in self.properties if prop.name in names]


@dataclass(frozen=True)
class CheckSpec:
    kind: str
    description: str
    category: ValidationCategory
    run: Callable[[ICSDocument], CheckOutcome]
    marker: Optional[str] = None


def check_encoding(doc: ICSDocument) -> CheckOutcome:
    invalid = sorted(
        {
            char
            for char in doc.text
            if not (32 <= ord(char) <= 126 or char in "\r\n" or char in ALLOWED_EXTRA_CHARACTERS)
        }
    )
    if invalid:
        shown = ", ".join(repr(char) for char in invalid[:10])
        return CheckOutcome(False, f"The file contains characters that may not be supported: {shown}")
    return CheckOutcome(True, "Character encoding is valid")


def check_line_length(doc: ICSDocument) -> CheckOutcome:
    limit = doc.config.fold_limit
    mode = doc.config.fold_mode
    long_lines = [
        number
        for number, line in enumerate(doc.physical_lines, start=1)
        if line_length(line, mode) > limit
    ]
    if long_lines:
        unit = "octets" if mode == "bytes" else "characters"
        return CheckOutcome(
            False,
            f"{len(long_lines)} line(s) are longer than {limit} {unit} and not folded (first at line {long_lines[0]})",
        )
    return CheckOutcome(True, "All lines are correctly folded")


def check_structure(doc: ICSDocument) -> CheckOutcome:
    if "BEGIN:VCALENDAR" in doc.text and "END:VCALENDAR" in doc.text:
        return CheckOutcome(True, "The file has a valid iCalendar structure")
    return CheckOutcome(False, "The file must start with BEGIN:VCALENDAR and end with END:VCALENDAR")


def check_nesting(doc: ICSDocument) -> CheckOutcome:
    stack: list[str] = []
    for number, line in enumerate(doc.physical_lines, start=1):
        stripped = line.rstrip()
        if stripped.startswith("BEGIN:"):
            stack.append(stripped[len("BEGIN:"):])
        elif stripped.startswith("END:"):
            component = stripped[len("END:"):]
            if not stack or stack[-1] != component:
                return CheckOutcome(False, f"Invalid nesting at line {number}: END:{component}")
            stack.pop()
    if stack:
        return CheckOutcome(False, f"Components were not closed: {', '.join(stack)}")
    return CheckOutcome(True, "Component nesting is correct")


def check_version(doc: ICSDocument) -> CheckOutcome:
    if "VERSION:2.0" in doc.text:
        return CheckOutcome(True, "Version 2.0 found")
    return CheckOutcome(False, "VERSION:2.0 is required")


def check_event_present(doc: ICSDocument) -> CheckOutcome:
    if "BEGIN:VEVENT" in doc.text and "END:VEVENT" in doc.text:
        return CheckOutcome(True, "At least one event found")
    return CheckOutcome(False, "At least one event (VEVENT) is required")


def check_required_fields(doc: ICSDocument) -> CheckOutcome:
    present = {prop.name for prop in doc.properties}
    missing = [name for name in REQUIRED_EVENT_PROPERTIES if name not in present]
    if missing:
        return CheckOutcome(False, f"Missing required properties: {', '.join(missing)}")
    return CheckOutcome(True, "All required properties are present")


def check_recurrence(doc: ICSDocument) -> CheckOutcome:
    rules = doc.named("RRULE")
    for prop in rules:
        passed, message = check_rrule(prop.value)
        if not passed:
            return CheckOutcome(False, message)
    return CheckOutcome(True, f"{len(rules)} valid recurrence rule(s) found")


def check_duration(doc: ICSDocument) -> CheckOutcome:
    durations = doc.named("DURATION")
    for prop in durations:
        if not is_valid_duration(prop.value.strip()):
            return CheckOutcome(False, f"Invalid DURATION format: {prop.value}")
    return CheckOutcome(True, f"{len(durations)} valid duration(s) found")


def _valid_attachment(prop: ContentLine) -> bool:
    fmttype = prop.params.get("FMTTYPE")
    if fmttype is not None and _MIME_TYPE_RE.fullmatch(fmttype) is None:
        return False
    value = prop.value.strip()
    if value.lower().startswith("data:"):
        return "," in value
    parsed = urlparse(value)
    return parsed.scheme.lower() in ATTACHMENT_URL_SCHEMES and bool(parsed.netloc)


def check_attachments(doc: ICSDocument) -> CheckOutcome:
    attachments = doc.named("ATTACH")
    for prop in attachments:
        if not _valid_attachment(prop):
            return CheckOutcome(False, "Attachments must be either a URL or a data: URI")
    return CheckOutcome(True, f"{len(attachments)} valid attachment(s) found")


def _valid_trigger(prop: ContentLine) -> bool:
    if prop.params.get("VALUE", "").upper() == "DATE-TIME":
        try:
            decode_instant(prop.value.strip(), all_day=False)
        except MalformedDateError:
            return False
        return True
    return is_valid_duration(prop.value.strip())


def check_alarms(doc: ICSDocument) -> CheckOutcome:
    in_alarm = False
    action: Optional[str] = None
    trigger: Optional[ContentLine] = None
    alarm_count = 0

    for prop in doc.properties:
        if prop.name == "BEGIN" and prop.value.strip() == "VALARM":
            in_alarm, action, trigger = True, None, None
            alarm_count += 1
        elif prop.name == "END" and prop.value.strip() == "VALARM":
            if action is None or trigger is None:
                return CheckOutcome(False, "VALARM requires ACTION and TRIGGER")
            if action not in ALARM_ACTIONS:
                return CheckOutcome(False, f"Invalid ACTION. Allowed: {', '.join(ALARM_ACTIONS)}")
            if not _valid_trigger(trigger):
                return CheckOutcome(False, f"Invalid TRIGGER value: {trigger.value}")
            in_alarm = False
        elif in_alarm:
            if prop.name == "ACTION" and action is None:
                action = prop.value.strip().upper()
            elif prop.name == "TRIGGER" and trigger is None:
                trigger = prop

    if in_alarm:
        return CheckOutcome(False, "VALARM block is not closed")
    return CheckOutcome(True, f"{alarm_count} valid alarm(s) found")


def check_dates(doc: ICSDocument) -> CheckOutcome:
    dates = doc.named(*DATE_PROPERTIES)
    if not dates:
        return CheckOutcome(False, "No date values found")
    for prop in dates:
        value = prop.value.strip()
        date_only = prop.params.get("VALUE", "").upper() == "DATE"
        pattern = _DATE_VALUE_RE if date_only else _DATE_TIME_VALUE_RE
        if pattern.fullmatch(value) is None:
            return CheckOutcome(False, f"Invalid date format in {prop.name}: {value}")
    return CheckOutcome(True, f"{len(dates)} valid date value(s) found")


def is_valid_tzid(tzid: str) -> bool:
    return _TZID_RE.fullmatch(tzid.strip()) is not None


def check_timezone(doc: ICSDocument) -> CheckOutcome:
    defined: set[str] = set()
    stack: list[str] = []
    for prop in doc.properties:
        if prop.name == "BEGIN":
            stack.append(prop.value.strip())
        elif prop.name == "END":
            if stack:
                stack.pop()
        elif prop.name == "TZID" and "VTIMEZONE" in stack:
            if not is_valid_tzid(prop.value):
                return CheckOutcome(False, f"Invalid timezone: {prop.value}")
            defined.add(prop.value.strip())

    referenced = [prop.params["TZID"] for prop in doc.properties if "TZID" in prop.params]
    for tzid in referenced:
        if not is_valid_tzid(tzid):
            return CheckOutcome(False, f"Invalid timezone: {tzid}")
        if tzid.strip() not in defined:
            return CheckOutcome(False, f"TZID {tzid} is used but no VTIMEZONE definition was found")
    return CheckOutcome(True, f"{len(defined)} valid timezone(s) found")


def check_categories(doc: ICSDocument) -> CheckOutcome:
    count = 0
    for prop in doc.named("CATEGORIES"):
        entries = [entry.strip() for entry in prop.value.split(",")]
        if not all(entries):
            return CheckOutcome(False, "CATEGORIES contains an empty category")
        count += len(entries)
    return CheckOutcome(True, f"{count} categories found")


def check_priority(doc: ICSDocument) -> CheckOutcome:
    low, high = PRIORITY_RANGE
    for prop in doc.named("PRIORITY"):
        value = prop.value.strip()
        if not (value.isascii() and value.isdigit()) or not low <= int(value) <= high:
            return CheckOutcome(False, f"Priority must be between {low} and {high}")
    return CheckOutcome(True, "Priority is valid")


def check_status(doc: ICSDocument) -> CheckOutcome:
    for prop in doc.named("STATUS"):
        if prop.value.strip() not in EVENT_STATUSES:
            return CheckOutcome(False, f"Invalid status. Allowed: {', '.join(EVENT_STATUSES)}")
    return CheckOutcome(True, "Status is valid")


def check_attendees(doc: ICSDocument) -> CheckOutcome:
    attendees = doc.named("ATTENDEE")
    for prop in attendees:
        if not prop.value.strip().lower().startswith("mailto:"):
            return CheckOutcome(False, "Attendees must have an e-mail address (mailto:)")
    return CheckOutcome(True, f"{len(attendees)} valid attendee(s) found")


BASELINE_CHECKS: tuple[CheckSpec, ...] = (
    CheckSpec("encoding", "Character encoding", ValidationCategory.FORMAT, check_encoding),
    CheckSpec("line_length", "Line length and folding", ValidationCategory.FORMAT, check_line_length),
)

STRUCTURE_CHECK = CheckSpec("structure", "Basic iCalendar structure", ValidationCategory.STRUCTURE, check_structure)

DOCUMENT_CHECKS: tuple[CheckSpec, ...] = (
    CheckSpec("nesting", "Component nesting", ValidationCategory.STRUCTURE, check_nesting),
    CheckSpec("version", "iCalendar version", ValidationCategory.GENERAL, check_version),
    CheckSpec("event", "Calendar event", ValidationCategory.STRUCTURE, check_event_present),
    CheckSpec("required_fields", "Required event properties", ValidationCategory.CONTENT, check_required_fields),
    CheckSpec("recurrence", "Recurrence rule (RRULE)", ValidationCategory.CONTENT, check_recurrence, marker="RRULE"),
    CheckSpec("duration", "Event duration", ValidationCategory.CONTENT, check_duration, marker="DURATION"),
    CheckSpec("attachments", "File attachments", ValidationCategory.CONTENT, check_attachments, marker="ATTACH"),
    CheckSpec("alarms", "Event alarms", ValidationCategory.ALARMS, check_alarms, marker="BEGIN:VALARM"),
    CheckSpec("dates", "Date formats", ValidationCategory.CONTENT, check_dates),
    CheckSpec("timezone", "Timezone definition", ValidationCategory.CONTENT, check_timezone, marker="TZID"),
    CheckSpec("categories", "Event categories", ValidationCategory.CONTENT, check_categories, marker="CATEGORIES"),
    CheckSpec("priority", "Event priority", ValidationCategory.CONTENT, check_priority, marker="PRIORITY"),
    CheckSpec("status", "Event status", ValidationCategory.CONTENT, check_status, marker="STATUS"),
    CheckSpec("attendees", "Event attendees", ValidationCategory.ATTENDEES, check_attendees, marker="ATTENDEE"),
)


def run_check(spec: CheckSpec, doc: ICSDocument) -> ValidationCheck:
    try:
        outcome = spec.run(doc)
    except Exception as exc:
        logger.exception("Validation check %s raised", spec.kind)
        outcome = CheckOutcome(False, f"Check could not be completed: {exc}")
    return ValidationCheck(
        kind=spec.kind,
        description=spec.description,
        passed=outcome.passed,
        message=outcome.message,
        category=spec.category,
    )


def validate(text: str, config: Optional[CodecConfig] = None) -> list[ValidationCheck]:
    """Audit ``text`` and return the ordered list of checks that were run."""
    doc = ICSDocument(text, config or CodecConfig())
    checks = [run_check(spec, doc) for spec in BASELINE_CHECKS]

    structure = run_check(STRUCTURE_CHECK, doc)
    checks.append(structure)
    if not structure.passed:
        logger.debug("Basic structure check failed; skipping remaining checks")
        return checks

    for spec in DOCUMENT_CHECKS:
        if spec.marker is not None and spec.marker not in text:
            continue
        checks.append(run_check(spec, doc))

    logger.debug("Validation ran %d check(s), %d failed", len(checks), len(failed_checks(checks)))
    return checks


def failed_checks(checks: Iterable[ValidationCheck]) -> list[ValidationCheck]:
    return [check for check in checks if not check.passed]


def summarize_failures(checks: Sequence[ValidationCheck]) -> str:
    return ", ".join(f"{check.description}: {check.message or ''}" for check in failed_checks(checks))
