"""RRULE encoding, lossy decoding and grammar checking.

The encoder only produces the subset of RFC 5545 recurrence rules the event
model can express (FREQ, INTERVAL, COUNT, UNTIL, BYDAY). The grammar checker
is deliberately independent of it and accepts the wider rule set found in
imported files (BYMONTH, BYMONTHDAY, BYSECOND, BYMINUTE, BYHOUR as well).
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .constants import RRULE_FREQUENCIES, WEEKDAY_CODES
from .models import CustomRecurrence, Recurrence
from .temporal import encode_until

_SIMPLE_RULES = {
    Recurrence.DAILY,
    Recurrence.WEEKLY,
    Recurrence.MONTHLY,
    Recurrence.YEARLY,
}

_BYDAY_RE = re.compile(r"([+-]?[0-9]{1,2})?([A-Z]{2})")
_UNTIL_RE = re.compile(r"[0-9]{8}(T[0-9]{6}Z?)?")
_SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")


def to_rrule_string(rule: Recurrence, custom: Optional[CustomRecurrence] = None) -> Optional[str]:
    """Build the RRULE value for ``rule``; ``None`` means no RRULE line is written."""
    if rule in _SIMPLE_RULES:
        return f"FREQ={rule.value}"
    if rule is not Recurrence.CUSTOM or custom is None:
        return None

    parts = [f"FREQ={custom.frequency.value}"]
    if custom.interval > 1:
        parts.append(f"INTERVAL={custom.interval}")
    if custom.count is not None:
        parts.append(f"COUNT={custom.count}")
    if custom.until is not None:
        parts.append(f"UNTIL={encode_until(custom.until)}")
    if custom.week_days:
        days = sorted(day.value for day in custom.week_days)
        parts.append(f"BYDAY={','.join(days)}")
    return ";".join(parts)


def _rule_parts(text: str) -> dict[str, str]:
    parts: dict[str, str] = {}
    for chunk in text.strip().split(";"):
        key, sep, value = chunk.partition("=")
        if sep:
            parts.setdefault(key.strip().upper(), value.strip().upper())
    return parts


def from_rrule_string(text: str) -> Recurrence:
    """Classify an RRULE value. Interval, count, until and weekdays are not reconstructed."""
    parts = _rule_parts(text)
    freq = parts.get("FREQ")
    for rule in _SIMPLE_RULES:
        if freq == rule.value:
            return rule
    if "BYDAY" in parts or "BYMONTHDAY" in parts:
        return Recurrence.CUSTOM
    return Recurrence.NONE


def _int_list_in_range(low: int, high: int, allow_negative: bool = False) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        for item in value.split(","):
            if _SIGNED_INT_RE.fullmatch(item) is None:
                return False
            number = int(item)
            if allow_negative:
                if number == 0 or abs(number) > high:
                    return False
            elif not low <= number <= high:
                return False
        return True

    return check


def _positive_int(value: str) -> bool:
    return value.isascii() and value.isdigit() and int(value) >= 1


def _valid_byday(value: str) -> bool:
    for item in value.split(","):
        match = _BYDAY_RE.fullmatch(item)
        if match is None or match.group(2) not in WEEKDAY_CODES:
            return False
        ordinal = match.group(1)
        if ordinal is not None and (int(ordinal) == 0 or abs(int(ordinal)) > 53):
            return False
    return True


_VALUE_CHECKS: dict[str, Callable[[str], bool]] = {
    "FREQ": lambda value: value in RRULE_FREQUENCIES,
    "INTERVAL": _positive_int,
    "COUNT": _positive_int,
    "UNTIL": lambda value: _UNTIL_RE.fullmatch(value) is not None,
    "BYSECOND": _int_list_in_range(0, 60),
    "BYMINUTE": _int_list_in_range(0, 59),
    "BYHOUR": _int_list_in_range(0, 23),
    "BYDAY": _valid_byday,
    "BYMONTHDAY": _int_list_in_range(1, 31, allow_negative=True),
    "BYMONTH": _int_list_in_range(1, 12),
}


def check_rrule(text: str) -> tuple[bool, str]:
    """Check an RRULE value against the recurrence grammar. Never raises."""
    has_freq = False
    for chunk in text.strip().split(";"):
        key, sep, value = chunk.partition("=")
        if not sep or not key or not value:
            return False, f"Malformed RRULE part '{chunk}', expected KEY=VALUE"
        name = key.strip().upper()
        value = value.strip().upper()
        if name == "FREQ":
            has_freq = True
        check = _VALUE_CHECKS.get(name)
        if check is not None and not check(value):
            if name == "FREQ":
                return False, f"Invalid FREQ value. Allowed: {', '.join(RRULE_FREQUENCIES)}"
            return False, f"Invalid {name} value '{value}'"
    if not has_freq:
        return False, "FREQ is required in RRULE"
    return True, "Recurrence rule is valid"
