"""Constants for the iCalendar codec."""

from __future__ import annotations

CRLF = "\r\n"

PROD_ID = "-//ICS Generator//EN"
ICAL_VERSION = "2.0"
CALSCALE = "GREGORIAN"
METHOD = "PUBLISH"

DEFAULTS = {
    "FOLD_LIMIT": 75,
    "FOLD_MODE": "bytes",
    "ALARM_DESCRIPTION": "Reminder",
    "FILENAME_TEMPLATE": "{year}-{day}",
}

FOLD_MODES = {"bytes", "chars"}

# Letters accepted by the encoding check on top of printable ASCII.
ALLOWED_EXTRA_CHARACTERS = frozenset("äöüÄÖÜß")

RRULE_FREQUENCIES = ("SECONDLY", "MINUTELY", "HOURLY", "DAILY", "WEEKLY", "MONTHLY", "YEARLY")
WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

ALARM_ACTIONS = ("AUDIO", "DISPLAY", "EMAIL")
EVENT_STATUSES = ("TENTATIVE", "CONFIRMED", "CANCELLED")
PRIORITY_RANGE = (0, 9)

DATE_PROPERTIES = ("DTSTART", "DTEND", "DTSTAMP", "DUE", "COMPLETED", "RECURRENCE-ID")
REQUIRED_EVENT_PROPERTIES = ("SUMMARY", "DTSTART")

ATTACHMENT_URL_SCHEMES = {"http", "https", "ftp"}

FILENAME_INVALID_CHARACTERS = r'[/\\?%*:|"<>]'
