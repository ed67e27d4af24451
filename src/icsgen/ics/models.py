"""Record types shared by the serializer, parser and validator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


def new_uid() -> str:
    return str(uuid4()).upper()


def to_utc(value: date | datetime) -> datetime:
    """Interpret ``value`` as a UTC instant; naive values are assumed to already be UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


class Alert(str, Enum):
    NONE = "none"
    AT_TIME = "at_time"
    FIVE_MINUTES = "5_minutes"
    TEN_MINUTES = "10_minutes"
    FIFTEEN_MINUTES = "15_minutes"
    THIRTY_MINUTES = "30_minutes"
    ONE_HOUR = "1_hour"
    TWO_HOURS = "2_hours"
    ONE_DAY = "1_day"
    TWO_DAYS = "2_days"
    ONE_WEEK = "1_week"


class Recurrence(str, Enum):
    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    CUSTOM = "CUSTOM"


class WeekDay(str, Enum):
    MONDAY = "MO"
    TUESDAY = "TU"
    WEDNESDAY = "WE"
    THURSDAY = "TH"
    FRIDAY = "FR"
    SATURDAY = "SA"
    SUNDAY = "SU"


class AttachmentType(str, Enum):
    PDF = "application/pdf"
    JPEG = "image/jpeg"
    PNG = "image/png"
    HEIC = "image/heic"

    @property
    def file_extension(self) -> str:
        return _ATTACHMENT_EXTENSIONS[self]

    @classmethod
    def from_mime_type(cls, mime_type: str) -> Optional["AttachmentType"]:
        try:
            return cls(mime_type.strip().lower())
        except ValueError:
            return None


_ATTACHMENT_EXTENSIONS = {
    AttachmentType.PDF: "pdf",
    AttachmentType.JPEG: "jpg",
    AttachmentType.PNG: "png",
    AttachmentType.HEIC: "heic",
}


class ValidationCategory(str, Enum):
    GENERAL = "general"
    STRUCTURE = "structure"
    CONTENT = "content"
    FORMAT = "format"
    ATTENDEES = "attendees"
    ALARMS = "alarms"


@dataclass(frozen=True)
class Attachment:
    filename: str
    data: bytes
    type: AttachmentType
    id: str = field(default_factory=new_uid)


@dataclass(frozen=True)
class CustomRecurrence:
    frequency: Recurrence
    interval: int = 1
    count: Optional[int] = None
    until: date | datetime | None = None
    week_days: frozenset[WeekDay] = frozenset()

    def __post_init__(self) -> None:
        if isinstance(self.until, datetime):
            object.__setattr__(self, "until", to_utc(self.until))


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    start: date | datetime
    end: date | datetime
    all_day: bool = False
    location: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    travel_time: int = 0
    alert: Alert = Alert.FIFTEEN_MINUTES
    recurrence: Recurrence = Recurrence.NONE
    custom_recurrence: Optional[CustomRecurrence] = None
    attachments: tuple[Attachment, ...] = ()
    uid: str = field(default_factory=new_uid)

    def __post_init__(self) -> None:
        # Timed events hold aware UTC datetimes, all-day events hold dates.
        normalize = to_date if self.all_day else to_utc
        object.__setattr__(self, "start", normalize(self.start))
        object.__setattr__(self, "end", normalize(self.end))


@dataclass(frozen=True)
class ValidationCheck:
    kind: str
    description: str
    passed: bool
    message: Optional[str] = None
    category: ValidationCategory = ValidationCategory.GENERAL
