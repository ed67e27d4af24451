"""Export and import flows around the codec, including file handling."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Sequence

from .config import CodecConfig, resolve_export_dir
from .constants import FILENAME_INVALID_CHARACTERS
from .errors import ICSExportError, ICSFileError, InvalidEncodingError, InvalidStructureError
from .models import CalendarEvent, ValidationCheck
from .parser import parse_events
from .serializer import serialize_events
from .text import normalize_newlines
from .validator import failed_checks, summarize_failures, validate
from .validators import validate_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    text: str
    checks: list[ValidationCheck]
    path: Optional[Path] = None


@dataclass(frozen=True)
class ImportResult:
    events: list[CalendarEvent]
    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationCheck]:
        return failed_checks(self.checks)


_FILENAME_VARIABLES: dict[str, Callable[[Sequence[CalendarEvent], datetime], str]] = {
    "{title}": lambda events, now: events[0].title if events else "event",
    "{year}": lambda events, now: events[0].start.strftime("%Y") if events else "yyyy",
    "{month}": lambda events, now: events[0].start.strftime("%m") if events else "MM",
    "{day}": lambda events, now: events[0].start.strftime("%d") if events else "dd",
    "{timestamp}": lambda events, now: str(int(now.timestamp())),
    "{currentDate}": lambda events, now: now.strftime("%Y%m%d"),
    "{count}": lambda events, now: str(len(events)),
}


def render_export_filename(
    template: str,
    events: Sequence[CalendarEvent],
    now: Optional[datetime] = None,
) -> str:
    """Expand filename variables and replace characters that are not allowed in file names."""
    now = now or datetime.now(tz=timezone.utc)
    filename = template
    for variable, render in _FILENAME_VARIABLES.items():
        if variable in filename:
            filename = filename.replace(variable, render(events, now))
    filename = re.sub(FILENAME_INVALID_CHARACTERS, "_", filename).strip() or "calendar"
    if not filename.lower().endswith(".ics"):
        filename += ".ics"
    return filename


def _ensure_parent_dir(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ICSFileError("Unable to create export directory", path=str(path)) from exc


def _write_text(path: Path, text: str) -> None:
    _ensure_parent_dir(path)
    try:
        # newline="" keeps the CRLF line endings exactly as serialized.
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise ICSFileError("Unable to write calendar file", path=str(path)) from exc


def read_calendar_text(path: Path) -> str:
    if not path.exists():
        raise ICSFileError("Calendar file not found", path=str(path))
    if path.is_dir():
        raise ICSFileError("Calendar path is a directory", path=str(path))
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ICSFileError("Unable to read calendar file", path=str(path)) from exc
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError("Calendar file is not valid UTF-8", path=str(path)) from exc


def export_events(
    events: Sequence[CalendarEvent],
    config: Optional[CodecConfig] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """Serialize ``events`` and refuse the result if any validation check fails."""
    config = config or CodecConfig()
    prepared = [validate_event(event) for event in events]
    text = serialize_events(prepared, config=config, now=now)
    checks = validate(text, config=config)
    failures = failed_checks(checks)
    if failures:
        raise ICSExportError(summarize_failures(checks), checks=failures)
    return ExportResult(text=text, checks=checks)


def export_calendar(
    events: Sequence[CalendarEvent],
    path: Optional[Path] = None,
    config: Optional[CodecConfig] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """Run :func:`export_events` and write the document.

    Without ``path`` the file goes to the export directory, named from the
    configured filename template.
    """
    config = config or CodecConfig()
    result = export_events(events, config=config, now=now)
    if path is None:
        path = resolve_export_dir() / render_export_filename(config.filename_template, events, now=now)
    _write_text(path, result.text)
    logger.info("Exported %d event(s) to %s", len(events), path)
    return ExportResult(text=result.text, checks=result.checks, path=path)


def import_text(text: str, config: Optional[CodecConfig] = None) -> ImportResult:
    """Validate ``text`` as a structure gate, then parse its events."""
    normalized = normalize_newlines(text)
    checks = validate(normalized, config=config)
    structure = next((check for check in checks if check.kind == "structure"), None)
    if structure is None or not structure.passed:
        raise InvalidStructureError(
            structure.message if structure and structure.message else "Invalid iCalendar structure",
            details={"checks": len(checks)},
        )
    events = parse_events(normalized)
    return ImportResult(events=events, checks=checks)


def import_calendar(path: Path, config: Optional[CodecConfig] = None) -> ImportResult:
    result = import_text(read_calendar_text(path), config=config)
    logger.info("Imported %d event(s) from %s", len(result.events), path)
    return result
