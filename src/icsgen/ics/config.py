"""Configuration helpers for the iCalendar codec."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import DEFAULTS, FOLD_MODES, PROD_ID
from .errors import ICSValidationError


@dataclass(frozen=True)
class CodecConfig:
    prod_id: str = PROD_ID
    fold_limit: int = DEFAULTS["FOLD_LIMIT"]
    fold_mode: str = DEFAULTS["FOLD_MODE"]
    alarm_description: str = DEFAULTS["ALARM_DESCRIPTION"]
    filename_template: str = DEFAULTS["FILENAME_TEMPLATE"]


def default_export_dir() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME")
    base_dir = Path(data_home).expanduser() if data_home else Path.home() / ".local" / "share"
    return base_dir / "icsgen"


def resolve_export_dir(path: Optional[Path] = None) -> Path:
    if path is None:
        configured = os.getenv("ICSGEN_EXPORT_DIR")
        path = Path(configured) if configured else default_export_dir()
    return path.expanduser().resolve()


_UTC_OFFSET_RE = re.compile(r"^UTC([+-])(\d{2}):?(\d{2})$")


def resolve_timezone(tzid: Optional[str]) -> tzinfo:
    """Resolve a user-supplied timezone for interpreting naive input times."""
    if tzid is None or not tzid.strip():
        return timezone.utc
    tzid = tzid.strip()
    if tzid.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(tzid)
    except (ZoneInfoNotFoundError, ValueError):
        pass
    match = _UTC_OFFSET_RE.match(tzid)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        if sign == "-":
            offset = -offset
        return timezone(offset, name=tzid)
    raise ICSValidationError(
        "Invalid timezone. Use an IANA name like Europe/Berlin, UTC or UTC+02:00.",
        field="tz",
        value=tzid,
    )


def _parse_fold_limit(raw: str) -> int:
    try:
        limit = int(raw)
    except ValueError as exc:
        raise ICSValidationError("ICSGEN_FOLD_LIMIT must be an integer", field="fold_limit", value=raw) from exc
    # One octet for the continuation space plus at least one of content.
    if limit < 2:
        raise ICSValidationError("ICSGEN_FOLD_LIMIT must be >= 2", field="fold_limit", value=limit)
    return limit


def load_config() -> CodecConfig:
    prod_id = os.getenv("ICSGEN_PRODID", PROD_ID).strip()
    if not prod_id:
        raise ICSValidationError("ICSGEN_PRODID must not be empty", field="prod_id")

    fold_limit = _parse_fold_limit(os.getenv("ICSGEN_FOLD_LIMIT", str(DEFAULTS["FOLD_LIMIT"])))

    fold_mode = os.getenv("ICSGEN_FOLD_MODE", DEFAULTS["FOLD_MODE"]).strip().lower()
    if fold_mode not in FOLD_MODES:
        raise ICSValidationError(
            f"Invalid ICSGEN_FOLD_MODE. Allowed: {', '.join(sorted(FOLD_MODES))}",
            field="fold_mode",
            value=fold_mode,
        )

    return CodecConfig(
        prod_id=prod_id,
        fold_limit=fold_limit,
        fold_mode=fold_mode,
        alarm_description=os.getenv("ICSGEN_ALARM_DESCRIPTION", DEFAULTS["ALARM_DESCRIPTION"]),
        filename_template=os.getenv("ICSGEN_FILENAME_TEMPLATE", DEFAULTS["FILENAME_TEMPLATE"]),
    )
