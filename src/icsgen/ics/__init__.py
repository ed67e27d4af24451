"""iCalendar codec and conformance validator."""

from .calendar import (
    ExportResult,
    ImportResult,
    export_calendar,
    export_events,
    import_calendar,
    import_text,
    render_export_filename,
)
from .config import CodecConfig, load_config
from .errors import (
    ICSError,
    ICSExportError,
    ICSFileError,
    ICSValidationError,
    InvalidEncodingError,
    InvalidPropertyValueError,
    InvalidStructureError,
    MalformedDateError,
    MissingRequiredPropertyError,
    format_error_for_user,
)
from .models import (
    Alert,
    Attachment,
    AttachmentType,
    CalendarEvent,
    CustomRecurrence,
    Recurrence,
    ValidationCategory,
    ValidationCheck,
    WeekDay,
)
from .parser import parse_events
from .recurrence import check_rrule, from_rrule_string, to_rrule_string
from .serializer import serialize_event, serialize_events
from .temporal import (
    alert_to_trigger,
    decode_duration,
    decode_instant,
    encode_duration,
    encode_instant,
    trigger_to_alert,
)
from .text import escape_text, fold_line, unescape_text, unfold_lines
from .validator import failed_checks, summarize_failures, validate
from .validators import validate_create_params, validate_event

__all__ = [
    "ExportResult",
    "ImportResult",
    "export_calendar",
    "export_events",
    "import_calendar",
    "import_text",
    "render_export_filename",
    "CodecConfig",
    "load_config",
    "ICSError",
    "ICSExportError",
    "ICSFileError",
    "ICSValidationError",
    "InvalidEncodingError",
    "InvalidPropertyValueError",
    "InvalidStructureError",
    "MalformedDateError",
    "MissingRequiredPropertyError",
    "format_error_for_user",
    "Alert",
    "Attachment",
    "AttachmentType",
    "CalendarEvent",
    "CustomRecurrence",
    "Recurrence",
    "ValidationCategory",
    "ValidationCheck",
    "WeekDay",
    "parse_events",
    "check_rrule",
    "from_rrule_string",
    "to_rrule_string",
    "serialize_event",
    "serialize_events",
    "alert_to_trigger",
    "decode_duration",
    "decode_instant",
    "encode_duration",
    "encode_instant",
    "trigger_to_alert",
    "escape_text",
    "fold_line",
    "unescape_text",
    "unfold_lines",
    "failed_checks",
    "summarize_failures",
    "validate",
    "validate_create_params",
    "validate_event",
]
