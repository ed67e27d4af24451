"""Error types for iCalendar operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence


@dataclass
class ICSError(Exception):
    message: str
    code: str = "ICS_ERROR"
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


class ICSValidationError(ICSError):
    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(message, code=code, details={"field": field, "value": value})
        self.field = field
        self.value = value


class MalformedDateError(ICSValidationError):
    def __init__(self, message: str, field: str | None = None, value: Any | None = None) -> None:
        super().__init__(message, field=field, value=value, code="MALFORMED_DATE")


class MissingRequiredPropertyError(ICSValidationError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, field=field, code="MISSING_REQUIRED_PROPERTY")


class InvalidPropertyValueError(ICSValidationError):
    def __init__(self, message: str, field: str | None = None, value: Any | None = None) -> None:
        super().__init__(message, field=field, value=value, code="INVALID_PROPERTY_VALUE")


class InvalidStructureError(ICSError):
    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, code="INVALID_STRUCTURE", details=details)


class InvalidEncodingError(ICSError):
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code="INVALID_ENCODING", details={"path": path})
        self.path = path


class ICSExportError(ICSError):
    def __init__(self, message: str, checks: Sequence[Any] = ()) -> None:
        super().__init__(message, code="EXPORT_ERROR", details={"failed_checks": len(checks)})
        self.checks = list(checks)


class ICSFileError(ICSError):
    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, code="FILE_ERROR", details={"path": path})
        self.path = path


def format_error_for_user(error: Exception) -> str:
    if isinstance(error, MalformedDateError):
        return f"Date Error: {error.message}"
    if isinstance(error, MissingRequiredPropertyError):
        return f"Missing Property: {error.message}"
    if isinstance(error, ICSValidationError):
        return f"Validation Error: {error.message}"
    if isinstance(error, InvalidStructureError):
        return f"Structure Error: {error.message}"
    if isinstance(error, InvalidEncodingError):
        return f"Encoding Error: {error.message}"
    if isinstance(error, ICSExportError):
        return f"Export Error: {error.message}"
    if isinstance(error, ICSFileError):
        return f"File Error: {error.message}"
    if isinstance(error, ICSError):
        return f"Error: {error.message}"
    return f"Error: {str(error)}"
