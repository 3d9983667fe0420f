"""
Survey Analytics - Exception Hierarchy.
Structured errors scoped to a single operation, each carrying a user-facing message.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    INTERNAL = "internal"


class SurveyError(Exception):
    """Base exception for survey analytics errors."""
    error_code: str = "SURVEY_ERROR"
    category: ErrorCategory = ErrorCategory.INTERNAL
    http_status: int = 500
    retriable: bool = False

    def __init__(self, message: str, *, user_message: str | None = None,
                 cause: Exception | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or "An error occurred. Please try again."
        self.cause = cause
        self.details = details or {}
        self._log_error()

    def _log_error(self) -> None:
        log_data: dict[str, Any] = {
            "error_code": self.error_code, "category": self.category.value,
            "details": self.details,
        }
        if self.cause:
            log_data["cause_type"] = type(self.cause).__name__
            log_data["cause_message"] = str(self.cause)
        if self.http_status >= 500:
            logger.error(self.message, **log_data)
        else:
            logger.warning(self.message, **log_data)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.error_code, "message": self.user_message,
                          "retriable": self.retriable}}


class ValidationError(SurveyError):
    """Incomplete response set or missing demographic field. Nothing is written."""
    error_code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400
    retriable = True

    def __init__(self, message: str, *, field: str | None = None, value: Any = None,
                 **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        user_message = kwargs.pop("user_message", None) or (
            f"Please provide a valid value for {field}." if field else "Please complete all required fields."
        )
        super().__init__(message, user_message=user_message, details=details, **kwargs)
        self.field, self.value = field, value


class StoreError(SurveyError):
    """Insert or query failure reported by the record store."""
    error_code = "STORE_ERROR"
    category = ErrorCategory.STORAGE
    http_status = 503
    retriable = True

    def __init__(self, message: str, *, table_key: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if table_key:
            details["table_key"] = table_key
        kwargs.setdefault("user_message", "The data store is unavailable. Please try again.")
        super().__init__(message, details=details, **kwargs)
        self.table_key = table_key


class StoreTimeoutError(StoreError):
    error_code = "STORE_TIMEOUT"


class AuthorizationError(SurveyError):
    error_code = "AUTHORIZATION_ERROR"
    category = ErrorCategory.AUTHORIZATION
    http_status = 401

    def __init__(self, message: str = "Admin authentication required", **kwargs: Any) -> None:
        kwargs.setdefault("user_message", "Please sign in as an administrator.")
        super().__init__(message, **kwargs)


class EmptyExportError(SurveyError):
    error_code = "EMPTY_EXPORT"
    category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, data_type: str, **kwargs: Any) -> None:
        kwargs.setdefault("user_message", "No data available to export.")
        super().__init__(f"No records to export for {data_type}",
                         details={"data_type": data_type}, **kwargs)
        self.data_type = data_type
