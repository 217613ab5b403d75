from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    NOT_FOUND = "not-found"
    AI_SERVICE = "ai-service"
    DATABASE = "database"
    INTERNAL = "internal"


# Caller-facing messages for kinds whose own message is never exposed.
SAFE_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "Authentication required",
    ErrorKind.VALIDATION: "Invalid input provided",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.AI_SERVICE: "AI service is temporarily unavailable",
    ErrorKind.DATABASE: "Database service is temporarily unavailable",
    ErrorKind.INTERNAL: "An internal error occurred",
}

_PASSTHROUGH_KINDS = {ErrorKind.VALIDATION, ErrorKind.NOT_FOUND}


class CareerDataError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        details: Mapping[str, Any] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.original_error = original_error


class AuthenticationError(CareerDataError):
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ValidationError(CareerDataError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, fields: Iterable[str] | None = None) -> None:
        self.fields: List[str] = list(fields or [])
        details = {"fields": self.fields} if self.fields else None
        super().__init__(message, details=details)


class NotFoundError(CareerDataError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_name: str, entity_id: str) -> None:
        self.entity_name = entity_name
        self.entity_id = entity_id
        super().__init__(
            f"{entity_name} with ID {entity_id} not found",
            details={"entityName": entity_name, "id": entity_id},
        )


class AIServiceError(CareerDataError):
    kind = ErrorKind.AI_SERVICE

    def __init__(
        self,
        message: str,
        *,
        reason: str = "unavailable",
        original_error: BaseException | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(message, details={"reason": reason}, original_error=original_error)


class DatabaseError(CareerDataError):
    kind = ErrorKind.DATABASE

    def __init__(
        self,
        message: str,
        *,
        reason: str = "operation_failed",
        original_error: BaseException | None = None,
    ) -> None:
        self.reason = reason
        super().__init__(message, details={"reason": reason}, original_error=original_error)


class InternalError(CareerDataError):
    kind = ErrorKind.INTERNAL


def missing_fields_error(fields: Iterable[str], prefix: str = "Missing required fields") -> ValidationError:
    names = list(fields)
    return ValidationError(f"{prefix}: {', '.join(names)}", names)


# -----------------------------
# Classification of dependency failures
# -----------------------------
# Dependencies only expose free text, so classification is substring based.
# Keep all matching in this section so it can move to structured codes later.

_SEPARATORS = re.compile(r"[_\-]+")


def _normalized(exc: BaseException) -> str:
    return _SEPARATORS.sub(" ", str(exc)).lower()


def _matches(text: str, needles: Iterable[str]) -> bool:
    return any(needle in text for needle in needles)


def classify_provider_error(exc: BaseException) -> AIServiceError:
    """Map a model-provider failure to an ``ai-service`` error."""
    if isinstance(exc, AIServiceError):
        return exc
    text = _normalized(exc)
    if _matches(text, ("api key",)):
        return AIServiceError(
            "AI service configuration error", reason="configuration", original_error=exc
        )
    if _matches(text, ("rate limit",)):
        return AIServiceError(
            "AI service rate limit exceeded. Please try again later.",
            reason="rate_limited",
            original_error=exc,
        )
    if _matches(text, ("timeout", "timed out")):
        return AIServiceError(
            "AI service request timed out. Please try again.",
            reason="timeout",
            original_error=exc,
        )
    return AIServiceError(
        "Failed to generate content. Please try again later.", original_error=exc
    )


def classify_store_error(exc: BaseException) -> CareerDataError:
    """Map a record-store failure to a ``database`` or ``validation`` error."""
    if isinstance(exc, CareerDataError):
        return exc
    text = _normalized(exc)
    if _matches(text, ("connection",)):
        return DatabaseError(
            "Database connection error. Please try again later.",
            reason="connection",
            original_error=exc,
        )
    if _matches(text, ("duplicate key", "unique constraint")):
        error = ValidationError("A record with this identifier already exists")
        error.original_error = exc
        return error
    return DatabaseError(
        "Database operation failed. Please try again later.", original_error=exc
    )


def wrap_error(exc: BaseException, default_message: str = "An unexpected error occurred") -> CareerDataError:
    if isinstance(exc, CareerDataError):
        return exc
    return InternalError(default_message, original_error=exc)


# -----------------------------
# Rendering
# -----------------------------
@dataclass(frozen=True)
class ErrorPayload:
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


def sanitize_message(error: CareerDataError) -> str:
    if error.kind in _PASSTHROUGH_KINDS:
        return error.message
    return SAFE_MESSAGES.get(error.kind, SAFE_MESSAGES[ErrorKind.INTERNAL])


def log_error(error: CareerDataError, context: Mapping[str, Any] | None = None) -> None:
    meta: Dict[str, Any] = {
        "kind": error.kind.value,
        "error_name": type(error).__name__,
        "error_message": error.message,
        "details": error.details,
    }
    if context:
        meta.update(context)
    original = error.original_error
    if original is not None:
        meta["original_error"] = {"name": type(original).__name__, "message": str(original)}
    exc_info = (type(original), original, original.__traceback__) if original else error
    logger.error("API error occurred: %s", error.message, extra={"context": meta}, exc_info=exc_info)


def render_error(exc: BaseException, context: Mapping[str, Any] | None = None) -> ErrorPayload:
    """Log a failure once in full and return its caller-safe rendering.

    Args:
        exc: Any exception raised by the store, generation pipeline or transport.
        context: Extra key/values recorded with the log entry only.

    Returns:
        Payload with the taxonomy kind, sanitized message and safe details.
    """
    error = wrap_error(exc)
    log_error(error, context)
    return ErrorPayload(kind=error.kind, message=sanitize_message(error), details=dict(error.details))
