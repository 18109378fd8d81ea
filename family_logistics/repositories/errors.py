"""
Error Normalization.

Single chokepoint that turns anything a backend can produce into an
:class:`~family_logistics.models.api.ApiError`:

- ``None``                         -> generic unknown-error message
- PostgREST ``APIError`` / any mapping or object carrying ``message``
                                   -> message, code and details preserved
- any other exception              -> its message, original in ``details``
- anything else                    -> generic message, raw value in ``details``

:func:`to_api_error` never raises.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from family_logistics.models.api import ApiError

__all__ = [
    "AUTH_REQUIRED",
    "NOT_FOUND",
    "RPC_NOT_FOUND",
    "STORAGE_ERROR",
    "UNKNOWN",
    "UNKNOWN_ERROR_MESSAGE",
    "auth_required_error",
    "not_found_error",
    "to_api_error",
]

UNKNOWN_ERROR_MESSAGE: str = "An unknown error occurred"

NOT_FOUND: str = "NOT_FOUND"
AUTH_REQUIRED: str = "AUTH_REQUIRED"
STORAGE_ERROR: str = "STORAGE_ERROR"
UNKNOWN: str = "UNKNOWN"
# PostgREST's own code for "function not found in the schema cache".
RPC_NOT_FOUND: str = "PGRST202"


def not_found_error(table: str) -> ApiError:
    return ApiError(message=f"{table} record not found", code=NOT_FOUND)


def auth_required_error(details: object = None) -> ApiError:
    return ApiError(message="Authentication required", code=AUTH_REQUIRED, details=details)


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _from_fields(
    message: object, code: object, details: object, hint: object
) -> ApiError:
    if details is None and hint is not None:
        details = hint
    return ApiError(message=str(message), code=_optional_str(code), details=details)


def to_api_error(raw: object) -> ApiError:
    """Convert a raw backend error or exception into an ``ApiError``."""
    try:
        if raw is None:
            return ApiError(message=UNKNOWN_ERROR_MESSAGE)

        if isinstance(raw, ApiError):
            return raw

        if isinstance(raw, Mapping):
            if raw.get("message"):
                return _from_fields(
                    raw["message"], raw.get("code"), raw.get("details"), raw.get("hint")
                )
            return ApiError(message=UNKNOWN_ERROR_MESSAGE, details=raw)

        # postgrest.exceptions.APIError and similar relational error
        # objects expose message/code/details/hint attributes.
        message = getattr(raw, "message", None)
        if isinstance(message, str) and message and (
            hasattr(raw, "code") or not isinstance(raw, BaseException)
        ):
            return _from_fields(
                message,
                getattr(raw, "code", None),
                getattr(raw, "details", None),
                getattr(raw, "hint", None),
            )

        if isinstance(raw, BaseException):
            return ApiError(message=str(raw) or type(raw).__name__, details=raw)

        return ApiError(message=UNKNOWN_ERROR_MESSAGE, details=raw)
    except Exception as exc:  # a hostile __getattr__/__str__ must not escape
        return ApiError(message=UNKNOWN_ERROR_MESSAGE, code=UNKNOWN, details=exc)
