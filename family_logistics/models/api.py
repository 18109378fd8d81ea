"""
API Envelope Models.

Every repository and service operation returns an :class:`ApiResponse`
holding either ``data`` or a normalized :class:`ApiError`.  Callers turn
a non-null ``error`` into a user-facing message; they never need to
inspect anything beyond ``message`` and ``code``.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiError(BaseModel):
    """Normalized error shape shared by both backends."""

    message: str
    code: Optional[str] = None
    details: Any = None

    model_config = {"arbitrary_types_allowed": True}


class ApiResponse(BaseModel, Generic[T]):
    """Uniform ``{data, error}`` envelope.

    Exactly one of ``data``/``error`` is set on a terminal result; both
    are ``None`` only for operations without a payload (``delete``).
    """

    data: Optional[T] = None
    error: Optional[ApiError] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def ok(self) -> bool:
        """``True`` when the operation did not report an error."""
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "ApiResponse[Any]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: ApiError) -> "ApiResponse[Any]":
        return cls(data=None, error=error)
