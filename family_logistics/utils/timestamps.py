"""ISO-8601 timestamp helpers for engine-assigned ``created_at``/``updated_at``."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def next_timestamp(clock: Clock, previous: Optional[str] = None) -> str:
    """Return ``clock()`` as ISO-8601, strictly later than *previous*.

    Two mutations inside the same clock tick would otherwise share an
    ``updated_at``; the later one is pushed forward by one microsecond.
    An unparseable *previous* is ignored.
    """
    now = clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if previous:
        try:
            prior = datetime.fromisoformat(previous)
        except ValueError:
            prior = None
        if prior is not None:
            if prior.tzinfo is None:
                prior = prior.replace(tzinfo=timezone.utc)
            if now <= prior:
                now = prior + timedelta(microseconds=1)
    return now.isoformat()
