"""
Entity Base Model.

Every stored record carries a string ``id``.  Records created by the
local engine also carry ``created_at``/``updated_at`` ISO-8601 strings
assigned by the engine, never by the caller.  Unknown columns are kept
(``extra="allow"``) so populated fields such as a member's ``email``
survive a round trip.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Entity(BaseModel):
    """Common shape of a row in any table."""

    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"extra": "allow", "from_attributes": True}
