"""
String Helpers.

Identifier, slug and token generation shared by the local engine, the
local procedures and the services.
"""

from __future__ import annotations

import re
import secrets
import unicodedata
import uuid
from typing import Union

__all__ = [
    "JsonValue",
    "generate_id",
    "generate_share_slug",
    "generate_token",
    "slugify",
]

# ---------------------------------------------------------------------------
# Recursive JSON value type
# ---------------------------------------------------------------------------

JsonValue = Union[
    str,
    int,
    float,
    bool,
    None,
    dict[str, "JsonValue"],
    list["JsonValue"],
]

_SLUG_ALPHABET: str = "abcdefghijklmnopqrstuvwxyz0123456789"
_RE_NON_SLUG = re.compile(r"[^a-z0-9]+")


def generate_id() -> str:
    """Return a new RFC 4122 version-4 UUID string."""
    return str(uuid.uuid4())


def generate_share_slug(length: int = 8) -> str:
    """Random lowercase alphanumeric slug used for public wishlist links."""
    return "".join(secrets.choice(_SLUG_ALPHABET) for _ in range(length))


def generate_token(nbytes: int = 16) -> str:
    """URL-safe random token for invitations and reservation codes."""
    return secrets.token_urlsafe(nbytes)


def slugify(value: str) -> str:
    """Lowercase ASCII slug: ``"Müller Family!"`` -> ``"muller-family"``.

    Accents are stripped via NFKD decomposition; runs of anything that is
    not a letter or digit collapse to a single hyphen.
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    return _RE_NON_SLUG.sub("-", ascii_only.lower()).strip("-")
