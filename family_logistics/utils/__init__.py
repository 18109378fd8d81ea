"""Shared helpers: identifiers, slugs and timestamps."""

from family_logistics.utils.string_helpers import (
    JsonValue,
    generate_id,
    generate_share_slug,
    generate_token,
    slugify,
)
from family_logistics.utils.timestamps import next_timestamp, utc_now, utc_now_iso

__all__ = [
    "JsonValue",
    "generate_id",
    "generate_share_slug",
    "generate_token",
    "next_timestamp",
    "slugify",
    "utc_now",
    "utc_now_iso",
]
