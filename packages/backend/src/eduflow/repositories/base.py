"""Shared helpers for the SQLAlchemy repositories.

Learn: Services speak in plain dict filters with string ids (that's what
the tenancy helpers produce and what the tokens carry). Repositories turn
those into typed SQLAlchemy criteria at the edge.
"""

import uuid
from typing import Any, Mapping, Optional

# Matches no row; stands in for ids that aren't valid UUIDs
NO_MATCH = uuid.UUID(int=0)


def to_uuid(value: Any) -> Optional[uuid.UUID]:
    """Coerce a str/UUID id; None for missing or unparseable values."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def coerce_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Convert id-valued filter entries to UUIDs for filter_by().

    A malformed id becomes NO_MATCH rather than None, so it can never turn
    into an IS NULL comparison.
    """
    out = {}
    for key, value in filters.items():
        if (key == "id" or key.endswith("_id")) and value is not None:
            out[key] = to_uuid(value) or NO_MATCH
        else:
            out[key] = value
    return out
