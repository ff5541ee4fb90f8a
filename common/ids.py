"""
ID generation and timestamp utilities.

Provides new_order_id(), new_correlation_id(), and now_iso() with
deterministic UTC ISO 8601 formatting. Order ids are ULIDs so they sort by
creation time.
"""

from __future__ import annotations

import uuid

from ulid import ULID

from common.timeutils import utc_now


def new_order_id() -> str:
    """
    Generate a new order ID (ULID, lexicographically sortable).

    >>> id_ = new_order_id()
    >>> isinstance(id_, str) and len(id_) == 26
    True
    """
    return str(ULID())


def new_correlation_id() -> str:
    """
    Generate a correlation ID for a request that arrived without one.

    >>> len(new_correlation_id())
    36
    """
    return str(uuid.uuid4())


def now_iso() -> str:
    """
    Return current UTC time as ISO 8601 string with Z suffix.
    Deterministic format: YYYY-MM-DDTHH:MM:SS.ffffffZ

    >>> s = now_iso()
    >>> s.endswith('Z') and 'T' in s
    True
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%S.%fZ")
