"""
Result types for upstream fetches and for the product summary as a whole.

A fetch yields either a record or a FetchFailure. A summary request yields
exactly one Outcome variant: Success, NotFound, UpstreamUnavailable, or
Cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from common.models import InventoryRecord, PriceRecord, ProductSummary


class Upstream(str, Enum):
    INVENTORY = "inventory"
    PRICE = "price"


class FetchError(str, Enum):
    NOT_FOUND = "not_found"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    MALFORMED = "malformed"


class ErrorCode(str, Enum):
    LOCAL_NOT_FOUND = "LOCAL_NOT_FOUND"
    UPSTREAM_NOT_FOUND = "UPSTREAM_NOT_FOUND"
    UPSTREAM_UNREACHABLE = "UPSTREAM_UNREACHABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"


_CODES = {
    FetchError.NOT_FOUND: ErrorCode.UPSTREAM_NOT_FOUND,
    FetchError.UNREACHABLE: ErrorCode.UPSTREAM_UNREACHABLE,
    FetchError.TIMEOUT: ErrorCode.UPSTREAM_TIMEOUT,
    FetchError.MALFORMED: ErrorCode.UPSTREAM_MALFORMED,
    FetchError.CANCELLED: ErrorCode.REQUEST_CANCELLED,
}


@dataclass(frozen=True)
class FetchFailure:
    """Why a single upstream fetch did not produce a record."""

    upstream: Upstream
    kind: FetchError
    detail: str

    @property
    def code(self) -> ErrorCode:
        return _CODES[self.kind]

    def describe(self) -> str:
        return f"{self.upstream.value} {self.kind.value}: {self.detail}"


InventoryResult = Union[InventoryRecord, FetchFailure]
PriceResult = Union[PriceRecord, FetchFailure]


@dataclass(frozen=True)
class Success:
    summary: ProductSummary


@dataclass(frozen=True)
class NotFound:
    reason: str
    code: ErrorCode = ErrorCode.UPSTREAM_NOT_FOUND


@dataclass(frozen=True)
class UpstreamUnavailable:
    reason: str
    code: ErrorCode = ErrorCode.UPSTREAM_UNREACHABLE


@dataclass(frozen=True)
class Cancelled:
    reason: str = "request cancelled"


Outcome = Union[Success, NotFound, UpstreamUnavailable, Cancelled]
