"""
Fan-out orchestration of the inventory and price lookups.

Both fetches start together and are joined; the result is a pure function
of the two fetch results and the cancellation state, not of which one
finished first.

Reconciliation order:
  1. cancellation            -> Cancelled
  2. any not-found           -> NotFound
  3. any other fetch failure -> UpstreamUnavailable
  4. both records            -> Success

A confirmed absence outranks a transient failure, so inventory 404 plus
price timeout is NotFound. Failures of the same class are all cited,
inventory first, and the code of the first one is reported.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

from common.models import ProductSummary
from common.timeutils import Deadline, settle_within
from order_service.catalog import ProductCatalog
from order_service.outcomes import (
    Cancelled,
    ErrorCode,
    FetchError,
    FetchFailure,
    InventoryResult,
    NotFound,
    Outcome,
    PriceResult,
    Success,
    Upstream,
    UpstreamUnavailable,
)


class UpstreamFetcher(Protocol):
    async def fetch_inventory(self, product_id: int, deadline: Deadline) -> InventoryResult: ...

    async def fetch_price(self, product_id: int, deadline: Deadline) -> PriceResult: ...


@dataclass(frozen=True)
class SummaryRequest:
    """One summary lookup: the product and the deadline/cancellation it runs under."""

    product_id: int
    deadline: Deadline


def reconcile(
    product_id: int,
    inventory: InventoryResult,
    price: PriceResult,
    name: str | None = None,
) -> Outcome:
    failures = [r for r in (inventory, price) if isinstance(r, FetchFailure)]
    if not failures:
        return Success(ProductSummary.merge(inventory, price, name))

    if any(f.kind is FetchError.CANCELLED for f in failures):
        return Cancelled()

    missing = [f for f in failures if f.kind is FetchError.NOT_FOUND]
    if missing:
        what = " and ".join(f.upstream.value for f in missing)
        return NotFound(f"product {product_id} not found in {what}", missing[0].code)

    return UpstreamUnavailable("; ".join(f.describe() for f in failures), failures[0].code)


class ProductSummaryOrchestrator:
    def __init__(self, upstreams: UpstreamFetcher, catalog: ProductCatalog | None = None):
        self.upstreams = upstreams
        self.catalog = catalog

    async def get_product_summary(self, request: SummaryRequest) -> Outcome:
        product_id = request.product_id
        deadline = request.deadline

        name = None
        if self.catalog is not None:
            name = self.catalog.name_of(product_id)
            if name is None:
                return NotFound(
                    f"product {product_id} is not in the catalog", ErrorCode.LOCAL_NOT_FOUND
                )
        if deadline.is_cancelled:
            return Cancelled()

        inventory_task = asyncio.ensure_future(
            self.upstreams.fetch_inventory(product_id, deadline)
        )
        price_task = asyncio.ensure_future(self.upstreams.fetch_price(product_id, deadline))
        both = asyncio.gather(inventory_task, price_task)
        try:
            settled = await settle_within(both, deadline)
            if deadline.is_cancelled:
                return Cancelled()
            if settled:
                inventory, price = both.result()
            else:
                inventory = _result_or_timeout(inventory_task, Upstream.INVENTORY)
                price = _result_or_timeout(price_task, Upstream.PRICE)
        finally:
            for task in (inventory_task, price_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(inventory_task, price_task, both, return_exceptions=True)

        return reconcile(product_id, inventory, price, name)


def _result_or_timeout(task: asyncio.Future, upstream: Upstream) -> InventoryResult | PriceResult:
    if task.done() and not task.cancelled():
        return task.result()
    return FetchFailure(upstream, FetchError.TIMEOUT, "deadline exceeded")
