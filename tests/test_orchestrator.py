"""
Fan-out and reconciliation tests against scripted upstream results.
"""

import asyncio
import time
from decimal import Decimal

import pytest

from common.models import InventoryRecord, PriceRecord, ProductSummary
from common.timeutils import Deadline
from fakes import ScriptedUpstreams
from order_service.catalog import ProductCatalog
from order_service.orchestrator import ProductSummaryOrchestrator, SummaryRequest, reconcile
from order_service.outcomes import (
    Cancelled,
    ErrorCode,
    FetchError,
    FetchFailure,
    NotFound,
    Success,
    Upstream,
    UpstreamUnavailable,
)

INVENTORY_1 = InventoryRecord(product_id=1, stock=100, sku="SKU001")
PRICE_1 = PriceRecord(product_id=1, amount=Decimal("1200.50"), currency="USD")


def inventory_failure(kind):
    return FetchFailure(Upstream.INVENTORY, kind, "scripted")


def price_failure(kind):
    return FetchFailure(Upstream.PRICE, kind, "scripted")


async def summarize(upstreams, product_id=1, timeout=2.0, catalog=None, deadline=None):
    orchestrator = ProductSummaryOrchestrator(upstreams, catalog)
    if deadline is None:
        deadline = Deadline.after(timeout)
    return await orchestrator.get_product_summary(SummaryRequest(product_id, deadline))


@pytest.mark.asyncio
async def test_both_succeed_merges_records():
    outcome = await summarize(ScriptedUpstreams(INVENTORY_1, PRICE_1))

    assert isinstance(outcome, Success)
    summary = outcome.summary
    assert summary.product_id == 1
    assert summary.stock == 100
    assert summary.sku == "SKU001"
    assert summary.price == Decimal("1200.50")
    assert summary.currency == "USD"
    assert summary.name is None


@pytest.mark.asyncio
@pytest.mark.parametrize("inventory_delay,price_delay", [(0.03, 0.0), (0.0, 0.03), (0.01, 0.01)])
async def test_outcome_does_not_depend_on_completion_order(inventory_delay, price_delay):
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1, inventory_delay, price_delay)

    outcome = await summarize(upstreams)

    assert outcome == Success(ProductSummary.merge(INVENTORY_1, PRICE_1))


@pytest.mark.asyncio
async def test_fetches_run_concurrently():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1, 0.2, 0.2)

    start = time.perf_counter()
    await summarize(upstreams)

    assert time.perf_counter() - start < 0.35


@pytest.mark.asyncio
async def test_inventory_not_found_wins_over_price_success():
    upstreams = ScriptedUpstreams(inventory_failure(FetchError.NOT_FOUND), PRICE_1)

    outcome = await summarize(upstreams, product_id=99)

    assert isinstance(outcome, NotFound)
    assert outcome.code is ErrorCode.UPSTREAM_NOT_FOUND
    assert "inventory" in outcome.reason
    assert "99" in outcome.reason


@pytest.mark.asyncio
async def test_price_not_found_wins_over_inventory_success():
    upstreams = ScriptedUpstreams(INVENTORY_1, price_failure(FetchError.NOT_FOUND))

    outcome = await summarize(upstreams)

    assert isinstance(outcome, NotFound)
    assert "price" in outcome.reason
    assert "inventory" not in outcome.reason


@pytest.mark.asyncio
async def test_not_found_outranks_unavailable_regardless_of_side():
    first = await summarize(
        ScriptedUpstreams(inventory_failure(FetchError.NOT_FOUND), price_failure(FetchError.TIMEOUT))
    )
    second = await summarize(
        ScriptedUpstreams(inventory_failure(FetchError.UNREACHABLE), price_failure(FetchError.NOT_FOUND))
    )

    assert isinstance(first, NotFound)
    assert isinstance(second, NotFound)
    assert "inventory" in first.reason
    assert "price" in second.reason


@pytest.mark.asyncio
async def test_both_unavailable_cites_inventory_first():
    upstreams = ScriptedUpstreams(
        inventory_failure(FetchError.UNREACHABLE),
        price_failure(FetchError.MALFORMED),
        inventory_delay=0.02,
    )

    outcome = await summarize(upstreams)

    assert isinstance(outcome, UpstreamUnavailable)
    assert outcome.code is ErrorCode.UPSTREAM_UNREACHABLE
    assert outcome.reason.index("inventory") < outcome.reason.index("price")


@pytest.mark.asyncio
async def test_price_timeout_is_unavailable_citing_price():
    upstreams = ScriptedUpstreams(INVENTORY_1, price_failure(FetchError.TIMEOUT))

    outcome = await summarize(upstreams)

    assert isinstance(outcome, UpstreamUnavailable)
    assert outcome.code is ErrorCode.UPSTREAM_TIMEOUT
    assert outcome.reason.startswith("price timeout")


@pytest.mark.asyncio
async def test_pending_fetch_at_deadline_counts_as_timeout():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1, price_delay=1.0)

    start = time.perf_counter()
    outcome = await summarize(upstreams, timeout=0.05)

    assert time.perf_counter() - start < 0.5
    assert isinstance(outcome, UpstreamUnavailable)
    assert outcome.code is ErrorCode.UPSTREAM_TIMEOUT
    assert "price" in outcome.reason
    assert "inventory" not in outcome.reason


@pytest.mark.asyncio
async def test_cancellation_before_any_response():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1, 1.0, 1.0)
    deadline = Deadline.after(5.0)
    asyncio.get_running_loop().call_later(0.001, deadline.cancel)

    start = time.perf_counter()
    outcome = await summarize(upstreams, deadline=deadline)

    assert isinstance(outcome, Cancelled)
    assert time.perf_counter() - start < 0.5


@pytest.mark.asyncio
async def test_cancellation_discards_partial_success():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1, inventory_delay=0.0, price_delay=1.0)
    deadline = Deadline.after(5.0)
    asyncio.get_running_loop().call_later(0.02, deadline.cancel)

    outcome = await summarize(upstreams, deadline=deadline)

    assert outcome == Cancelled()


@pytest.mark.asyncio
async def test_already_cancelled_issues_no_calls():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1)
    deadline = Deadline.after(5.0)
    deadline.cancel()

    outcome = await summarize(upstreams, deadline=deadline)

    assert isinstance(outcome, Cancelled)
    assert upstreams.inventory_calls == 0
    assert upstreams.price_calls == 0


@pytest.mark.asyncio
async def test_fetch_reporting_cancelled_yields_cancelled():
    upstreams = ScriptedUpstreams(INVENTORY_1, price_failure(FetchError.CANCELLED))

    assert isinstance(await summarize(upstreams), Cancelled)


@pytest.mark.asyncio
async def test_unknown_catalog_product_short_circuits():
    upstreams = ScriptedUpstreams(INVENTORY_1, PRICE_1)
    catalog = ProductCatalog({1: "Super Laptop"})

    outcome = await summarize(upstreams, product_id=99, catalog=catalog)

    assert isinstance(outcome, NotFound)
    assert outcome.code is ErrorCode.LOCAL_NOT_FOUND
    assert upstreams.inventory_calls == 0
    assert upstreams.price_calls == 0


@pytest.mark.asyncio
async def test_catalog_name_is_merged():
    catalog = ProductCatalog({1: "Super Laptop"})

    outcome = await summarize(ScriptedUpstreams(INVENTORY_1, PRICE_1), catalog=catalog)

    assert outcome.summary.name == "Super Laptop"


@pytest.mark.asyncio
async def test_repeated_calls_yield_identical_outcomes():
    upstreams = ScriptedUpstreams(INVENTORY_1, price_failure(FetchError.UNREACHABLE))

    first = await summarize(upstreams)
    second = await summarize(upstreams)

    assert first == second


@pytest.mark.asyncio
async def test_programming_errors_propagate():
    upstreams = ScriptedUpstreams(RuntimeError("boom"), PRICE_1, price_delay=1.0)

    with pytest.raises(RuntimeError, match="boom"):
        await summarize(upstreams)


def test_reconcile_both_not_found_names_both():
    outcome = reconcile(
        7, inventory_failure(FetchError.NOT_FOUND), price_failure(FetchError.NOT_FOUND)
    )

    assert outcome == NotFound("product 7 not found in inventory and price")
