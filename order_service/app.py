"""
OrderService: HTTP API answering "is this product available and what does
it cost" by fanning out to the inventory and price services, and placing
orders on top of that answer.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from common import Deadline, new_correlation_id, setup_logging
from common.models import OrderCreateRequest
from order_service.catalog import ProductCatalog
from order_service.client import UpstreamClient
from order_service.composer import render_outcome
from order_service.config import (
    DISCONNECT_POLL_MS,
    INVENTORY_URL,
    LOG_LEVEL,
    PRICE_URL,
    PRODUCT_CATALOG,
    UPSTREAM_TIMEOUT_MS,
)
from order_service.orchestrator import ProductSummaryOrchestrator, SummaryRequest
from order_service.orders import OrderBook
from order_service.outcomes import Success

setup_logging("order-service", LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.upstreams = UpstreamClient.from_urls(INVENTORY_URL, PRICE_URL)
    app.state.catalog = ProductCatalog.parse(PRODUCT_CATALOG)
    app.state.order_book = OrderBook()
    logger.info(
        "Upstreams: inventory=%s price=%s timeout=%dms catalog=%s",
        INVENTORY_URL,
        PRICE_URL,
        UPSTREAM_TIMEOUT_MS,
        "off" if app.state.catalog is None else f"{len(app.state.catalog)} products",
    )
    yield
    await app.state.upstreams.aclose()


class CorrelationIdMiddleware:
    """
    Echo X-Correlation-Id (or mint one) and expose it as
    ``request.state.correlation_id``.

    Must stay plain ASGI: ``@app.middleware("http")`` hides disconnects from
    ``Request.is_disconnected()``.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = Headers(scope=scope).get("X-Correlation-Id") or new_correlation_id()
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        async def send_with_correlation_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                MutableHeaders(scope=message)["X-Correlation-Id"] = correlation_id
            await send(message)

        await self.app(scope, receive, send_with_correlation_id)


app = FastAPI(title="Order Service", lifespan=lifespan)
app.add_middleware(CorrelationIdMiddleware)


def get_orchestrator(request: Request) -> ProductSummaryOrchestrator:
    upstreams = request.app.state.upstreams.with_correlation_id(request.state.correlation_id)
    return ProductSummaryOrchestrator(upstreams, request.app.state.catalog)


def get_order_book(request: Request) -> OrderBook:
    return request.app.state.order_book


async def _watch_disconnect(request: Request, deadline: Deadline) -> None:
    while not deadline.is_cancelled:
        if await request.is_disconnected():
            logger.info("Client went away, cancelling upstream calls")
            deadline.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_MS / 1000.0)


@asynccontextmanager
async def request_deadline(request: Request):
    """Deadline for one request, cancelled if the client disconnects."""
    deadline = Deadline.after(UPSTREAM_TIMEOUT_MS / 1000.0)
    watcher = asyncio.create_task(_watch_disconnect(request, deadline))
    try:
        yield deadline
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)


@app.get("/health")
def health():
    return {"status": "ok", "service": "order-service"}


@app.get("/products/{product_id}/summary")
async def get_product_summary(
    product_id: int,
    request: Request,
    orchestrator: ProductSummaryOrchestrator = Depends(get_orchestrator),
):
    async with request_deadline(request) as deadline:
        outcome = await orchestrator.get_product_summary(SummaryRequest(product_id, deadline))

    if isinstance(outcome, Success):
        logger.info("Summary for product %s served", product_id)
    else:
        logger.warning(
            "Summary for product %s failed: %s (correlation_id=%s)",
            product_id,
            outcome,
            request.state.correlation_id,
        )
    return render_outcome(outcome)


@app.post("/orders")
async def create_order(
    payload: OrderCreateRequest,
    request: Request,
    orchestrator: ProductSummaryOrchestrator = Depends(get_orchestrator),
    order_book: OrderBook = Depends(get_order_book),
):
    async with request_deadline(request) as deadline:
        return await order_book.place(payload, orchestrator, deadline)


@app.get("/orders")
def list_orders(order_book: OrderBook = Depends(get_order_book)):
    return [o.model_dump(mode="json", by_alias=True) for o in order_book.list_orders()]
