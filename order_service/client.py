"""
HTTP client for the inventory and price services.

Every fetch returns a record or a FetchFailure; transport faults never
escape. Each exchange is opened with ``AsyncClient.stream`` so the
connection goes back to the pool on every path, including cancellation.
No retries happen here: wrap the httpx transport for that.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from common.models import InventoryRecord, PriceRecord
from common.timeutils import Deadline, settle_within
from order_service.outcomes import (
    FetchError,
    FetchFailure,
    InventoryResult,
    PriceResult,
    Upstream,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class UpstreamClient:
    """Fetches inventory and price records from their services."""

    def __init__(
        self,
        inventory_http: httpx.AsyncClient,
        price_http: httpx.AsyncClient,
        correlation_id: str | None = None,
    ):
        self.inventory_http = inventory_http
        self.price_http = price_http
        self.correlation_id = correlation_id

    @classmethod
    def from_urls(cls, inventory_url: str, price_url: str) -> UpstreamClient:
        return cls(
            httpx.AsyncClient(base_url=inventory_url),
            httpx.AsyncClient(base_url=price_url),
        )

    def with_correlation_id(self, correlation_id: str) -> UpstreamClient:
        """Same connection pools, tagging requests with ``correlation_id``."""
        return UpstreamClient(self.inventory_http, self.price_http, correlation_id)

    async def aclose(self) -> None:
        await self.inventory_http.aclose()
        await self.price_http.aclose()

    async def fetch_inventory(self, product_id: int, deadline: Deadline) -> InventoryResult:
        return await self._fetch(
            Upstream.INVENTORY,
            self.inventory_http,
            f"/inventory/{product_id}",
            InventoryRecord,
            product_id,
            deadline,
        )

    async def fetch_price(self, product_id: int, deadline: Deadline) -> PriceResult:
        return await self._fetch(
            Upstream.PRICE,
            self.price_http,
            f"/price/{product_id}",
            PriceRecord,
            product_id,
            deadline,
        )

    async def _fetch(
        self,
        upstream: Upstream,
        http: httpx.AsyncClient,
        path: str,
        model: type[RecordT],
        product_id: int,
        deadline: Deadline,
    ) -> RecordT | FetchFailure:
        if deadline.is_cancelled:
            return self._failure(upstream, FetchError.CANCELLED, "cancelled before request")
        if deadline.expired:
            return self._failure(upstream, FetchError.TIMEOUT, "deadline passed before request")

        call = asyncio.ensure_future(self._get(http, path, deadline.remaining()))
        try:
            settled = await settle_within(call, deadline)
        finally:
            if not call.done():
                call.cancel()
                await asyncio.gather(call, return_exceptions=True)

        # Late results are discarded once the signal has fired.
        if deadline.is_cancelled:
            return self._failure(upstream, FetchError.CANCELLED, "request cancelled")
        if not settled:
            return self._failure(upstream, FetchError.TIMEOUT, "deadline exceeded")

        try:
            status_code, body = call.result()
        except httpx.TimeoutException as e:
            return self._failure(upstream, FetchError.TIMEOUT, f"timed out ({type(e).__name__})")
        except httpx.HTTPError as e:
            return self._failure(upstream, FetchError.UNREACHABLE, f"{type(e).__name__}: {e}")

        if status_code == 404:
            return self._failure(upstream, FetchError.NOT_FOUND, f"product {product_id} not found")
        if not 200 <= status_code < 300:
            return self._failure(upstream, FetchError.UNREACHABLE, f"unexpected status {status_code}")

        try:
            record = model.model_validate_json(body)
        except ValidationError as e:
            return self._failure(
                upstream, FetchError.MALFORMED, f"invalid body ({e.error_count()} errors)"
            )
        if record.product_id != product_id:
            return self._failure(
                upstream,
                FetchError.MALFORMED,
                f"asked for product {product_id}, got {record.product_id}",
            )
        return record

    async def _get(self, http: httpx.AsyncClient, path: str, timeout: float) -> tuple[int, bytes]:
        headers = {}
        if self.correlation_id:
            headers["X-Correlation-Id"] = self.correlation_id
        async with http.stream("GET", path, headers=headers, timeout=timeout) as response:
            body = await response.aread()
        return response.status_code, body

    def _failure(self, upstream: Upstream, kind: FetchError, detail: str) -> FetchFailure:
        failure = FetchFailure(upstream, kind, detail)
        logger.warning(
            "%s fetch failed: %s (correlation_id=%s)",
            upstream.value,
            failure.describe(),
            self.correlation_id,
        )
        return failure
