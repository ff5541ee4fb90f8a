"""
Order placement on top of the product summary fan-out.

Orders live in memory for the lifetime of the process.
"""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from common.ids import new_order_id, now_iso
from common.models import Order, OrderCreateRequest
from common.timeutils import Deadline
from order_service.composer import render_outcome
from order_service.orchestrator import ProductSummaryOrchestrator, SummaryRequest
from order_service.outcomes import ErrorCode, Success

logger = logging.getLogger(__name__)


class OrderBook:
    def __init__(self):
        self._orders: list[Order] = []

    def list_orders(self) -> list[Order]:
        return list(self._orders)

    async def place(
        self,
        request: OrderCreateRequest,
        orchestrator: ProductSummaryOrchestrator,
        deadline: Deadline,
    ) -> JSONResponse:
        """
        Check stock and price for the product and record the order.

        Returns 201 with the order, 400 when stock is short, or whatever the
        summary outcome renders to when the lookup itself fails.
        """
        outcome = await orchestrator.get_product_summary(
            SummaryRequest(request.product_id, deadline)
        )
        if not isinstance(outcome, Success):
            return render_outcome(outcome)

        summary = outcome.summary
        if summary.stock < request.quantity:
            logger.warning(
                "Insufficient stock for product %s: wanted %s, have %s",
                request.product_id,
                request.quantity,
                summary.stock,
            )
            return JSONResponse(
                status_code=400,
                content={
                    "error": "insufficient stock",
                    "code": ErrorCode.INSUFFICIENT_STOCK.value,
                    "available": summary.stock,
                },
            )

        order = Order.from_summary(new_order_id(), summary, request.quantity, now_iso())
        self._orders.append(order)
        logger.info("Order %s placed: %s x %s", order.order_id, order.quantity, order.sku)
        return JSONResponse(status_code=201, content=order.model_dump(mode="json", by_alias=True))
