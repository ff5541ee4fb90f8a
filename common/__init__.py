"""
Shared common module for the order, inventory, and price services.

Framework-agnostic; no FastAPI dependency. Uses Pydantic v2 for schemas.
"""

from common.ids import new_correlation_id, new_order_id, now_iso
from common.logging import setup_logging
from common.models import (
    InventoryRecord,
    Order,
    OrderCreateRequest,
    PriceRecord,
    ProductSummary,
)
from common.timeutils import Deadline, settle_within, utc_now

__all__ = [
    "new_order_id",
    "new_correlation_id",
    "now_iso",
    "setup_logging",
    "InventoryRecord",
    "PriceRecord",
    "ProductSummary",
    "OrderCreateRequest",
    "Order",
    "Deadline",
    "settle_within",
    "utc_now",
]
