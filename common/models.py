"""
Pydantic v2 data models for upstream records, product summaries, and orders.

Framework-agnostic; safe to use from FastAPI (request/response bodies) or
any service. Wire format is camelCase JSON; Python attributes are snake_case.
Records coming from upstream services ignore unknown keys; request models
forbid them.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer


# -----------------------------------------------------------------------------
# Upstream records (consumed from inventory / price services)
# -----------------------------------------------------------------------------


class InventoryRecord(BaseModel):
    """Stock level and SKU for one product, as returned by the inventory service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    stock: int = Field(..., ge=0)
    sku: str


class PriceRecord(BaseModel):
    """
    Price of one product, as returned by the price service.

    The original price service called the amount ``basePrice``; both keys
    are accepted.

    >>> record = PriceRecord.model_validate_json('{"productId": 1, "basePrice": 1200.50, "currency": "USD"}')
    >>> record.amount == Decimal("1200.50")
    True
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    amount: Decimal = Field(..., validation_alias=AliasChoices("amount", "basePrice"))
    currency: str


# -----------------------------------------------------------------------------
# Responses produced by the order service
# -----------------------------------------------------------------------------


class ProductSummary(BaseModel):
    """Inventory and price merged for one product, plus its local name if known."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    name: str | None = None
    sku: str
    stock: int
    price: Decimal
    currency: str

    @classmethod
    def merge(
        cls,
        inventory: InventoryRecord,
        price: PriceRecord,
        name: str | None = None,
    ) -> ProductSummary:
        """Build a summary from both upstream records."""
        return cls(
            product_id=inventory.product_id,
            name=name,
            sku=inventory.sku,
            stock=inventory.stock,
            price=price.amount,
            currency=price.currency,
        )

    @field_serializer("price", when_used="json")
    def _price_as_number(self, value: Decimal) -> float:
        return float(value)


class OrderCreateRequest(BaseModel):
    """Request to order a positive quantity of one product."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    quantity: int = Field(..., gt=0, description="Quantity must be positive")


class Order(BaseModel):
    """An accepted order with its computed total."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    product_id: int = Field(..., alias="productId")
    sku: str
    quantity: int
    unit_price: Decimal = Field(..., alias="unitPrice")
    total_to_pay: Decimal = Field(..., alias="totalToPay")
    currency: str
    created_at: str = Field(..., alias="createdAt")

    @classmethod
    def from_summary(
        cls,
        order_id: str,
        summary: ProductSummary,
        quantity: int,
        created_at: str,
    ) -> Order:
        """Price an order for ``quantity`` units at the summary's unit price."""
        return cls(
            order_id=order_id,
            product_id=summary.product_id,
            sku=summary.sku,
            quantity=quantity,
            unit_price=summary.price,
            total_to_pay=summary.price * quantity,
            currency=summary.currency,
            created_at=created_at,
        )

    @field_serializer("unit_price", "total_to_pay", when_used="json")
    def _money_as_number(self, value: Decimal) -> float:
        return float(value)
