"""Pydantic models describing orders and their line items."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from agro_admin.api.schemas.product import RecordId

ORDER_STATUSES: tuple[str, ...] = ("pending", "processing", "shipped", "delivered", "cancelled")


class OrderItem(BaseModel):
    """One product line; owned by exactly one order."""

    product_id: RecordId | None = None
    product_code: str = ""
    product_name: str = ""
    unit: str = ""
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, description="Price actually charged per unit")
    catalog_price: Decimal | None = Field(None, description="Product price in the catalog")

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


class OrderRead(BaseModel):
    id: RecordId
    number: str = ""
    customer_name: str = ""
    customer_email: str = ""
    status: str = Field("pending", description="One of ORDER_STATUSES")
    amount: Decimal = Decimal("0")
    items: list[OrderItem] = Field(default_factory=list)
    created_at: datetime | None = None

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def display_number(self) -> str:
        return self.number or str(self.id)
