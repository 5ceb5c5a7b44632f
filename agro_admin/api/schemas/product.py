"""Pydantic models describing catalog records (products, categories, units)."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from agro_admin.api.schemas.common import LocalizedText

RecordId = int | str


class CategoryRead(BaseModel):
    id: RecordId
    name: LocalizedText = Field(default_factory=LocalizedText)
    image: str | None = None


class UnitRead(BaseModel):
    id: RecordId
    name: LocalizedText = Field(default_factory=LocalizedText)


class ProductRead(BaseModel):
    id: RecordId
    name: LocalizedText = Field(default_factory=LocalizedText)
    price: Decimal = Decimal("0")
    category: RecordId | None = Field(None, description="Category id, never the expanded object")
    unity: RecordId | None = Field(None, description="Unit id, never the expanded object")
    description: str = ""
    image: str | None = None
    code: str = ""
    article: str = ""
    tg_id: str = ""
    quantity_left: Decimal | None = None
    created_at: datetime | None = None
