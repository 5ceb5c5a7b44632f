"""Per-resource wire mapping and the registry of dashboard resources."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from agro_admin.api.schemas import (
    BannerRead,
    CategoryRead,
    LocalizedText,
    OrderItem,
    OrderRead,
    ProductRead,
    UnitRead,
    UserRead,
)
from agro_admin.repositories.base import ResourceConfig

logger = logging.getLogger(__name__)


def _ref_id(value: Any) -> Any:
    """Reduce an expanded relation ``{"id": 3, ...}`` to its id."""
    if isinstance(value, dict):
        return value.get("id")
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _localized_name(value: Any, language: str) -> str:
    if isinstance(value, dict):
        return LocalizedText.from_wire(value).get(language) or _text(value.get("name"))
    return _text(value)


def _names_draft(name: LocalizedText) -> dict[str, Any]:
    return {"name_uz": name.uz, "name_ru": name.ru}


# Categories

def category_from_wire(dto: dict[str, Any], language: str) -> CategoryRead:
    return CategoryRead(id=dto["id"], name=LocalizedText.from_wire(dto), image=dto.get("image"))


def category_to_draft(record: CategoryRead) -> dict[str, Any]:
    return {**_names_draft(record.name), "image": record.image}


# Units

def unit_from_wire(dto: dict[str, Any], language: str) -> UnitRead:
    return UnitRead(id=dto["id"], name=LocalizedText.from_wire(dto))


def unit_to_draft(record: UnitRead) -> dict[str, Any]:
    return _names_draft(record.name)


# Products

def product_from_wire(dto: dict[str, Any], language: str) -> ProductRead:
    return ProductRead(
        id=dto["id"],
        name=LocalizedText.from_wire(dto),
        price=_decimal(dto.get("price")) or Decimal("0"),
        category=_ref_id(dto.get("category")),
        unity=_ref_id(dto.get("unity")),
        description=_text(dto.get("description")),
        image=dto.get("image"),
        code=_text(dto.get("code")),
        article=_text(dto.get("article")),
        tg_id=_text(dto.get("tg_id")),
        quantity_left=_decimal(dto.get("quantity_left")),
        created_at=dto.get("created_at"),
    )


def product_to_draft(record: ProductRead) -> dict[str, Any]:
    return {
        **_names_draft(record.name),
        "price": record.price,
        "category": record.category,
        "unity": record.unity,
        "description": record.description,
        "code": record.code,
        "article": record.article,
        "tg_id": record.tg_id,
        "quantity_left": record.quantity_left,
        "image": record.image,
    }


def product_defaults() -> dict[str, Any]:
    return {
        "name_uz": "",
        "name_ru": "",
        "price": "",
        "category": None,
        "unity": None,
        "description": "",
        "code": "",
        "article": "",
        "tg_id": "",
        "quantity_left": "",
        "image": None,
    }


# Banners

def banner_from_wire(dto: dict[str, Any], language: str) -> BannerRead:
    return BannerRead(id=dto["id"], banner=_text(dto.get("banner") or dto.get("image")))


def banner_to_draft(record: BannerRead) -> dict[str, Any]:
    return {"banner": record.banner}


# Users

def user_from_wire(dto: dict[str, Any], language: str) -> UserRead:
    return UserRead(
        id=dto["id"],
        username=_text(dto.get("username")),
        email=_text(dto.get("email")),
        role=dto.get("role") or "user",
        created_at=dto.get("created_at") or dto.get("date_joined"),
        last_login=dto.get("last_login"),
    )


def user_to_draft(record: UserRead) -> dict[str, Any]:
    return {"username": record.username, "email": record.email, "role": record.role, "password": ""}


def user_defaults() -> dict[str, Any]:
    return {"username": "", "email": "", "role": "user", "password": ""}


# Orders

def order_item_from_wire(dto: dict[str, Any], language: str) -> OrderItem | None:
    """Map one order line; lines without a positive whole quantity are skipped."""
    product = dto.get("product")
    product_info = product if isinstance(product, dict) else {}
    quantity = _decimal(dto.get("quantity"))
    if (
        quantity is None
        or not quantity.is_finite()
        or quantity <= 0
        or quantity != quantity.to_integral_value()
    ):
        logger.warning(f"Skipping order item with invalid quantity: {dto.get('quantity')!r}")
        return None

    catalog_price = _decimal(product_info.get("price"))
    unit_price = _decimal(dto.get("price"))
    if unit_price is None:
        unit_price = catalog_price if catalog_price is not None else Decimal("0")

    name = _text(dto.get("product_name")) or _localized_name(product_info, language)
    unit = dto.get("unit") or dto.get("unity") or product_info.get("unity")
    return OrderItem(
        product_id=_ref_id(product) if product is not None else dto.get("product_id"),
        product_code=_text(dto.get("product_code") or product_info.get("code")),
        product_name=name,
        unit=_localized_name(unit, language),
        quantity=int(quantity),
        unit_price=unit_price,
        catalog_price=catalog_price,
    )


def order_from_wire(dto: dict[str, Any], language: str) -> OrderRead:
    user = dto.get("user")
    user_info = user if isinstance(user, dict) else {}
    customer_name = (
        dto.get("customer_name")
        or user_info.get("full_name")
        or user_info.get("username")
        or _text(user)
    )
    raw_items = dto.get("items")
    if raw_items is None:
        raw_items = dto.get("order_items") or []
    items = [
        item
        for item in (order_item_from_wire(raw, language) for raw in raw_items if isinstance(raw, dict))
        if item is not None
    ]
    amount = _decimal(dto.get("amount"))
    if amount is None:
        amount = _decimal(dto.get("total_price"))
    if amount is None:
        amount = sum((item.line_total for item in items), Decimal("0"))
    return OrderRead(
        id=dto["id"],
        number=_text(dto.get("number") or dto.get("order_number")),
        customer_name=_text(customer_name),
        customer_email=_text(dto.get("customer_email") or user_info.get("email")),
        status=dto.get("status") or "pending",
        amount=amount,
        items=items,
        created_at=dto.get("created_at"),
    )


def order_to_draft(record: OrderRead) -> dict[str, Any]:
    return {"status": record.status}


CATEGORIES = ResourceConfig(
    name="Category",
    slug="category",
    from_wire=category_from_wire,
    to_draft=category_to_draft,
    defaults=lambda: {"name_uz": "", "name_ru": "", "image": None},
    required_fields=("name_uz", "name_ru"),
    file_fields=("image",),
    transport="multipart",
)

UNITS = ResourceConfig(
    name="Unit",
    slug="unity",
    from_wire=unit_from_wire,
    to_draft=unit_to_draft,
    defaults=lambda: {"name_uz": "", "name_ru": ""},
    required_fields=("name_uz", "name_ru"),
)

PRODUCTS = ResourceConfig(
    name="Product",
    slug="product",
    from_wire=product_from_wire,
    to_draft=product_to_draft,
    defaults=product_defaults,
    required_fields=("name_uz", "name_ru", "price", "category"),
    numeric_fields=("price", "quantity_left"),
    file_fields=("image",),
    transport="multipart",
    filter_keys=("category",),
)

BANNERS = ResourceConfig(
    name="Banner",
    slug="banner",
    from_wire=banner_from_wire,
    to_draft=banner_to_draft,
    defaults=lambda: {"banner": None},
    required_on_create=("banner",),
    file_fields=("banner",),
    transport="multipart",
)

USERS = ResourceConfig(
    name="User",
    slug="user",
    from_wire=user_from_wire,
    to_draft=user_to_draft,
    defaults=user_defaults,
    required_fields=("username", "email"),
    required_on_create=("password",),
    filter_keys=("role",),
)

ORDERS = ResourceConfig(
    name="Order",
    slug="order",
    from_wire=order_from_wire,
    to_draft=order_to_draft,
    defaults=lambda: {"status": "pending"},
    required_fields=("status",),
    can_create=False,
    filter_keys=("status", "date", "user"),
)

RESOURCES: dict[str, ResourceConfig[Any]] = {
    "categories": CATEGORIES,
    "units": UNITS,
    "products": PRODUCTS,
    "banners": BANNERS,
    "users": USERS,
    "orders": ORDERS,
}


def get_resource(name: str) -> ResourceConfig[Any]:
    """Look up a resource by its plural name (``products``) or wire slug (``product``)."""
    key = (name or "").strip().lower()
    if key in RESOURCES:
        return RESOURCES[key]
    for config in RESOURCES.values():
        if config.slug == key:
            return config
    raise KeyError(f"Unknown resource '{name}'")
