"""Dashboard figures computed from loaded orders and users."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from agro_admin.api.schemas.order import OrderRead
from agro_admin.api.schemas.user import USER_ROLES, UserRead


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int
    total_revenue: Decimal
    total_items: int
    pending_orders: int


@dataclass(frozen=True)
class ProductStat:
    name: str
    order_count: int
    total_quantity: int


def summarize_orders(orders: Iterable[OrderRead]) -> OrderSummary:
    orders = list(orders)
    return OrderSummary(
        total_orders=len(orders),
        total_revenue=sum((order.amount for order in orders), Decimal("0")),
        total_items=sum(order.item_count for order in orders),
        pending_orders=sum(1 for order in orders if order.status == "pending"),
    )


def top_products(orders: Iterable[OrderRead], limit: int = 5) -> list[ProductStat]:
    """Most ordered products by total quantity; ``order_count`` counts order lines."""
    lines: Counter[str] = Counter()
    quantities: Counter[str] = Counter()
    for order in orders:
        for item in order.items:
            name = item.product_name or item.product_code or str(item.product_id)
            lines[name] += 1
            quantities[name] += item.quantity

    ranked = sorted(quantities.items(), key=lambda pair: pair[1], reverse=True)
    return [
        ProductStat(name=name, order_count=lines[name], total_quantity=quantity)
        for name, quantity in ranked[:limit]
    ]


def summarize_users(users: Iterable[UserRead]) -> dict[str, int]:
    """Count users per role; known roles are always present, plus ``total``."""
    counts = {role: 0 for role in USER_ROLES}
    total = 0
    for user in users:
        counts[user.role] = counts.get(user.role, 0) + 1
        total += 1
    counts["total"] = total
    return counts
