"""Record schemas package."""
from agro_admin.api.schemas.banner import BannerRead
from agro_admin.api.schemas.common import ListQuery, LocalizedText, Page
from agro_admin.api.schemas.order import OrderItem, OrderRead
from agro_admin.api.schemas.product import CategoryRead, ProductRead, UnitRead
from agro_admin.api.schemas.user import UserRead

__all__ = [
    "BannerRead",
    "CategoryRead",
    "ListQuery",
    "LocalizedText",
    "OrderItem",
    "OrderRead",
    "Page",
    "ProductRead",
    "UnitRead",
    "UserRead",
]
