"""Pydantic models shared by every resource: queries, pages, bilingual text."""

from __future__ import annotations

import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

# Filter values meaning "no filter" in the dashboard's select boxes
EMPTY_FILTER_VALUES = ("", "all")


def is_empty_filter(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() in EMPTY_FILTER_VALUES)


class LocalizedText(BaseModel):
    """A name carried in both UI languages."""

    uz: str = ""
    ru: str = ""

    def get(self, language: str) -> str:
        """Return the text for ``language``, falling back to the other one."""
        primary, secondary = (self.ru, self.uz) if language == "ru" else (self.uz, self.ru)
        return primary or secondary

    @classmethod
    def from_wire(cls, dto: dict[str, Any], prefix: str = "name") -> "LocalizedText":
        return cls(
            uz=dto.get(f"{prefix}_uz") or "",
            ru=dto.get(f"{prefix}_ru") or "",
        )


class ListQuery(BaseModel):
    """Paging/filter/search state of one list screen."""

    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)
    search_text: str | None = None
    filters: dict[str, Any] = Field(default_factory=dict)
    sort_order: str | None = None

    def to_params(self, search_param: str = "search") -> dict[str, Any]:
        """Request parameters for a list endpoint; empty filters are left out."""
        params: dict[str, Any] = {"page": self.page, "page_size": self.page_size}
        if self.search_text:
            params[search_param] = self.search_text
        for key, value in self.filters.items():
            if not is_empty_filter(value):
                params[key] = value
        if self.sort_order:
            params["ordering"] = self.sort_order
        return params


class Page(BaseModel, Generic[T]):
    """One page of records in server order."""

    items: list[T] = Field(default_factory=list)
    current_page: int = Field(1, ge=1)
    total_pages: int = Field(0, ge=0)
    total_count: int = Field(0, ge=0)

    @staticmethod
    def pages_for(total_count: int, page_size: int) -> int:
        return math.ceil(total_count / page_size) if total_count > 0 else 0
