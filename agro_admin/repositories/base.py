"""Generic per-resource repository: list + create/update/delete over the REST API."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Generic, Literal, Mapping, TypeVar

import pydantic

from agro_admin.api.schemas.common import ListQuery, Page
from agro_admin.core.errors import AdminError, ServerError
from agro_admin.services.http_client import ApiClient
from agro_admin.utils.form_validator import is_blank

logger = logging.getLogger(__name__)

R = TypeVar("R")
Transport = Literal["json", "multipart"]


@dataclass(frozen=True)
class FileUpload:
    """A file picked in a form, sent as one multipart part."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> "FileUpload":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)


@dataclass(frozen=True)
class ResourceConfig(Generic[R]):
    """Everything that differs between resource screens.

    ``from_wire`` maps a server DTO (plus the active language) to the record
    model; ``to_draft`` turns a record into the flat field mapping edited by
    the form; ``defaults`` builds a blank draft for the create form.
    """

    name: str
    slug: str
    from_wire: Callable[[dict[str, Any], str], R]
    to_draft: Callable[[R], dict[str, Any]]
    defaults: Callable[[], dict[str, Any]] = dict
    required_fields: tuple[str, ...] = ()
    required_on_create: tuple[str, ...] = ()
    numeric_fields: tuple[str, ...] = ()
    file_fields: tuple[str, ...] = ()
    transport: Transport = "json"
    can_create: bool = True
    search_param: str = "search"
    filter_keys: tuple[str, ...] = ()

    def list_path(self) -> str:
        return f"/{self.slug}/list/"

    def create_path(self) -> str:
        return f"/{self.slug}/create/"

    def update_path(self, record_id: Any) -> str:
        return f"/{self.slug}/{record_id}/update/"

    def delete_path(self, record_id: Any) -> str:
        return f"/{self.slug}/{record_id}/delete/"

    def required_for(self, creating: bool) -> tuple[str, ...]:
        if creating:
            return self.required_fields + self.required_on_create
        return self.required_fields


def normalize_page(payload: Any, page: int, page_size: int) -> tuple[list[Any], int, int, int]:
    """Bring every list response shape to (rows, current_page, total_pages, total_count).

    Handled shapes:
      - ``{"results": [...], "page": p, "total_pages": n, "count": c}`` (server paging)
      - a bare array, or ``results`` longer than ``page_size`` (server ignored
        paging): the array is the whole collection and is paginated here.
    """
    meta: dict[str, Any] = {}
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        meta = payload
        rows = payload.get("results")
        if rows is None:
            rows = payload.get("items")
        if rows is None and isinstance(payload.get("data"), list):
            rows = payload["data"]
        rows = rows or []
    else:
        rows = []

    total_pages = meta.get("total_pages")
    count = meta.get("count", meta.get("total"))

    if not meta or len(rows) > page_size:
        total_count = len(rows)
        start = (page - 1) * page_size
        return (
            rows[start:start + page_size],
            page,
            Page.pages_for(total_count, page_size),
            total_count,
        )

    current = int(meta.get("page") or meta.get("current_page") or page)
    if count is not None:
        total_count = int(count)
    else:
        # Lower bound; exact only on the last page
        total_count = (current - 1) * page_size + len(rows)
    if total_pages is None:
        if count is not None:
            total_pages = Page.pages_for(total_count, page_size)
        else:
            total_pages = current if rows else 0
    return rows, max(current, 1), int(total_pages), total_count


def _wire_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(_wire_value(value))


class Repository(Generic[R]):
    """Translate between records and wire DTOs for one resource type."""

    def __init__(
        self,
        client: ApiClient,
        config: ResourceConfig[R],
        *,
        language_provider: Callable[[], str] = lambda: "uz",
    ):
        self._client = client
        self.config = config
        self._language_provider = language_provider

    async def list(self, query: ListQuery) -> Page[R]:
        params = query.to_params(self.config.search_param)
        payload = await self._client.get(self.config.list_path(), params=params)
        rows, current, total_pages, total_count = normalize_page(
            payload, query.page, query.page_size
        )
        language = self._language_provider()
        items = [self._map(dto, language) for dto in rows]
        logger.info(
            f"Fetched {self.config.slug} page {current}/{total_pages} "
            f"({len(items)} of {total_count} records)"
        )
        return Page(
            items=items,
            current_page=current,
            total_pages=total_pages,
            total_count=total_count,
        )

    async def create(self, draft: Mapping[str, Any]) -> R | None:
        """Create a record; returns the server copy when the response carries one."""
        if not self.config.can_create:
            raise AdminError(f"{self.config.name} records cannot be created from the dashboard")
        body = self._encode(draft, creating=True)
        payload = await self._client.post(self.config.create_path(), **body)
        logger.info(f"Created {self.config.slug} record")
        return self._record_or_none(payload)

    async def update(self, record_id: Any, draft: Mapping[str, Any]) -> R | None:
        """Partial update: only the fields present in ``draft`` are sent."""
        body = self._encode(draft, creating=False)
        payload = await self._client.patch(self.config.update_path(record_id), **body)
        logger.info(f"Updated {self.config.slug} {record_id}")
        return self._record_or_none(payload)

    async def delete(self, record_id: Any) -> None:
        """Raises NotFoundError when the record is already gone."""
        await self._client.delete(self.config.delete_path(record_id))
        logger.info(f"Deleted {self.config.slug} {record_id}")

    def _encode(self, draft: Mapping[str, Any], *, creating: bool) -> dict[str, Any]:
        """Serialize a draft to ``json=`` or multipart ``files=`` request kwargs.

        Files are only sent when a new FileUpload was picked, so an update
        never clears the stored image. Create-only fields left blank on update
        (e.g. a password) are dropped too.
        """
        fields: dict[str, Any] = {}
        for key, value in draft.items():
            if key in self.config.file_fields or value is None:
                continue
            if not creating and key in self.config.required_on_create and is_blank(value):
                continue
            fields[key] = value

        if self.config.transport == "json":
            return {"json": {key: _wire_value(value) for key, value in fields.items()}}

        # Filename-less parts keep the body multipart without a file
        parts: dict[str, tuple[Any, ...]] = {
            key: (None, _form_value(value)) for key, value in fields.items()
        }
        for key in self.config.file_fields:
            upload = draft.get(key)
            if isinstance(upload, FileUpload):
                parts[key] = (upload.filename, upload.content, upload.content_type)
        return {"files": parts}

    def _record_or_none(self, payload: Any) -> R | None:
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if isinstance(payload, dict) and "id" in payload:
            return self._map(payload, self._language_provider())
        return None

    def _map(self, dto: Any, language: str) -> R:
        try:
            return self.config.from_wire(dto, language)
        except (pydantic.ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unmappable {self.config.slug} record {dto!r}: {e}")
            raise ServerError("Unexpected response from server") from e
