"""Paging, filtering and search state of one resource list screen."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Generic, TypeVar

from agro_admin.api.schemas.common import ListQuery, Page, is_empty_filter
from agro_admin.core.errors import AdminError, NotFoundError
from agro_admin.core.notifications import Notifier
from agro_admin.repositories.base import Repository

logger = logging.getLogger(__name__)

R = TypeVar("R")


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ListController(Generic[R]):
    """Keep the visible page in sync with the query state.

    Every fetch is tagged with an increasing sequence number; a response whose
    number is no longer the latest is dropped, so a slow earlier request can
    never overwrite the result of a newer one. Failed fetches notify and keep
    the previously displayed page.
    """

    def __init__(self, repository: Repository[R], notifier: Notifier, *, page_size: int = 10):
        self.repository = repository
        self.notifier = notifier
        self.query = ListQuery(page=1, page_size=page_size)
        self.page: Page[R] = Page()
        self.state = LoadState.IDLE
        self.error: str | None = None
        self._sequence = 0

    @property
    def items(self) -> list[R]:
        return self.page.items

    @property
    def current_page(self) -> int:
        return self.page.current_page

    @property
    def total_pages(self) -> int:
        return self.page.total_pages

    async def load(self) -> bool:
        """Fetch the page described by the current query."""
        return await self._fetch(self.query)

    async def set_page(self, page: int) -> bool:
        """Go to ``page``; out-of-range or non-integer pages are ignored."""
        if isinstance(page, bool) or not isinstance(page, int):
            return False
        if page < 1 or page > self.page.total_pages:
            logger.debug(f"Ignoring page {page}, valid range is 1..{self.page.total_pages}")
            return False
        self.query = self.query.model_copy(update={"page": page})
        return await self._fetch(self.query)

    async def set_filter(self, key: str, value: Any) -> bool:
        """Change one filter dimension and reload from page 1.

        Raises ValueError for a key the resource cannot be filtered by.
        """
        if key not in self.repository.config.filter_keys:
            raise ValueError(f"{self.repository.config.name} list has no filter '{key}'")
        filters = dict(self.query.filters)
        if is_empty_filter(value):
            filters.pop(key, None)
        else:
            filters[key] = value
        return await self._requery(filters=filters)

    async def set_search_text(self, text: str | None) -> bool:
        """Change the search text and reload from page 1; repeating the same text is a no-op."""
        search_text = (text or "").strip() or None
        if search_text == self.query.search_text and self.state != LoadState.IDLE:
            return True
        return await self._requery(search_text=search_text)

    async def refresh(self) -> bool:
        """Reload the current page, clamping to the last page when it no longer exists."""
        sequence = self._next_sequence()
        query = self.query
        try:
            page = await self.repository.list(query)
            if query.page > 1 and query.page > page.total_pages:
                query = query.model_copy(update={"page": page.total_pages or 1})
                logger.info(f"Page {self.query.page} is gone, moving to page {query.page}")
                page = await self.repository.list(query)
        except NotFoundError as e:
            if query.page == 1:
                return self._fail(sequence, e)
            # Paged endpoints answer 404 for a page past the end
            try:
                query = query.model_copy(update={"page": 1})
                page = await self.repository.list(query)
                if page.total_pages > 1:
                    query = query.model_copy(update={"page": page.total_pages})
                    page = await self.repository.list(query)
            except AdminError as retry_error:
                return self._fail(sequence, retry_error)
        except AdminError as e:
            return self._fail(sequence, e)
        return self._apply(sequence, query, page)

    async def delete_item(self, record_id: Any) -> bool:
        """Delete on the server, then refresh; an already-deleted record counts as deleted."""
        try:
            await self.repository.delete(record_id)
        except NotFoundError:
            logger.info(f"{self.repository.config.slug} {record_id} was already deleted")
            self.notifier.warning("Record was already deleted")
        except AdminError as e:
            self.notifier.failure(e, "Failed to delete")
            return False
        else:
            self.notifier.success("Deleted successfully")
        await self.refresh()
        return True

    async def _requery(self, **changes: Any) -> bool:
        self.query = self.query.model_copy(update={**changes, "page": 1})
        return await self._fetch(self.query)

    def _next_sequence(self) -> int:
        self._sequence += 1
        self.state = LoadState.LOADING
        return self._sequence

    async def _fetch(self, query: ListQuery) -> bool:
        sequence = self._next_sequence()
        try:
            page = await self.repository.list(query)
        except AdminError as e:
            return self._fail(sequence, e)
        return self._apply(sequence, query, page)

    def _is_stale(self, sequence: int) -> bool:
        if sequence != self._sequence:
            logger.debug(f"Dropping stale response #{sequence}, latest is #{self._sequence}")
            return True
        return False

    def _apply(self, sequence: int, query: ListQuery, page: Page[R]) -> bool:
        if self._is_stale(sequence):
            return False
        self.query = query
        self.page = page
        self.state = LoadState.LOADED
        self.error = None
        return True

    def _fail(self, sequence: int, error: AdminError) -> bool:
        if self._is_stale(sequence):
            return False
        self.state = LoadState.FAILED
        self.error = error.message
        self.notifier.failure(error, "Failed to load data")
        return False
