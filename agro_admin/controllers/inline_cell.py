"""Double-click-to-edit table cell (e.g. a product price column)."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from agro_admin.core.errors import AdminError
from agro_admin.core.notifications import Notifier
from agro_admin.repositories.base import Repository
from agro_admin.utils.form_validator import (
    NEGATIVE_MESSAGE,
    NUMBER_MESSAGE,
    NegativeValueError,
    normalize_amount,
)

logger = logging.getLogger(__name__)

Parser = Callable[[Any], Any]
Commit = Callable[[Any], Awaitable[Any]]


class CellState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class InlineEditableCell:
    """VIEWING -> EDITING -> SAVING -> VIEWING, or EDITING -> VIEWING on cancel."""

    def __init__(
        self,
        value: Any,
        commit: Commit,
        *,
        parser: Parser | None = normalize_amount,
        notifier: Notifier | None = None,
    ):
        self.value = value
        self.state = CellState.VIEWING
        self.editing_value: Any = None
        self.error: str | None = None
        self._commit = commit
        self._parser = parser
        self._notifier = notifier

    @classmethod
    def for_field(
        cls,
        repository: Repository[Any],
        record_id: Any,
        field: str,
        value: Any,
        notifier: Notifier | None = None,
        parser: Parser | None = normalize_amount,
    ) -> "InlineEditableCell":
        """A cell whose commit sends ``{field: value}`` as a partial update."""

        async def save(new_value: Any) -> Any:
            return await repository.update(record_id, {field: new_value})

        return cls(value, save, parser=parser, notifier=notifier)

    def begin_edit(self) -> bool:
        if self.state != CellState.VIEWING:
            return False
        self.editing_value = "" if self.value is None else str(self.value)
        self.error = None
        self.state = CellState.EDITING
        return True

    def update(self, value: Any) -> None:
        if self.state != CellState.EDITING:
            raise RuntimeError(f"Cannot edit a cell in state {self.state.value}")
        self.editing_value = value

    def cancel(self) -> None:
        if self.state == CellState.EDITING:
            self.state = CellState.VIEWING
            self.editing_value = None
            self.error = None

    async def commit(self) -> bool:
        """Parse and save the edited value; returns True when the cell shows it."""
        if self.state != CellState.EDITING:
            return False
        try:
            parsed = self._parser(self.editing_value) if self._parser else self.editing_value
        except NegativeValueError:
            self.error = NEGATIVE_MESSAGE
            return False
        except ValueError:
            self.error = NUMBER_MESSAGE
            return False

        if parsed == self.value:
            self.state = CellState.VIEWING
            self.editing_value = None
            return True

        self.state = CellState.SAVING
        try:
            await self._commit(parsed)
        except AdminError as e:
            logger.warning(f"Inline save failed: {e.message}")
            self.state = CellState.VIEWING
            self.editing_value = None
            self.error = e.message
            if self._notifier is not None:
                self._notifier.failure(e, "Failed to save")
            return False

        self.value = parsed
        self.state = CellState.VIEWING
        self.editing_value = None
        self.error = None
        if self._notifier is not None:
            self._notifier.success("Updated successfully")
        return True
