"""Create/edit form lifecycle for one resource."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from agro_admin.core.errors import AdminError, ValidationError
from agro_admin.core.notifications import Notifier
from agro_admin.repositories.base import Repository
from agro_admin.utils.form_validator import validate_draft

logger = logging.getLogger(__name__)

R = TypeVar("R")

SavedCallback = Callable[[], Awaitable[Any]]


class FormMode(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class SubmitResult:
    ok: bool
    record: Any = None
    field_errors: dict[str, str] = field(default_factory=dict)
    message: str | None = None


class FormController(Generic[R]):
    """Hold one draft, validate it locally and send it through the repository.

    ``on_saved`` is awaited after a successful save; the dashboard wires it to
    the owning list controller's ``refresh``.
    """

    def __init__(
        self,
        repository: Repository[R],
        notifier: Notifier,
        *,
        on_saved: SavedCallback | None = None,
    ):
        self.repository = repository
        self.notifier = notifier
        self.on_saved = on_saved
        self.mode = FormMode.CLOSED
        self.draft: dict[str, Any] = {}
        self.field_errors: dict[str, str] = {}
        self.record_id: Any = None
        self.submitting = False
        # Bumped on open/close so a save answered after close is ignored
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.mode != FormMode.CLOSED

    def open(self, record: R | None = None, initial: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Start editing ``record``, or a new record when None.

        Any previous draft is discarded. ``initial`` overrides the resource
        defaults of a new draft (e.g. the first available category).
        """
        config = self.repository.config
        self._generation += 1
        self.field_errors = {}
        self.submitting = False
        if record is None:
            self.mode = FormMode.CREATE
            self.record_id = None
            self.draft = {**config.defaults(), **(initial or {})}
        else:
            self.mode = FormMode.EDIT
            self.record_id = getattr(record, "id")
            self.draft = dict(config.to_draft(record))
        logger.debug(f"Opened {config.slug} form in {self.mode.value} mode")
        return self.draft

    def update_field(self, name: str, value: Any) -> None:
        if not self.is_open:
            raise RuntimeError("No form is open")
        self.draft[name] = value

    def validate(self) -> tuple[dict[str, Any], dict[str, str]]:
        config = self.repository.config
        return validate_draft(
            self.draft,
            required=config.required_for(self.mode == FormMode.CREATE),
            numeric=config.numeric_fields,
        )

    async def submit(self) -> SubmitResult:
        """Validate, then create or update.

        Local validation failures return the field errors without any request.
        Server failures notify with the server message and keep the form open.
        """
        if not self.is_open:
            raise RuntimeError("No form is open")

        cleaned, errors = self.validate()
        self.field_errors = errors
        if errors:
            logger.info(f"{self.repository.config.slug} form has errors: {sorted(errors)}")
            return SubmitResult(ok=False, field_errors=errors)

        generation = self._generation
        creating = self.mode == FormMode.CREATE
        self.submitting = True
        try:
            if creating:
                record = await self.repository.create(cleaned)
            else:
                record = await self.repository.update(self.record_id, cleaned)
        except AdminError as e:
            if generation != self._generation:
                logger.info("Form was closed before the save failed, ignoring the error")
                return SubmitResult(ok=False, message=e.message)
            self.submitting = False
            if isinstance(e, ValidationError):
                self.field_errors = {name: "; ".join(msgs) for name, msgs in e.field_errors.items()}
            self.notifier.failure(e, "Failed to save")
            return SubmitResult(ok=False, field_errors=self.field_errors, message=e.message)

        if generation != self._generation:
            logger.info("Form was closed before the save completed, ignoring the response")
            return SubmitResult(ok=True, record=record)

        self.notifier.success("Created successfully" if creating else "Updated successfully")
        self.close()
        if self.on_saved is not None:
            await self.on_saved()
        return SubmitResult(ok=True, record=record)

    def close(self) -> None:
        self._generation += 1
        self.mode = FormMode.CLOSED
        self.draft = {}
        self.field_errors = {}
        self.record_id = None
        self.submitting = False
