"""Dashboard composition root: wires settings, API client, auth and resources."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from agro_admin.controllers.form_controller import FormController
from agro_admin.controllers.inline_cell import InlineEditableCell
from agro_admin.controllers.list_controller import ListController
from agro_admin.core.config import Settings, get_settings
from agro_admin.core.i18n import Translator
from agro_admin.core.logging_config import setup_logging
from agro_admin.core.notifications import Notifier
from agro_admin.repositories.base import Repository
from agro_admin.repositories.resources import RESOURCES, get_resource
from agro_admin.services.auth_service import AuthGate, TokenStore
from agro_admin.services.export_service import OrderExportService
from agro_admin.services.http_client import ApiClient

logger = logging.getLogger(__name__)


class Dashboard:
    """One signed-in dashboard session and the objects every screen shares."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.translator = Translator(settings.default_language)
        self.notifier = Notifier(self.translator)
        self.token_store = TokenStore(settings.token_file)
        self.client = ApiClient(
            settings.api_base_url,
            token_provider=lambda: self.auth.token(),
            language_provider=lambda: self.translator.language,
            timeout=settings.request_timeout,
            transport=transport,
        )
        self.auth = AuthGate(self.client, self.token_store)
        self.repositories: dict[str, Repository[Any]] = {
            name: Repository(self.client, config, language_provider=lambda: self.translator.language)
            for name, config in RESOURCES.items()
        }
        self.export_service = OrderExportService(self.translator)

    def repository(self, resource: str) -> Repository[Any]:
        config = get_resource(resource)
        for repository in self.repositories.values():
            if repository.config is config:
                return repository
        raise KeyError(f"Unknown resource '{resource}'")

    def list_controller(self, resource: str) -> ListController[Any]:
        return ListController(self.repository(resource), self.notifier, page_size=self.settings.page_size)

    def form_controller(
        self, resource: str, list_controller: ListController[Any] | None = None
    ) -> FormController[Any]:
        """A form whose successful save refreshes ``list_controller``."""
        on_saved = list_controller.refresh if list_controller is not None else None
        return FormController(self.repository(resource), self.notifier, on_saved=on_saved)

    def cell(self, resource: str, record_id: Any, field: str, value: Any, **kwargs: Any) -> InlineEditableCell:
        return InlineEditableCell.for_field(
            self.repository(resource), record_id, field, value, notifier=self.notifier, **kwargs
        )

    def set_language(self, language: str) -> None:
        self.translator.set_language(language)
        logger.info(f"Language switched to {self.translator.language}")

    async def aclose(self) -> None:
        await self.client.aclose()


def create_dashboard(
    settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None
) -> Dashboard:
    """Build a Dashboard from settings (environment/.env by default)."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    dashboard = Dashboard(settings, transport=transport)
    logger.info(f"{settings.app_name} ready, API at {settings.api_base_url}")
    return dashboard
