"""Command-line entry point for the admin dashboard core."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import click

from agro_admin.api.schemas import BannerRead, ListQuery, OrderRead, UserRead
from agro_admin.core.config import SUPPORTED_LANGUAGES
from agro_admin.core.errors import AdminError
from agro_admin.core.notifications import Notification
from agro_admin.main import Dashboard, create_dashboard
from agro_admin.repositories.resources import RESOURCES, get_resource
from agro_admin.services.statistics import summarize_orders, summarize_users, top_products
from agro_admin.storage.file_storage import save_exports

_COLORS = {"success": "green", "info": None, "warning": "yellow", "error": "red"}


def print_notification(notification: Notification) -> None:
    click.secho(notification.message, fg=_COLORS[notification.level], err=notification.level == "error")


def parse_filters(values: tuple[str, ...], allowed: tuple[str, ...] | None = None) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a dict, limited to ``allowed`` keys."""
    filters: dict[str, str] = {}
    for value in values:
        key, sep, item = value.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got '{value}'", param_hint="--filter")
        if allowed is not None and key not in allowed:
            choices = ", ".join(allowed) or "none"
            raise click.BadParameter(f"unknown filter '{key}' (choose from: {choices})", param_hint="--filter")
        filters[key] = item.strip()
    return filters


def describe(record: Any, language: str, media_base_url: str | None = None) -> str:
    """One-line summary of a record for terminal output."""
    if isinstance(record, OrderRead):
        return (
            f"#{record.display_number} {record.customer_name} [{record.status}] "
            f"{record.amount} ({record.item_count} items)"
        )
    if isinstance(record, UserRead):
        return f"{record.username} <{record.email}> [{record.role}]"
    if isinstance(record, BannerRead):
        return record.image_url(media_base_url) if media_base_url else record.banner
    name = getattr(record, "name", None)
    text = name.get(language) if hasattr(name, "get") else str(name or "")
    price = getattr(record, "price", None)
    return f"{text} - {price}" if price is not None else text


def run(dashboard: Dashboard, action: Callable[[Dashboard], Awaitable[Any]]) -> Any:
    """Run one async action and always close the HTTP client."""

    async def _main() -> Any:
        try:
            return await action(dashboard)
        finally:
            await dashboard.aclose()

    try:
        return asyncio.run(_main())
    except AdminError as e:
        raise click.ClickException(dashboard.translator.t(e.message)) from e


async def fetch_all(dashboard: Dashboard, resource: str, filters: dict[str, Any] | None = None) -> list[Any]:
    """Walk every page of a resource list."""
    repository = dashboard.repository(resource)
    query = ListQuery(page=1, page_size=dashboard.settings.page_size, filters=filters or {})
    records: list[Any] = []
    while True:
        page = await repository.list(query)
        records.extend(page.items)
        if not page.items or query.page >= page.total_pages:
            return records
        query = query.model_copy(update={"page": query.page + 1})


@click.group(name="agro-admin", help="Manage the catalog, orders and users of the shop backend.")
@click.option(
    "--language",
    type=click.Choice(SUPPORTED_LANGUAGES),
    default=None,
    help="Interface and Accept-Language language.",
)
@click.pass_context
def cli(ctx: click.Context, language: str | None) -> None:
    dashboard = create_dashboard()
    if language:
        dashboard.set_language(language)
    dashboard.notifier.add_sink(print_notification)
    ctx.obj = dashboard


@cli.command(help="Sign in and store the token pair.")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_obj
def login(dashboard: Dashboard, username: str, password: str) -> None:
    run(dashboard, lambda d: d.auth.login(username, password))
    dashboard.notifier.success("Logged in")


@cli.command(help="Forget the stored token pair.")
@click.pass_obj
def logout(dashboard: Dashboard) -> None:
    dashboard.auth.logout()
    asyncio.run(dashboard.aclose())
    dashboard.notifier.success("Logged out")


@cli.command(name="list", help="Show one page of a resource.")
@click.argument("resource", type=click.Choice(sorted(RESOURCES)))
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--search", default=None)
@click.option("--filter", "filters", multiple=True, help="key=value, repeatable")
@click.pass_obj
def list_records(
    dashboard: Dashboard, resource: str, page: int, search: str | None, filters: tuple[str, ...]
) -> None:
    parsed = parse_filters(filters, get_resource(resource).filter_keys)

    async def action(d: Dashboard) -> Any:
        controller = d.list_controller(resource)
        controller.query = controller.query.model_copy(
            update={"page": max(page, 1), "search_text": search or None, "filters": parsed}
        )
        await controller.load()
        return controller

    controller = run(dashboard, action)
    language = dashboard.translator.language
    media_base_url = dashboard.settings.media_base_url
    for record in controller.items:
        click.echo(f"{record.id}\t{describe(record, language, media_base_url)}")
    click.secho(
        f"page {controller.current_page}/{controller.total_pages}, {controller.page.total_count} total",
        fg="cyan",
    )


@cli.command(help="Delete one record.")
@click.argument("resource", type=click.Choice(sorted(RESOURCES)))
@click.argument("record_id")
@click.pass_obj
def delete(dashboard: Dashboard, resource: str, record_id: str) -> None:
    run(dashboard, lambda d: d.list_controller(resource).delete_item(record_id))


@cli.command(name="export-orders", help="Export order lines to .xlsx, one file per customer.")
@click.option("--date", "date_filter", default=None, help="Order date filter (YYYY-MM-DD)")
@click.option("--status", default=None)
@click.option("--order", "order_ids", multiple=True, help="Export only these order ids into one file")
@click.option("--output", type=click.Path(file_okay=False), default=None)
@click.pass_obj
def export_orders(
    dashboard: Dashboard,
    date_filter: str | None,
    status: str | None,
    order_ids: tuple[str, ...],
    output: str | None,
) -> None:
    orders = run(dashboard, lambda d: fetch_all(d, "orders", {"status": status, "date": date_filter}))
    files = dashboard.export_service.export(
        orders, selected_ids=list(order_ids) or None, date_filter=date_filter
    )
    if not files:
        dashboard.notifier.info("Nothing to export")
        return
    for path in save_exports(files, output):
        click.secho(str(path), fg="green")


@cli.command(help="Order totals, top products and users per role.")
@click.pass_obj
def stats(dashboard: Dashboard) -> None:
    async def action(d: Dashboard) -> tuple[list[Any], list[Any]]:
        return await fetch_all(d, "orders"), await fetch_all(d, "users")

    orders, users = run(dashboard, action)
    summary = summarize_orders(orders)
    click.echo(f"Orders: {summary.total_orders} (pending {summary.pending_orders})")
    click.echo(f"Revenue: {summary.total_revenue}")
    click.echo(f"Items sold: {summary.total_items}")
    click.secho("Top products:", bold=True)
    for stat in top_products(orders):
        click.echo(f"  {stat.name}: {stat.total_quantity} pcs in {stat.order_count} orders")
    click.secho("Users:", bold=True)
    for role, count in summarize_users(users).items():
        click.echo(f"  {role}: {count}")


if __name__ == "__main__":
    cli()
