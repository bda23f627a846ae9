"""Typer console interface for the import review workflow.

Each command opens a ``ReviewStoreClient`` from ``Settings``, resolves the workspace (and the user's role in it),
runs one controller action and prints the resulting state. Review state lives on the server, so consecutive
commands pick up where the previous one left off.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

import typer

from import_review.controllers.review_controller import ImportReviewController
from import_review.core.errors import NoWorkspaceError
from import_review.core.models import DuplicateStatus, ProblemDetails, Severity, Workspace
from import_review.core.settings import Settings, get_settings
from import_review.core.utils import get_logger, setup_logging
from import_review.services.base import ReviewStore
from import_review.services.review_client import ReviewStoreClient
from import_review.services.statement_files import StatementFile

logger = get_logger("import-review.cli")

SEVERITY_COLORS = {
    Severity.INFO: typer.colors.BLUE,
    Severity.SUCCESS: typer.colors.GREEN,
    Severity.WARNING: typer.colors.YELLOW,
    Severity.DANGER: typer.colors.RED,
}
DUPLICATE_LABELS = {
    DuplicateStatus.NEW: "new",
    DuplicateStatus.EXACT_DUPLICATE: "duplicate",
    DuplicateStatus.POTENTIAL_DUPLICATE: "potential duplicate",
}

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Upload bank statements (OFX/QFX), review the parsed transactions, and import them into a workspace.",
)


def build_store(settings: Settings) -> ReviewStore:
    """Create the review store used by every command."""
    return ReviewStoreClient(settings)


@asynccontextmanager
async def open_controller(settings: Settings) -> AsyncIterator[ImportReviewController]:
    """Yield a controller bound to the configured workspace, closing the store afterwards."""
    store = build_store(settings)
    try:
        workspace = await resolve_workspace(store, settings.workspace_key)
        yield ImportReviewController(store, settings, workspace=workspace)
    finally:
        if isinstance(store, ReviewStoreClient):
            await store.aclose()


async def resolve_workspace(store: ReviewStore, workspace_key: str | None) -> Workspace | None:
    """Find the workspace with the given key among those visible to the user."""
    if not workspace_key:
        return None
    for workspace in await store.list_workspaces():
        if workspace.key == workspace_key:
            return workspace
    logger.warning(f"Workspace {workspace_key} not found")
    return None


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj


def _fail(problem: ProblemDetails | None) -> None:
    """Print the displayed error, if any, and exit with status 1."""
    if problem is not None:
        typer.secho(str(problem), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


def _render_review(controller: ImportReviewController) -> None:
    state = controller.state
    if state.page is not None:
        if not state.page.items:
            typer.echo("No pending imports.")
        for item in state.page.items:
            mark = "x" if item.is_selected else " "
            label = DUPLICATE_LABELS[item.duplicate_status]
            typer.echo(f"[{mark}] {item.key}  {item.date.isoformat()}  {item.payee:<30}  {item.amount:>12}  {label}")
        meta = state.page.metadata
        if meta.total_pages > 1:
            typer.echo(f"Page {meta.page_number} of {meta.total_pages} ({meta.first_item}-{meta.last_item})")
    if state.summary is not None:
        summary = state.summary
        typer.echo(f"Selected {summary.selected_count} of {summary.total_count} transactions")
        if controller.has_potential_duplicates:
            typer.secho(
                f"{summary.potential_duplicate_count} potential duplicates need review",
                fg=typer.colors.YELLOW,
            )


@app.callback()
def _root(
    ctx: typer.Context,
    workspace: Annotated[str | None, typer.Option(help="Workspace key (overrides WORKSPACE_KEY).")] = None,
    log_level: Annotated[str | None, typer.Option(help="Log level (overrides LOG_LEVEL).")] = None,
) -> None:
    """Load settings and configure logging for every command."""
    settings = get_settings()
    if workspace:
        settings.workspace_key = workspace
    if log_level:
        settings.log_level = log_level
    setup_logging(settings.log_level)
    ctx.obj = settings


@app.command("workspaces")
def workspaces_cmd(ctx: typer.Context) -> None:
    """List workspaces and your role in each."""

    async def run() -> list[Workspace]:
        store = build_store(_settings(ctx))
        try:
            return await store.list_workspaces()
        finally:
            if isinstance(store, ReviewStoreClient):
                await store.aclose()

    for workspace in asyncio.run(run()):
        typer.echo(f"{workspace.key}  {workspace.name:<30}  {workspace.role.name.lower()}")


@app.command("upload")
def upload_cmd(
    ctx: typer.Context,
    files: Annotated[
        list[Path],
        typer.Argument(help="OFX/QFX files to upload, in order.", exists=True, dir_okay=False),
    ],
) -> None:
    """Upload statement files for review."""

    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            controller.choose_files(StatementFile.from_path(path) for path in files)
            await controller.upload_selected()
            return controller

    controller = asyncio.run(run())
    status = controller.state.upload_status
    if status is None:
        _fail(controller.state.page_error or NoWorkspaceError().to_problem())
    for line in status.lines:
        typer.secho(str(line), fg=SEVERITY_COLORS[line.severity])
        for row_error in line.row_errors:
            typer.echo(f"    {row_error}")
    _render_review(controller)
    if status.severity is Severity.DANGER:
        _fail(controller.state.page_error)


@app.command("review")
def review_cmd(
    ctx: typer.Context,
    page: Annotated[int, typer.Option(min=1, help="Page number to show.")] = 1,
) -> None:
    """Show pending transactions and the review summary."""

    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            if await controller.open() and page > 1:
                await controller.go_to_page(page)
            return controller

    controller = asyncio.run(run())
    _fail(controller.state.page_error)
    _render_review(controller)


@app.command("toggle")
def toggle_cmd(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Key of the transaction to select or deselect.")],
    page: Annotated[int, typer.Option(min=1, help="Page the transaction is on.")] = 1,
) -> None:
    """Flip the selection of one pending transaction."""

    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            if await controller.open() and (page == 1 or await controller.go_to_page(page)):
                await controller.toggle(key)
            return controller

    controller = asyncio.run(run())
    _fail(controller.state.page_error)
    _render_review(controller)


def _bulk(ctx: typer.Context, *, select: bool) -> None:
    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            if await controller.open():
                await (controller.select_all() if select else controller.deselect_all())
            return controller

    controller = asyncio.run(run())
    _fail(controller.state.page_error)
    _render_review(controller)


@app.command("select-all")
def select_all_cmd(ctx: typer.Context) -> None:
    """Select every pending transaction."""
    _bulk(ctx, select=True)


@app.command("deselect-all")
def deselect_all_cmd(ctx: typer.Context) -> None:
    """Deselect every pending transaction."""
    _bulk(ctx, select=False)


@app.command("commit")
def commit_cmd(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Import the selected transactions and discard the rest."""

    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            if not await controller.open():
                return controller
            confirmation = controller.request_commit()
            if confirmation is None:
                return controller
            typer.echo(f"{confirmation.selected_count} transactions will be imported.")
            if confirmation.discarded_count:
                typer.echo(f"{confirmation.discarded_count} transactions will be discarded.")
            if confirmation.potential_duplicate_count:
                typer.echo(f"{confirmation.potential_duplicate_count} potential duplicates detected.")
            if yes or typer.confirm("Import now?"):
                result = await controller.confirm_commit()
                if result is not None:
                    typer.secho(
                        f"Imported {result.accepted_count} transactions, discarded {result.rejected_count}.",
                        fg=typer.colors.GREEN,
                    )
            else:
                controller.cancel_commit()
                typer.echo("Import cancelled.")
            return controller

    controller = asyncio.run(run())
    _fail(controller.state.page_error)
    if controller.state.summary is not None and not controller.commit.can_commit and not controller.state.closed:
        typer.echo("No transactions are selected for import.")
        raise typer.Exit(1)


@app.command("discard")
def discard_cmd(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Delete every pending transaction without importing."""

    async def run() -> ImportReviewController:
        async with open_controller(_settings(ctx)) as controller:
            if not await controller.open():
                return controller
            count = controller.request_discard()
            if count is None:
                typer.echo("No pending imports.")
                return controller
            if yes or typer.confirm(f"Delete {count} pending transactions?"):
                if await controller.confirm_discard():
                    typer.echo(f"Deleted {count} pending transactions.")
            else:
                controller.cancel_discard()
                typer.echo("Delete cancelled.")
            return controller

    controller = asyncio.run(run())
    _fail(controller.state.page_error)


if __name__ == "__main__":
    app()
