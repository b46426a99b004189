"""Command line front-end for the Money Tracker"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from money_tracker.config import get_settings
from money_tracker.core.exceptions import AppException, SessionExpiredError
from money_tracker.core.logging_config import setup_logging
from money_tracker.services.export_service import ExportService
from money_tracker.services.ledger_service import safe_id
from money_tracker.services.notification_service import Notification, NotificationType
from money_tracker.services.render_service import RenderService
from money_tracker.services.tracker import TrackerContext

app = typer.Typer(help="Money Tracker: send and receive money between people")

T = TypeVar("T")


def _print_notification(notification: Notification) -> None:
    is_error = notification.type == NotificationType.ERROR
    typer.secho(
        notification.message,
        fg=typer.colors.RED if is_error else typer.colors.GREEN,
        err=is_error,
    )


def _run(action: Callable[[TrackerContext], Awaitable[T]], require_login: bool = True) -> T:
    """Run an async action against a fresh context, mapping errors to exit codes"""
    settings = get_settings()
    setup_logging(settings.log_level)
    ctx = TrackerContext(settings, session_path=settings.session_file, listener=_print_notification)

    if require_login and not ctx.session.token:
        typer.secho("Not logged in. Run `money-tracker login` first.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    async def runner() -> T:
        async with ctx:
            return await action(ctx)

    try:
        return asyncio.run(runner())
    except SessionExpiredError:
        typer.secho("Run `money-tracker login` to start a new session.", err=True)
        raise typer.Exit(code=2)
    except AppException as e:
        last = ctx.notifier.last
        if last is None or last.type != NotificationType.ERROR:
            typer.secho(e.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _show(ctx: TrackerContext, search: Optional[str] = None) -> None:
    typer.echo(RenderService.render_text(ctx.dashboard.view(search)))


@app.command("serve")
def serve_cmd(
    host: Optional[str] = typer.Option(None, help="Bind address (default from HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default from PORT)"),
):
    """Serve the static front-end"""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"Server is running on http://{bind_host}:{bind_port}")
    typer.echo(f"Front-end files are being served from {settings.static_dir}")
    uvicorn.run("money_tracker.main:app", host=bind_host, port=bind_port, log_level=settings.log_level.lower())


@app.command("login")
def login_cmd(
    username: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
):
    """Log in and store the session token"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.login(username, password)

    _run(action, require_login=False)


@app.command("register")
def register_cmd(
    username: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an account"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.register(username, password)

    _run(action, require_login=False)


@app.command("logout")
def logout_cmd():
    """Forget the stored session"""
    async def action(ctx: TrackerContext) -> None:
        ctx.forms.logout()

    _run(action, require_login=False)


@app.command("people")
def people_cmd():
    """List people and their balances"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.dashboard.reload()
        typer.echo(RenderService.render_people_text(ctx.dashboard.view()))

    _run(action)


@app.command("transactions")
def transactions_cmd(
    expand: Optional[str] = typer.Option(None, help="Person whose transactions to show"),
    search: Optional[str] = typer.Option(None, help="Filter by person name or description"),
):
    """Show the dashboard: people, grouped transactions and totals"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.dashboard.reload()
        if expand:
            ctx.dashboard.toggle(safe_id(expand), force_open=True)
        _show(ctx, search)

    _run(action)


@app.command("add-person")
def add_person_cmd(name: str = typer.Argument(..., help="Unique person name")):
    """Add a person"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.add_person(name)

    _run(action)


@app.command("send")
def send_cmd(
    name: str = typer.Argument(..., help="Person to send money to"),
    amount: str = typer.Argument(..., help="Amount"),
    description: str = typer.Option("", "--description", "-d"),
):
    """Record money sent to a person"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.send(name, amount, description)
        _show(ctx)

    _run(action)


@app.command("receive")
def receive_cmd(
    name: str = typer.Argument(..., help="Person money was received from"),
    amount: str = typer.Argument(..., help="Amount"),
    description: str = typer.Option("", "--description", "-d"),
):
    """Record money received from a person"""
    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.receive(name, amount, description)
        _show(ctx)

    _run(action)


@app.command("delete-person")
def delete_person_cmd(
    name: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a person and all their transactions"""
    if not yes:
        typer.confirm(f"Delete {name}? All their transactions will be removed.", abort=True)

    async def action(ctx: TrackerContext) -> None:
        await ctx.forms.delete_person(name)

    _run(action)


@app.command("reverse")
def reverse_cmd(
    transaction_id: str = typer.Argument(..., help="Transaction id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Reverse a transaction"""
    if not yes:
        typer.confirm("Are you sure you want to reverse this transaction?", abort=True)

    async def action(ctx: TrackerContext) -> None:
        await ctx.dashboard.reload()
        await ctx.forms.reverse(transaction_id)
        transaction = ctx.dashboard.find_transaction(transaction_id)
        if transaction is not None:
            ctx.dashboard.toggle(safe_id(transaction.owner_name), force_open=True)
        _show(ctx)

    _run(action)


@app.command("export")
def export_cmd(
    export_format: str = typer.Option("csv", "--format", "-f", help="csv|html"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="File to write (default: stdout)"),
    search: Optional[str] = typer.Option(None, help="Filter by person name or description"),
):
    """Export transactions as CSV or the dashboard as an HTML snapshot"""
    fmt = export_format.lower()
    if fmt not in ("csv", "html"):
        typer.secho("Format must be csv or html", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    async def action(ctx: TrackerContext) -> str:
        await ctx.dashboard.reload()
        view = ctx.dashboard.view(search)
        if fmt == "csv":
            transactions = [t for group in view.groups for t in group.transactions]
            return ExportService.transactions_to_csv(transactions)
        for group in view.groups:
            group.expanded = True
        return ExportService.dashboard_to_html(view)

    content = _run(action)
    written = ExportService.write(content, output)
    if written is None:
        typer.echo(content, nl=False)
    else:
        typer.echo(f"Exported to {written}")


if __name__ == "__main__":
    app()
