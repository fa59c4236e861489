"""
CLI tool for the notification relay.

Provides commands for running the server and inspecting stored
notifications and the realtime event vocabulary.
"""

import asyncio

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from relay.api.ws.constants import CLIENT_EVENTS, EventKind
from relay.commands.notification_commands import (
    ListNotificationsCommand,
    ListNotificationsInput,
)
from relay.exceptions import AppException
from relay.repositories.notification_repository import NotificationRepository
from relay.schemas.notification import NotificationRecord
from relay.settings import app_settings
from relay.storage.db import async_session, engine, wait_and_init_db

typer_app = typer.Typer(
    name="relay-cli",
    help="Notification relay CLI - run the server and inspect notifications",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(app_settings.HOST, help="Bind address"),
    port: int = typer.Option(app_settings.PORT, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """
    Run the relay with uvicorn.

    Example:
        python cli.py serve --port 5000
    """
    uvicorn.run(
        "relay:application", factory=True, host=host, port=port, reload=reload
    )


async def _load_notifications(user_id: str | None) -> list[NotificationRecord]:
    await wait_and_init_db()
    try:
        async with async_session() as session:
            command = ListNotificationsCommand(NotificationRepository(session))
            return await command.execute(ListNotificationsInput(user_id=user_id))
    finally:
        await engine.dispose()


@typer_app.command(name="notifications")
def notifications(
    user_id: str = typer.Option(None, "--user-id", help="Only this user"),
):
    """
    Display a table of stored notifications.

    Example:
        python cli.py notifications --user-id 42
    """
    try:
        records = asyncio.run(_load_notifications(user_id))
    except AppException as ex:
        console.print(f"[yellow]{ex.message}[/yellow]")
        raise typer.Exit(code=1)

    table = Table(
        "ID",
        "User",
        "Message",
        "Read",
        "Created",
        title="Stored notifications",
        show_lines=True,
    )
    for record in records:
        table.add_row(
            str(record.id),
            record.user_id,
            record.message,
            "[green]yes[/green]" if record.read else "[dim]no[/dim]",
            record.created_at.isoformat(timespec="seconds"),
        )

    console.print(table)
    console.print(f"[bold]Total:[/bold] {len(records)}")


@typer_app.command(name="events")
def events():
    """
    Display the realtime event vocabulary.

    Example:
        python cli.py events
    """
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Realtime events on /ws[/bold cyan]", border_style="cyan"
        )
    )

    table = Table("Event", "Direction", show_lines=True)
    for event in EventKind:
        direction = (
            "client → server" if event in CLIENT_EVENTS else "server → client"
        )
        table.add_row(f"[green]{event.value}[/green]", direction)

    console.print(table)


if __name__ == "__main__":
    typer_app()
