"""
Tests for the relay CLI commands.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from cli import typer_app
from relay.exceptions import NotFoundError
from relay.schemas.notification import NotificationRecord

runner = CliRunner()


def test_events_lists_vocabulary():
    result = runner.invoke(typer_app, ["events"])

    assert result.exit_code == 0
    for name in ("notification", "connected", "join_room", "leave_room"):
        assert name in result.stdout


def test_notifications_table():
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    records = [
        NotificationRecord(
            id=1,
            message="Build finished",
            user_id="u1",
            created_at=now,
            updated_at=now,
        )
    ]

    with patch("cli._load_notifications", AsyncMock(return_value=records)) as load:
        result = runner.invoke(typer_app, ["notifications", "--user-id", "u1"])

    assert result.exit_code == 0
    assert "Build finished" in result.stdout
    assert "Total:" in result.stdout
    load.assert_awaited_once_with("u1")


def test_notifications_empty_store_exits_with_error():
    with patch(
        "cli._load_notifications",
        AsyncMock(side_effect=NotFoundError("No Notification Found")),
    ):
        result = runner.invoke(typer_app, ["notifications"])

    assert result.exit_code == 1
    assert "No Notification Found" in result.stdout
