"""Tests for the position poller CLI commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from transit_positions.apps.position_poller.cli import app
from transit_positions.apps.position_poller.exceptions import SchemaError
from transit_positions.apps.position_poller.repository import SQLitePositionStore
from transit_positions.clients.transitview.exceptions import TransitViewTransportError
from transit_positions.core.models import VehiclePosition

_POLL_CMD = "transit_positions.apps.position_poller.cli.poll_cmd"
_POSITIONS_CMD = "transit_positions.apps.position_poller.cli.positions_cmd"
_DB_URL = "sqlite+aiosqlite:///:memory:"
_DEFAULT_INTERVAL = 60
_CUSTOM_INTERVAL = 15

_POSITION = VehiclePosition(
    label="to City",
    vehicle_id="101",
    block_id="B1",
    trip="T1",
    latitude=39.95258,
    longitude=-75.16522,
    direction="NorthBound",
    destination="City Hall",
    offset_minutes=2,
    offset_seconds=30,
    heading=90,
    late_minutes=2,
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


def _mock_client(**methods: AsyncMock) -> AsyncMock:
    """Create a mock TransitViewClient usable as an async context manager.

    Args:
        **methods: Fetch methods to install on the client.

    Returns:
        AsyncMock configured as a TransitViewClient.

    """
    mock_client = AsyncMock()
    for name, method in methods.items():
        setattr(mock_client, name, method)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


class TestPollCommand:
    """Test suite for the poll CLI command."""

    def test_missing_db_url_exits(self, runner: CliRunner) -> None:
        """Without a database URL the command refuses to start."""
        with patch(f"{_POLL_CMD}.PositionPoller") as mock_poller_cls:
            result = runner.invoke(app, ["poll"])

        assert result.exit_code == 1
        assert "database URL is required" in result.output
        mock_poller_cls.assert_not_called()

    @pytest.mark.parametrize("interval", ["0", "-5"])
    def test_non_positive_interval_exits(self, runner: CliRunner, interval: str) -> None:
        """A zero or negative interval is a startup error."""
        with patch(f"{_POLL_CMD}.PositionPoller") as mock_poller_cls:
            result = runner.invoke(app, ["poll", "--db-url", _DB_URL, f"--interval={interval}"])

        assert result.exit_code == 1
        assert "interval must be positive" in result.output
        mock_poller_cls.assert_not_called()

    def test_unsupported_backend_exits(self, runner: CliRunner) -> None:
        """A database URL for another backend is a startup error."""
        result = runner.invoke(app, ["poll", "--db-url", "mysql://user:pw@localhost/vehicles"])

        assert result.exit_code == 1
        assert "Unsupported database backend" in result.output

    def test_starts_poller(self, runner: CliRunner) -> None:
        """Valid options build a poller with the chosen store and interval."""
        with (
            patch(f"{_POLL_CMD}.TransitViewClient") as mock_client_cls,
            patch(f"{_POLL_CMD}.PositionPoller") as mock_poller_cls,
        ):
            mock_poller_cls.return_value.run = AsyncMock()

            result = runner.invoke(
                app, ["poll", "--db-url", _DB_URL, "--interval", str(_CUSTOM_INTERVAL)]
            )

        assert result.exit_code == 0
        assert f"interval: {_CUSTOM_INTERVAL}s" in result.output
        feed, store, interval = mock_poller_cls.call_args[0]
        assert feed is mock_client_cls.return_value
        assert isinstance(store, SQLitePositionStore)
        assert interval == _CUSTOM_INTERVAL
        mock_poller_cls.return_value.run.assert_awaited_once()

    def test_settings_supply_defaults(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The database URL can come from the environment via settings.yaml."""
        monkeypatch.setenv("VEHICLEPOS_DB_URL", _DB_URL)

        with (
            patch(f"{_POLL_CMD}.TransitViewClient") as mock_client_cls,
            patch(f"{_POLL_CMD}.PositionPoller") as mock_poller_cls,
        ):
            mock_poller_cls.return_value.run = AsyncMock()

            result = runner.invoke(app, ["poll"])

        assert result.exit_code == 0
        assert mock_poller_cls.call_args[0][2] == _DEFAULT_INTERVAL
        mock_client_cls.assert_called_once_with(
            base_url="https://www3.septa.org/hackathon", timeout=30.0
        )

    def test_schema_error_exits(self, runner: CliRunner) -> None:
        """A schema failure at startup exits with status 1."""
        with (
            patch(f"{_POLL_CMD}.TransitViewClient"),
            patch(f"{_POLL_CMD}.PositionPoller") as mock_poller_cls,
        ):
            mock_poller_cls.return_value.run = AsyncMock(
                side_effect=SchemaError("permission denied for schema public")
            )

            result = runner.invoke(app, ["poll", "--db-url", _DB_URL])

        assert result.exit_code == 1
        assert "permission denied" in result.output


class TestPositionsCommand:
    """Test suite for the positions CLI command."""

    def test_all_routes(self, runner: CliRunner) -> None:
        """Without --route every route is printed in label order."""
        snapshot = {"23": (_POSITION,), "17": (_POSITION,)}

        with patch(f"{_POSITIONS_CMD}.TransitViewClient") as mock_cls:
            mock_cls.return_value = _mock_client(
                get_all_positions=AsyncMock(return_value=snapshot)
            )

            result = runner.invoke(app, ["positions"])

        assert result.exit_code == 0
        assert result.output.index("Route 17") < result.output.index("Route 23")
        assert "to City (#101): NorthBound towards City Hall" in result.output
        assert "offset: 02:30" in result.output
        assert "position: 39.95258 lat, -75.16522 lon, 90 deg" in result.output

    def test_single_route(self, runner: CliRunner) -> None:
        """--route queries only that route's endpoint."""
        get_route = AsyncMock(return_value=[_POSITION])

        with patch(f"{_POSITIONS_CMD}.TransitViewClient") as mock_cls:
            mock_client = _mock_client(
                get_route_positions=get_route, get_all_positions=AsyncMock()
            )
            mock_cls.return_value = mock_client

            result = runner.invoke(app, ["positions", "--route", "17"])

        assert result.exit_code == 0
        assert "Route 17" in result.output
        get_route.assert_awaited_once_with("17")
        mock_client.get_all_positions.assert_not_awaited()

    def test_no_vehicles(self, runner: CliRunner) -> None:
        """An empty route prints a short notice."""
        with patch(f"{_POSITIONS_CMD}.TransitViewClient") as mock_cls:
            mock_cls.return_value = _mock_client(get_route_positions=AsyncMock(return_value=[]))

            result = runner.invoke(app, ["positions", "--route", "999"])

        assert result.exit_code == 0
        assert "No vehicles reported" in result.output

    def test_feed_error_exits(self, runner: CliRunner) -> None:
        """Feed failures are reported and exit with status 1."""
        with patch(f"{_POSITIONS_CMD}.TransitViewClient") as mock_cls:
            mock_cls.return_value = _mock_client(
                get_all_positions=AsyncMock(
                    side_effect=TransitViewTransportError("GET failed: connection refused")
                )
            )

            result = runner.invoke(app, ["positions"])

        assert result.exit_code == 1
        assert "connection refused" in result.output


class TestHelp:
    """Tests for the application entry point."""

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """Both commands are registered."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "poll" in result.output
        assert "positions" in result.output

    def test_main_invokes_app(self) -> None:
        """The console script entry point runs the Typer app."""
        from transit_positions.apps.position_poller import run  # noqa: PLC0415

        with patch.object(run, "app", new=MagicMock()) as mock_app:
            run.main()

        mock_app.assert_called_once_with()
