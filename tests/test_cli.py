"""
Tests for the command-line interface.

Runs commands against a temporary SQLite database.
"""

import re

import pytest
from typer.testing import CliRunner

from phluowise.cli import app
from phluowise.settings import settings
from phluowise.storage.collections import get_storage

runner = CliRunner()


@pytest.fixture(autouse=True)
def sqlite_storage(tmp_path, monkeypatch):
    """Point the process storage at a fresh database."""
    monkeypatch.setattr(settings, "storage_backend", "sql")
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{tmp_path / 'cli.db'}")
    get_storage.cache_clear()
    yield
    if get_storage.cache_info().currsize:
        get_storage().backend.database.dispose()
    get_storage.cache_clear()


def _register_and_login():
    runner.invoke(app, ["register", "--email", "ada@example.com", "--password", "pw", "--first-name", "Ada"])
    return runner.invoke(app, ["login", "--email", "ada@example.com", "--password", "pw"])


class TestAccountCommands:
    """Test register, login and whoami."""

    def test_init(self):
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Storage initialized" in result.output

    def test_init_drop_deletes_accounts(self):
        """After init --drop the old account no longer exists."""
        _register_and_login()

        result = runner.invoke(app, ["init", "--drop"])

        assert result.exit_code == 0
        assert "Existing data deleted" in result.output
        assert runner.invoke(app, ["whoami"]).exit_code == 1
        login = runner.invoke(app, ["login", "--email", "ada@example.com", "--password", "pw"])
        assert login.exit_code == 1

    def test_register_and_login(self):
        """Login after registration shows the account."""
        result = _register_and_login()

        assert result.exit_code == 0
        assert "Logged in as" in result.output

        whoami = runner.invoke(app, ["whoami"])
        assert whoami.exit_code == 0
        assert "ada@example.com" in whoami.output

    def test_duplicate_registration_fails(self):
        """Registering the same email twice exits with 1."""
        runner.invoke(app, ["register", "--email", "ada@example.com", "--password", "pw"])
        result = runner.invoke(app, ["register", "--email", "ada@example.com", "--password", "pw"])

        assert result.exit_code == 1
        assert "Email already registered" in result.output

    def test_bad_login_fails(self):
        """Wrong password exits with 1."""
        runner.invoke(app, ["register", "--email", "ada@example.com", "--password", "pw"])
        result = runner.invoke(app, ["login", "--email", "ada@example.com", "--password", "nope"])

        assert result.exit_code == 1
        assert "Invalid email or password" in result.output

    def test_whoami_requires_login(self):
        """Without a session commands needing a user exit with 1."""
        result = runner.invoke(app, ["whoami"])

        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_logout(self):
        """After logout whoami fails."""
        _register_and_login()
        runner.invoke(app, ["logout"])

        assert runner.invoke(app, ["whoami"]).exit_code == 1


class TestPayoutCommands:
    """Test payout requests through the CLI."""

    def test_request_and_list(self):
        """A requested payout shows its reference and appears in the list."""
        _register_and_login()

        result = runner.invoke(
            app,
            ["payout-request", "--amount", "25.50", "--method", "mobile_money", "--provider", "MTN"],
        )

        assert result.exit_code == 0
        reference = re.search(r"PAY-[A-Z0-9]{8}", result.output)
        assert reference

        payouts = runner.invoke(app, ["payouts"])
        assert payouts.exit_code == 0
        assert "25.50" in payouts.output

    def test_invalid_amount(self):
        """A negative amount exits with 1."""
        _register_and_login()

        result = runner.invoke(app, ["payout-request", "--amount=-5", "--method", "mobile_money"])

        assert result.exit_code == 1
        assert "Invalid payment amount" in result.output

    def test_stats(self):
        """Stats summarise seeded payments."""
        _register_and_login()
        runner.invoke(app, ["seed-payments", "--count", "3"])

        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Total earnings" in result.output
        assert "Next payout" in result.output


class TestTeamCommands:
    """Test team commands."""

    def test_create_and_list(self):
        _register_and_login()

        created = runner.invoke(app, ["team-create", "--name", "Alpha"])
        listed = runner.invoke(app, ["teams"])

        assert created.exit_code == 0
        assert "Alpha" in listed.output

    def test_add_to_missing_team(self):
        result = runner.invoke(app, ["team-add", "missing", "u1"])

        assert result.exit_code == 1
        assert "not found" in result.output
