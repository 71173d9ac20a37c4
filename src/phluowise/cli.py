"""Command-line interface for Phluowise."""

from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from phluowise.auth.models import User
from phluowise.auth.service import AuthService
from phluowise.dashboard import build_dashboard
from phluowise.errors import PhluowiseError
from phluowise.logging_config import configure_logging, get_logger
from phluowise.payments.service import PaymentService
from phluowise.referral.service import ReferralService
from phluowise.settings import settings
from phluowise.storage.collections import get_storage
from phluowise.teams.models import TeamRole
from phluowise.teams.service import TeamService

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="phluowise",
    help="Phluowise - referral and payout dashboard",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

STATUS_STYLES = {"completed": "green", "pending": "yellow", "failed": "red"}


def _auth() -> AuthService:
    return AuthService(get_storage())


def _require_user(auth: AuthService) -> User:
    """Current user, or exit when nobody is logged in."""
    user = auth.get_current_user()
    if not user:
        console.print("[red]Not logged in. Run 'phluowise login' first.[/red]")
        raise typer.Exit(1)
    return user


def _fail(error: PhluowiseError) -> NoReturn:
    console.print(f"[bold red]✗[/bold red] {error}")
    raise typer.Exit(1)


@app.command("init")
def init_storage(
    drop: Annotated[bool, typer.Option("--drop", help="Delete all existing data first")] = False,
) -> None:
    """Initialize the storage and create empty collections."""
    console.print("[bold blue]Initializing storage...[/bold blue]")
    storage = get_storage()
    if drop:
        storage.reset()
        console.print("[yellow]Existing data deleted[/yellow]")
    else:
        storage.initialize()
    console.print("[bold green]✓[/bold green] Storage initialized successfully")


# ==================== ACCOUNT ====================


@app.command("register")
def register(
    email: Annotated[str, typer.Option("--email", "-e", help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password")],
    first_name: Annotated[str | None, typer.Option("--first-name", help="First name")] = None,
    last_name: Annotated[str | None, typer.Option("--last-name", help="Last name")] = None,
    referral_code: Annotated[str | None, typer.Option("--ref", help="Referral code of the inviting user")] = None,
) -> None:
    """Register a new account."""
    try:
        user = _auth().register(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            referral_code=referral_code,
        )
    except PhluowiseError as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] Registered [bold]{user.email}[/bold]")
    console.print(f"  User ID: {user.id}")
    console.print(f"  Referral code: {user.referral_code}")


@app.command("login")
def login(
    email: Annotated[str, typer.Option("--email", "-e", help="Account email")],
    password: Annotated[str, typer.Option("--password", "-p", prompt=True, hide_input=True, help="Password")],
) -> None:
    """Log in and remember the session."""
    try:
        user, session = _auth().login(email, password)
    except PhluowiseError as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] Logged in as [bold]{user.email}[/bold]")
    console.print(f"  Session expires: {session.expires_at.strftime('%Y-%m-%d %H:%M')}")


@app.command("logout")
def logout() -> None:
    """End the current session."""
    _auth().logout()
    console.print("[bold green]✓[/bold green] Logged out")


@app.command("whoami")
def whoami() -> None:
    """Show the logged-in user."""
    user = _require_user(_auth())
    console.print(f"[bold]User:[/bold] {user.full_name or user.email} ({user.email})")
    console.print(f"[bold]ID:[/bold] {user.id}")
    console.print(f"[bold]Balance:[/bold] ${user.balance:.2f}")
    console.print(f"[bold]Referral code:[/bold] {user.referral_code}")


# ==================== REFERRALS ====================


@app.command("referral-link")
def referral_link() -> None:
    """Print the current user's referral link."""
    user = _require_user(_auth())
    console.print(ReferralService(get_storage()).generate_referral_link(user.id))


@app.command("referrals")
def list_referrals() -> None:
    """List the current user's referrals."""
    user = _require_user(_auth())
    referrals = ReferralService(get_storage()).get_user_referrals(user.id)

    if not referrals:
        console.print("[yellow]No referrals yet[/yellow]")
        return

    table = Table(title="Referrals")
    table.add_column("ID", style="cyan")
    table.add_column("Referee", style="green")
    table.add_column("Status")
    table.add_column("Bonus", justify="right")
    table.add_column("Created At")

    for referral in sorted(referrals, key=lambda r: r.created_at, reverse=True):
        style = STATUS_STYLES.get(referral.status.value, "white")
        table.add_row(
            referral.id,
            referral.referee_email or "New User",
            f"[{style}]{referral.status.value}[/{style}]",
            f"${referral.bonus_amount:.2f}",
            referral.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


@app.command("referral-complete")
def complete_referral(
    referral_id: Annotated[str, typer.Argument(help="Referral ID")],
) -> None:
    """Mark a referral completed and credit the referrer."""
    try:
        referral = ReferralService(get_storage()).complete_referral(referral_id)
    except PhluowiseError as e:
        _fail(e)

    console.print(
        f"[bold green]✓[/bold green] Referral {referral.id} completed "
        f"(bonus ${referral.bonus_amount:.2f})"
    )


# ==================== TEAMS ====================


@app.command("team-create")
def create_team(
    name: Annotated[str, typer.Option("--name", "-n", help="Team name")],
    description: Annotated[str | None, typer.Option("--description", "-d", help="Team description")] = None,
) -> None:
    """Create a team owned by the current user."""
    user = _require_user(_auth())
    team = TeamService(get_storage()).create_team(user.id, name, description)
    console.print(f"[bold green]✓[/bold green] Team created with ID: [bold]{team.id}[/bold]")


@app.command("team-add")
def add_team_member(
    team_id: Annotated[str, typer.Argument(help="Team ID")],
    user_id: Annotated[str, typer.Argument(help="User ID to add")],
    role: Annotated[TeamRole, typer.Option("--role", "-r", help="Member role")] = TeamRole.MEMBER,
) -> None:
    """Add a user to a team."""
    try:
        team = TeamService(get_storage()).add_team_member(team_id, user_id, role)
    except PhluowiseError as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] Added {user_id} to {team.name} ({len(team.members)} members)")


@app.command("teams")
def list_teams() -> None:
    """List teams the current user owns or belongs to."""
    user = _require_user(_auth())
    teams = TeamService(get_storage()).get_user_teams(user.id)

    if not teams:
        console.print("[yellow]No teams found[/yellow]")
        return

    table = Table(title="Teams")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Members", justify="right")
    table.add_column("Owner")

    for team in teams:
        table.add_row(
            team.id,
            team.name,
            str(len(team.members)),
            "yes" if team.owner_id == user.id else "no",
        )

    console.print(table)


# ==================== PAYOUTS ====================


@app.command("payout-request")
def request_payout(
    amount: Annotated[str, typer.Option("--amount", "-a", help="Amount to pay out")],
    method: Annotated[str, typer.Option("--method", "-m", help="Method type, e.g. mobile_money or bank_transfer")],
    provider: Annotated[str | None, typer.Option("--provider", help="Provider, e.g. MTN")] = None,
    account_number: Annotated[str | None, typer.Option("--account-number", help="Account number")] = None,
    account_name: Annotated[str | None, typer.Option("--account-name", help="Account holder")] = None,
    currency: Annotated[str | None, typer.Option("--currency", help="Currency code")] = None,
) -> None:
    """Request a payout for the current user."""
    storage = get_storage()
    auth = AuthService(storage)
    user = _require_user(auth)

    payment_method = {
        "type": method,
        "provider": provider,
        "account_number": account_number,
        "account_name": account_name or user.full_name or None,
    }
    if currency:
        payment_method["currency"] = currency

    try:
        payment = PaymentService(storage, auth).request_payout(user.id, amount, payment_method)
    except PhluowiseError as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] Payout requested: [bold]{payment.reference}[/bold]")
    console.print(f"  Payment ID: {payment.id}")
    console.print(f"  Amount: ${payment.amount:.2f}")


@app.command("payouts")
def list_payouts(
    limit: Annotated[int | None, typer.Option("--limit", "-l", help="Show only the newest N")] = None,
) -> None:
    """List the current user's payout requests, newest first."""
    storage = get_storage()
    auth = AuthService(storage)
    user = _require_user(auth)
    payments = PaymentService(storage, auth).get_user_payments(user.id)

    if not payments:
        console.print("[yellow]No payments found[/yellow]")
        return

    table = Table(title="Payouts")
    table.add_column("ID", style="cyan")
    table.add_column("Reference")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Method")
    table.add_column("Created At")

    for payment in payments[:limit]:
        style = STATUS_STYLES.get(payment.status.value, "white")
        table.add_row(
            payment.id,
            payment.reference or "",
            f"${payment.amount:.2f}",
            f"[{style}]{payment.status.value}[/{style}]",
            payment.payment_method.provider or payment.payment_method.type if payment.payment_method else "N/A",
            payment.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command("payout-mark")
def mark_payout(
    payment_id: Annotated[str, typer.Argument(help="Payment ID")],
    paid: Annotated[bool, typer.Option("--paid/--failed", help="Mark as paid or as failed")] = True,
    notes: Annotated[str, typer.Option("--notes", help="Notes or failure reason")] = "",
) -> None:
    """Mark a payout request as paid or failed."""
    service = PaymentService(get_storage())
    try:
        if paid:
            payment = service.mark_as_paid(payment_id, notes)
        else:
            payment = service.mark_as_failed(payment_id, notes)
    except PhluowiseError as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] Payment {payment.id} is now {payment.status.value}")


@app.command("seed-payments")
def seed_payments(
    count: Annotated[int, typer.Option("--count", "-c", help="Number of rows")] = 5,
) -> None:
    """Generate demo payout requests for the current user."""
    storage = get_storage()
    auth = AuthService(storage)
    user = _require_user(auth)
    payments = PaymentService(storage, auth).generate_test_payments(user.id, count)
    console.print(f"[bold green]✓[/bold green] Generated {len(payments)} test payments")


@app.command("stats")
def show_stats() -> None:
    """Show earnings and referral statistics for the current user."""
    storage = get_storage()
    auth = AuthService(storage)
    user = _require_user(auth)
    summary = build_dashboard(user, PaymentService(storage, auth), ReferralService(storage))

    console.print(f"[bold]Balance:[/bold] ${summary.balance:.2f}")
    console.print(f"[bold]Total earnings:[/bold] ${summary.total_earnings:.2f}")
    console.print(f"[bold]Last {settings.monthly_window_days} days:[/bold] ${summary.monthly_earnings:.2f}")
    console.print(
        f"[bold]Referrals:[/bold] {summary.referrals.total} total, "
        f"{summary.referrals.completed} completed, "
        f"${summary.referrals.total_earned:.2f} earned"
    )

    if summary.next_payout:
        console.print(
            f"[bold]Next payout:[/bold] ${summary.next_payout.amount:.2f} "
            f"processing on {summary.next_payout.date.strftime('%Y-%m-%d')}"
        )
    else:
        console.print("[bold]Next payout:[/bold] No pending payouts")


if __name__ == "__main__":
    app()
