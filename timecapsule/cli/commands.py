"""CLI commands for timecapsule."""

import asyncio
from datetime import date

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from timecapsule import __logo__, __version__
from timecapsule.errors import TimeCapsuleError

app = typer.Typer(
    name="timecapsule",
    help=f"{__logo__} timecapsule - Messages for your future self",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} timecapsule v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """timecapsule - Messages for your future self."""
    from timecapsule.logging_config import setup_logging

    setup_logging("DEBUG" if verbose else None)


# ============================================================================
# Shared helpers
# ============================================================================


def _banner(text: str) -> None:
    console.print(f"[green]{text}[/green]")


def _error_banner(text: str) -> None:
    console.print(f"[red]{text}[/red]")


def _make_service():
    """Build a file-backed service from the user's config."""
    from timecapsule.config.loader import load_config
    from timecapsule.service import build_service

    return build_service(load_config(), banner=_banner, error_banner=_error_banner)


def _status_label(unlocked: bool) -> str:
    return "[green]🔓 Unlocked[/green]" if unlocked else "[red]🔒 Locked[/red]"


# ============================================================================
# Onboard / Status
# ============================================================================


@app.command()
def onboard():
    """Initialize timecapsule configuration and data directory."""
    from timecapsule.config.loader import get_config_path, get_data_dir, save_config
    from timecapsule.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    config = Config()
    save_config(config)
    console.print(f"[green]✓[/green] Created config at {config_path}")

    data_dir = get_data_dir(config)
    console.print(f"[green]✓[/green] Data directory at {data_dir}")
    console.print(f"\n{__logo__} timecapsule is ready!")
    console.print('Next: [cyan]timecapsule create -t "Hello" -m "Dear future me..." --in-years 1[/cyan]')


@app.command()
def status():
    """Show timecapsule status."""
    from timecapsule.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()
    service = _make_service()
    capsules = service.list()
    unlocked = [c for c in capsules if service.is_unlocked(c)]
    locked = [c for c in capsules if not service.is_unlocked(c)]

    console.print(f"{__logo__} timecapsule Status\n")
    console.print(
        f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[dim]defaults[/dim]'}"
    )
    console.print(f"Data: {config.data_path}")
    console.print(f"Capsules: {len(capsules)} ({len(unlocked)} unlocked, {len(locked)} locked)")
    if locked:
        nxt = locked[0]
        console.print(f"Next unlock: {nxt.title} on {nxt.unlock_date} ({service.countdown(nxt)})")

    notifier = service.dispatcher.system
    console.print(f"Notifications: {notifier.name} ({notifier.permission})")


# ============================================================================
# Capsule Commands
# ============================================================================


@app.command()
def create(
    title: str = typer.Option("", "--title", "-t", help="Capsule title"),
    message: str = typer.Option("", "--message", "-m", help="Message to your future self"),
    unlock: str = typer.Option(None, "--unlock", "-u", help="Unlock date (YYYY-MM-DD)"),
    in_years: int = typer.Option(None, "--in-years", "-y", min=0, help="Unlock N years from today"),
    capsule_type: str = typer.Option(
        "personal", "--type", help="personal, family, community or legacy"
    ),
    custom_type: str = typer.Option("", "--custom-type", help="Free-form category"),
    predictions: str = typer.Option("", "--predictions", "-p", help="Predictions for the future"),
    password: str = typer.Option("", "--password", help="Password needed to open the capsule"),
    email: str = typer.Option("", "--email", "-e", help="Recipient email for sharing"),
):
    """Seal a new time capsule."""
    from timecapsule.capsule.engine import format_date, unlock_date_in

    if unlock is None and in_years is not None:
        unlock = unlock_date_in(in_years, date.today()).isoformat()

    service = _make_service()
    try:
        capsule = service.create(
            {
                "title": title,
                "message": message,
                "unlock_date": unlock or "",
                "type": capsule_type,
                "custom_type": custom_type,
                "predictions": predictions,
                "password": password,
                "recipient_email": email,
            }
        )
    except TimeCapsuleError:
        raise typer.Exit(1)

    console.print(
        f"{capsule.icon} Created '{capsule.title}' ({capsule.id}), "
        f"unlocks on {format_date(capsule.unlock_date)}"
    )
    if service.is_unlocked(capsule):
        console.print("[yellow]The unlock date has already arrived; it opens right away.[/yellow]")


@app.command("list")
def list_capsules():
    """List capsules, earliest unlock first."""
    from timecapsule.capsule.engine import format_date

    service = _make_service()
    capsules = service.list()

    if not capsules:
        console.print("📦 No Time Capsules Yet. Create your first one with [cyan]timecapsule create[/cyan].")
        return

    table = Table(title=f"Time Capsules ({len(capsules)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Created")
    table.add_column("Unlocks")
    table.add_column("Status")

    for capsule in capsules:
        title = f"{capsule.icon} {capsule.title}"
        if capsule.has_password:
            title += " 🔐"
        if capsule.recipient_email:
            title += " 📧"
        ctype = f"Custom: {capsule.type}" if capsule.is_custom_type else capsule.type
        table.add_row(
            str(capsule.id),
            title,
            ctype,
            format_date(capsule.created_date),
            format_date(capsule.unlock_date),
            _status_label(service.is_unlocked(capsule)),
        )

    console.print(table)


@app.command("open")
def open_capsule(
    capsule_id: str = typer.Argument(..., help="Capsule ID"),
    password: str = typer.Option(None, "--password", help="Capsule password"),
):
    """Open a capsule (prompts for its password if it has one)."""
    from timecapsule.capsule.engine import format_date
    from timecapsule.capsule.gate import requires_password

    service = _make_service()
    capsule = service.find(capsule_id)
    if capsule and requires_password(capsule) and password is None:
        password = typer.prompt("🔐 Password", hide_input=True)

    try:
        view = service.open(capsule_id, password)
    except TimeCapsuleError:
        raise typer.Exit(1)

    capsule = view.capsule
    lines = []
    if capsule.is_custom_type:
        lines.append(f"[red]Type: {capsule.type}[/red]")

    if view.unlocked:
        lines.append(f"[green]🎉 Unlocked on {format_date(capsule.unlock_date)}[/green]")
        if capsule.has_password:
            lines.append("[green]🔐 Password Verified[/green]")
        if capsule.recipient_email:
            lines.append(f"[blue]📧 Shared with: {capsule.recipient_email}[/blue]")
        lines.append(f"\n📝 [bold]Your Message:[/bold]\n{view.message}")
        if view.predictions:
            lines.append(f"\n🔮 [bold]Your Predictions:[/bold]\n{view.predictions}")
    else:
        lines.append(f"[red]🔒 Still Locked[/red] until {format_date(capsule.unlock_date)}")
        if capsule.recipient_email:
            lines.append(f"[blue]📧 Will notify: {capsule.recipient_email}[/blue]")
        cd = view.countdown
        lines.append(f"\n⏰ Time Remaining: {cd.years} years, {cd.months} months, {cd.days} days")

    lines.append(f"\n[dim]📅 Created: {format_date(capsule.created_date)}[/dim]")
    console.print(Panel("\n".join(lines), title=f"{capsule.icon} {capsule.title}"))


@app.command()
def delete(
    capsule_id: str = typer.Argument(..., help="Capsule ID to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Permanently delete a capsule."""
    service = _make_service()
    if not yes and not typer.confirm(
        "⚠️ Are you sure you want to permanently delete this time capsule? This action cannot be undone!"
    ):
        raise typer.Exit()

    try:
        service.delete(capsule_id)
    except TimeCapsuleError:
        raise typer.Exit(1)


@app.command()
def share(
    capsule_id: str = typer.Argument(..., help="Capsule ID to share"),
):
    """Open a pre-filled email to the capsule's recipient."""
    service = _make_service()
    try:
        url = service.share(capsule_id)
    except TimeCapsuleError:
        raise typer.Exit(1)

    console.print(f"[dim]{url}[/dim]")


# ============================================================================
# Unlock Checks
# ============================================================================


@app.command()
def check():
    """Check once for newly unlocked capsules."""
    service = _make_service()
    unlocked = service.startup()
    if not unlocked:
        console.print("No newly unlocked capsules.")


@app.command()
def watch(
    interval: int = typer.Option(None, "--interval", "-i", min=1, help="Seconds between checks"),
):
    """Keep checking for unlocked capsules until interrupted."""
    service = _make_service()
    if interval:
        service.check_interval_s = interval

    service.startup()
    console.print(f"{__logo__} Watching for unlocks every {service.check_interval_s}s (Ctrl+C to stop)")

    try:
        asyncio.run(service.start_watcher())
    except KeyboardInterrupt:
        service.stop_watcher()
        console.print("\nStopped.")


if __name__ == "__main__":
    app()
