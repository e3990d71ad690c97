"""Command-line interface for inbox-sms."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from inbox_sms import __version__
from inbox_sms.config import Settings, load_settings
from inbox_sms.models import RelayResult
from inbox_sms.processors.rules import classify, comparison_address, describe_result

app = typer.Typer(
    name="inbox-sms",
    help="Relay important email to SMS using inclusion/exclusion rules.",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()

# Passed from the callback to commands
_state: dict[str, Path | None] = {"config_dir": None}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"inbox-sms version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    config_dir: Annotated[
        Path | None, typer.Option("--config-dir", help="Directory holding config.yaml")
    ] = None,
) -> None:
    """Email to SMS relay."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    _state["config_dir"] = config_dir


def _settings() -> Settings:
    return load_settings(_state["config_dir"])


def _service(settings: Settings, *, dry_run: bool = False):
    """Build the relay service, exiting on incomplete configuration."""
    from inbox_sms.service import RelayService

    if dry_run:
        # Dry runs never summarize or send
        monitor = settings.monitor.model_copy(update={"summarize": False, "notify": False})
        settings = settings.model_copy(update={"monitor": monitor})

    try:
        return RelayService(settings)
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _results_table(results: list[RelayResult]) -> Table:
    table = Table(title="Messages")
    table.add_column("From", style="cyan", max_width=40)
    table.add_column("Subject", max_width=40)
    table.add_column("Decision")
    table.add_column("Sent", justify="center")
    table.add_column("Errors", style="red")

    for result in results:
        decision = describe_result(result.classification) if result.classification else "-"
        style = "green" if result.accepted else "dim"
        table.add_row(
            result.from_addr,
            result.subject,
            f"[{style}]{decision}[/{style}]",
            "[green]✓[/green]" if result.notified else "",
            "; ".join(result.errors),
        )
    return table


@app.command("run")
def run(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Classify only; no SMS, no labels")
    ] = False,
    limit: Annotated[int | None, typer.Option("--limit", "-l", help="Max messages")] = None,
) -> None:
    """Run one relay cycle.

    Useful for cron-based scheduling.
    """
    settings = _settings()

    service = _service(settings, dry_run=dry_run)

    async def _run() -> dict:
        return await service.run_once(dry_run=dry_run, limit=limit)

    stats = asyncio.run(_run())

    results: list[RelayResult] = stats.get("results", [])
    if results:
        console.print(_results_table(results))

    console.print("\n[bold cyan]Relay Results:[/bold cyan]")
    if dry_run:
        console.print("  [yellow]Dry run: nothing was sent or labelled[/yellow]")
    console.print(f"  Emails found: {stats.get('emails_found', 0)}")
    console.print(f"  Accepted: {stats.get('emails_accepted', 0)}")
    console.print(f"  Rejected: {stats.get('emails_rejected', 0)} ({stats.get('emails_blocked', 0)} blocked)")
    console.print(f"  Notified: {stats.get('emails_notified', 0)}")
    console.print(f"  Errors: {stats.get('errors', 0)}")

    if stats.get("errors"):
        raise typer.Exit(1)


@app.command("serve")
def serve() -> None:
    """Run the relay on the configured polling interval until interrupted."""
    settings = _settings()

    service = _service(settings)

    console.print(
        f"[cyan]Polling every {settings.service.polling_interval}s. Press Ctrl+C to stop.[/cyan]\n"
    )
    asyncio.run(service.start())


@app.command("check")
def check(
    sender: Annotated[str, typer.Argument(help='Sender, e.g. "Jane <jane@example.com>"')],
    subject: Annotated[str, typer.Option("--subject", "-s", help="Subject line")] = "",
    content: Annotated[str, typer.Option("--content", "-c", help="Message text")] = "",
) -> None:
    """Classify a message against the configured rules without touching the mailbox."""
    settings = _settings()
    result = classify(sender, subject, content, settings.rules)

    console.print(f"Comparison address: [cyan]{comparison_address(sender)}[/cyan]")
    color = "green" if result.accepted else "red"
    console.print(f"Decision: [{color}]{describe_result(result)}[/{color}]")

    if not result.accepted:
        raise typer.Exit(1)


@app.command("rules")
def rules() -> None:
    """Show the configured filtering rules."""
    settings = _settings()
    rule_set = settings.rules

    if rule_set.is_empty:
        console.print("[yellow]No rules configured; every message will be rejected.[/yellow]")
        console.print(f"Configure rules in {settings.config_dir / 'config.yaml'}")
        return

    table = Table(title="Filtering Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Match")
    table.add_column("Entries")

    rows = [
        ("blocked_senders", "sender contains (wins)", rule_set.blocked_senders),
        ("exact_senders", "sender equals", rule_set.exact_senders),
        ("sender_domains", "sender contains", rule_set.sender_domains),
        ("subject_keywords", "subject contains", rule_set.subject_keywords),
        ("content_keywords", "body contains", rule_set.content_keywords),
    ]
    for name, match, entries in rows:
        table.add_row(name, match, ", ".join(sorted(entries)) or "[dim]-[/dim]")

    console.print(table)


if __name__ == "__main__":
    app()
