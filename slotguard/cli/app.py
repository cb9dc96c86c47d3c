"""
Main CLI application using Typer.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.authorization import RoleAuthorizationGate
from ..adapters.mock_record_store import MockRecordStore
from ..adapters.supabase_client import SupabaseRecordStore
from ..config import AppConfig, load_config
from ..domain.exceptions import SlotguardError
from ..logging_context import configure_logging
from ..services.availability_service import AvailabilityValidationService, ServiceResponse
from ..services.availability_validator import AvailabilityValidator

app = typer.Typer(
    name="slotguard",
    help="Validate team member availability across salon shops",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use the bundled mock data instead of the hosted store.")]
CallerOption = Annotated[
    Optional[str],
    typer.Option("--caller", envvar="SLOTGUARD_CALLER_ID", help="Identity-provider user id of the acting admin.")
]


def _build_store(config: AppConfig, mock: bool):
    """Create the record store adapter for the selected mode."""
    if mock:
        return MockRecordStore(timezone=config.timezone)

    return SupabaseRecordStore(
        base_url=config.store.require_url(),
        api_key=config.store.resolve_api_key(),
        timeout=config.store.timeout_seconds,
        timezone=config.timezone
    )


def _build_service(config: AppConfig, mock: bool) -> AvailabilityValidationService:
    """Wire store, gate and validator into the validation service."""
    store = _build_store(config, mock)
    validator = AvailabilityValidator(
        store=store,
        timezone=config.timezone,
        blocking_statuses=config.blocking_booking_statuses
    )
    gate = RoleAuthorizationGate(store=store, admin_role=config.admin_role)
    return AvailabilityValidationService(validator=validator, store=store, gate=gate)


def _load(config_file: Optional[Path]) -> AppConfig:
    config = load_config(config_file)
    configure_logging(config.log_level)
    return config


def _print_validation(response: ServiceResponse) -> None:
    """Render a single validation response."""
    body = response.body

    if body.get("valid") is True:
        console.print(Panel.fit(
            f"[bold green]✓ {body.get('message', 'Availability is valid')}[/bold green]",
            title="Valid"
        ))
        return

    if "error_code" not in body:
        console.print(f"[bold red]Error ({response.status_code}):[/bold red] {body.get('error')}")
        for detail in body.get("details", []):
            console.print(f"  [dim]{detail['field']}[/dim]: {detail['message']}")
        return

    console.print(Panel.fit(
        f"[bold red]✗ {body['error']}[/bold red]\n\n"
        f"[bold]Code:[/bold] {body['error_code']}",
        title="Rejected"
    ))

    if body.get("conflicts"):
        table = Table(title="Conflicting slots", show_header=True, header_style="bold cyan")
        table.add_column("Shop", style="bold yellow")
        table.add_column("Time", style="dim")
        for conflict in body["conflicts"]:
            table.add_row(conflict["shop_name"], conflict["time"])
        console.print(table)

    if body.get("bookings_count") is not None:
        console.print(f"Affected bookings: [bold]{body['bookings_count']}[/bold]")


def _print_plan(response: ServiceResponse) -> None:
    """Render a batch planning response."""
    body = response.body

    if response.status_code != 200:
        console.print(f"[bold red]Error ({response.status_code}):[/bold red] {body.get('error')}")
        for member_id in body.get("unassigned_ids", []):
            console.print(f"  [yellow]not assigned:[/yellow] {member_id}")
        for detail in body.get("details", []):
            console.print(f"  [dim]{detail['field']}[/dim]: {detail['message']}")
        return

    console.print(f"[bold green]{body['message']}[/bold green]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Date")
    table.add_column("Team member", style="bold yellow")
    table.add_column("Window")
    table.add_column("Result")

    for slot in body["planned"]:
        table.add_row(slot["date"], slot["team_member_id"], f"{slot['start_time']} - {slot['end_time']}", "[green]planned[/green]")
    for slot in body["skipped"]:
        table.add_row(slot["date"], slot["team_member_id"], f"{slot['start_time']} - {slot['end_time']}", f"[red]{slot['error_code']}[/red]")

    console.print(table)


@app.command()
def validate(
    team_member_id: Annotated[str, typer.Argument(help="Team member id")],
    shop_id: Annotated[str, typer.Argument(help="Shop id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    start_time: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    end_time: Annotated[str, typer.Argument(help="End time (HH:MM)")],
    exclude_id: Annotated[Optional[str], typer.Option("--exclude", "-x", help="Id of the slot being edited or deleted")] = None,
    caller: CallerOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw JSON response.")] = False,
):
    """
    Validate a proposed availability window.

    Examples:

        slotguard validate tm-anna shop-kreuzberg 2024-06-01 11:00 13:00 --mock --caller user_admin

        slotguard validate tm-lena shop-mitte 2024-06-01 12:00 17:00 --exclude slot-lena-mitte
    """
    payload: Dict[str, Any] = {
        "team_member_id": team_member_id,
        "shop_id": shop_id,
        "date": date,
        "start_time": start_time,
        "end_time": end_time,
    }
    if exclude_id:
        payload["exclude_id"] = exclude_id

    try:
        config = _load(config_file)
        service = _build_service(config, mock)
        response = service.handle(caller, payload)
    except (FileNotFoundError, ValueError, SlotguardError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(2)

    if as_json:
        console.print_json(json.dumps(response.body))
    else:
        _print_validation(response)

    if not response.ok:
        raise typer.Exit(1)


@app.command()
def plan_batch(
    batch_file: Annotated[Path, typer.Argument(help="JSON file with shop_id, team_member_ids, date_range, time_slots, days_of_week")],
    caller: CallerOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw JSON response.")] = False,
):
    """
    Plan a bulk availability request without writing anything.
    """
    try:
        with open(batch_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Error:[/bold red] Could not read {batch_file}: {e}")
        raise typer.Exit(2)

    try:
        config = _load(config_file)
        service = _build_service(config, mock)
        response = service.plan_batch(caller, payload)
    except (FileNotFoundError, ValueError, SlotguardError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(2)

    if as_json:
        console.print_json(json.dumps(response.body))
    else:
        _print_plan(response)

    if not response.ok:
        raise typer.Exit(1)


@app.command()
def check_store(
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Test the connection to the record store.
    """
    try:
        config = _load(config_file)
        store = _build_store(config, mock)
        info = store.test_connection()
    except (FileNotFoundError, ValueError, SlotguardError) as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]✓ Store reachable[/bold green]\n\n"
        f"[bold]Endpoint:[/bold] {info['url']}\n"
        f"[bold]Shops visible:[/bold] {info['shops']}",
        title="✓ Connection test"
    ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotguard[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
