"""Typer CLI commands with Rich formatting."""

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..core.config import get_settings
from ..core.errors import DuplicateNameFailure, MonitorError
from ..core.log import setup_logging
from ..core.types import ValidatorStatus
from ..services.validator_service import ValidatorService

app = typer.Typer(
    name="mind-validators",
    help="MIND validator monitor - stake, rewards and block activity",
)
console = Console()


def run_async(coro):
    """Helper to run async functions from sync CLI."""
    return asyncio.run(coro)


async def _refresh_and_list(service: ValidatorService):
    try:
        result = await service.pipeline.refresh()
        return result, service.list_validators()
    finally:
        await service.close()


async def _refresh_and_summarize(service: ValidatorService):
    try:
        await service.pipeline.refresh()
        return await service.get_chain_summary()
    finally:
        await service.close()


async def _add_name(service: ValidatorService, address: str, name: str) -> None:
    try:
        await service.add_name(address, name)
    finally:
        await service.close()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show refresh progress logs"),
):
    setup_logging("INFO" if verbose else "WARNING")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Log level"),
):
    """Run the HTTP API and refresh validators on every new block."""
    import uvicorn

    from ..web.app import create_app

    settings = get_settings()
    level = log_level or settings.log_level
    setup_logging(level)
    uvicorn.run(
        create_app(),
        host=host or settings.host,
        port=port or settings.port,
        log_level=level.lower(),
        log_config=None,
    )


@app.command()
def validators(
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON (same format as API)"
    ),
):
    """Run one refresh cycle and show the validator snapshot."""
    service = ValidatorService()

    if output_json:
        result, records = run_async(_refresh_and_list(service))
        print(json.dumps([r.model_dump(by_alias=True, mode="json") for r in records], indent=2))
        if result.aborted:
            raise typer.Exit(1)
        return

    with console.status("[bold blue]Fetching validator data..."):
        result, records = run_async(_refresh_and_list(service))

    if result.aborted:
        console.print("[red]Could not refresh validator data (see log)[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Validators ({len(records)})")
    table.add_column("Address", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Stake", justify="right", style="green")
    table.add_column("Rewards", justify="right", style="green")
    table.add_column("Blocks", justify="right")
    table.add_column("Status")

    for record in records:
        status_style = (
            "green" if record.validated_blocks_status == ValidatorStatus.ACTIVE else "dim"
        )
        table.add_row(
            record.address,
            record.name or "[dim]-[/dim]",
            record.stake,
            record.rewards,
            str(record.validated_blocks_count),
            f"[{status_style}]{record.validated_blocks_status.value}[/{status_style}]",
        )
    console.print(table)

    if result.failed:
        console.print(
            f"[yellow]{len(result.failed)} validator(s) could not be fetched:[/yellow]"
        )
        for address, reason in result.failed.items():
            console.print(f"  [dim]{address}: {reason}[/dim]")


@app.command()
def chaindata(
    output_json: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON (same format as API)"
    ),
):
    """Show current epoch, total stake and validator count."""
    service = ValidatorService()
    try:
        if output_json:
            summary = run_async(_refresh_and_summarize(service))
        else:
            with console.status("[bold blue]Fetching chain data..."):
                summary = run_async(_refresh_and_summarize(service))
    except MonitorError as e:
        console.print(f"[red]Error fetching chain data: {e}[/red]")
        raise typer.Exit(1)

    if output_json:
        print(json.dumps(summary.model_dump(by_alias=True), indent=2))
        return

    table = Table(title="Chain Data", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Current Block Epoch", summary.current_block_epoch)
    table.add_row("Total Staked", summary.total_staked_amount)
    table.add_row("Validators", str(summary.total_validator_addresses))
    console.print(table)


@app.command(name="add-name")
def add_name(
    address: str = typer.Argument(..., help="Validator address"),
    name: str = typer.Argument(..., help="Human-readable name"),
):
    """Assign a name to a validator (names can only be set once)."""
    from web3 import Web3

    if not Web3.is_address(address) or not name.strip():
        console.print("[red]Error: need a valid address and a non-empty name[/red]")
        raise typer.Exit(1)

    service = ValidatorService()
    try:
        run_async(_add_name(service, Web3.to_checksum_address(address), name.strip()))
    except DuplicateNameFailure:
        console.print(f"[red]Name already exists for {address}[/red]")
        raise typer.Exit(1)
    except MonitorError as e:
        console.print(f"[red]Error adding name: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Named {Web3.to_checksum_address(address)} {name.strip()!r}[/green]")


@app.command(name="names")
def list_names():
    """List every assigned validator name."""
    service = ValidatorService()
    try:
        assigned = run_async(service.names.all())
    except MonitorError as e:
        console.print(f"[red]Error reading names: {e}[/red]")
        raise typer.Exit(1)
    finally:
        run_async(service.close())

    console.print(f"\n[bold]{len(assigned)} named validators:[/bold]")
    for address, name in assigned.items():
        console.print(f"  [cyan]{address}[/cyan]  {name}")


if __name__ == "__main__":
    app()
