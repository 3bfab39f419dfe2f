"""Typer-based CLI for VOLTNET account and market queries."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import EnergySource, TransactionStatus
from .utils import format_currency, format_energy

if TYPE_CHECKING:
    from .di import VoltnetSDK


# Import with local function to avoid circular imports
def _load_settings(config_path: Optional[Path] = None):
    from .config import load_settings
    return load_settings(config_path)

def _create_client(settings):
    from .di import create_client
    return create_client(settings)

app = typer.Typer(help="VOLTNET energy trading CLI")
console = Console()
logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> None:
    """Run CLI with optional argv parameter."""
    app(argv)


def init_components(config_path: Optional[Path] = None) -> "VoltnetSDK":
    """Load settings and build the SDK without the realtime channel."""
    settings = _load_settings(config_path)
    if settings.enable_realtime:
        settings = settings.model_copy(update={"enable_realtime": False})
    return _create_client(settings)


def _status_style(status: str) -> str:
    return {
        "active": "green",
        "completed": "green",
        "fulfilled": "blue",
        "pending": "yellow",
        "failed": "red",
        "cancelled": "dim",
        "expired": "dim",
    }.get(status, "white")


@app.command()
def profile(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the participant profile."""
    try:
        asyncio.run(_profile_async(config))
    except Exception as e:
        logger.error("Failed to fetch profile: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _profile_async(config: Optional[Path]) -> None:
    sdk = init_components(config)
    try:
        participant = await sdk.client.get_profile()
    finally:
        await sdk.disconnect()

    lines = [
        f"ID: [cyan]{participant.id}[/cyan]",
        f"Type: {participant.type.value}",
        f"Wallet: {participant.wallet_address}",
    ]
    if participant.name:
        lines.insert(1, f"Name: [bold]{participant.name}[/bold]")
    if participant.location is not None:
        lines.append(f"Location: {participant.location.latitude:.4f}, {participant.location.longitude:.4f}")
    if participant.devices:
        lines.append(f"Devices: {len(participant.devices)}")

    console.print(Panel.fit("\n".join(lines), title="Participant"))


@app.command()
def balance(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the account balance."""
    try:
        asyncio.run(_balance_async(config))
    except Exception as e:
        logger.error("Failed to fetch balance: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _balance_async(config: Optional[Path]) -> None:
    sdk = init_components(config)
    try:
        result = await sdk.client.get_balance()
    finally:
        await sdk.disconnect()

    text = (
        f"Available: [bold green]{format_currency(result.available, result.currency)}[/bold green]\n"
        f"Pending: [yellow]{format_currency(result.pending, result.currency)}[/yellow]"
    )
    if result.energy_credit is not None:
        text += f"\nEnergy credit: {format_energy(result.energy_credit)}"
    text += f"\nUpdated: [dim]{result.last_updated}[/dim]"

    console.print(Panel.fit(text, title="Balance"))
    logger.info("Balance check: %s %s", result.available, result.currency)


@app.command()
def price(
    source: Optional[EnergySource] = typer.Option(None, help="Energy source"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the current energy price."""
    try:
        asyncio.run(_price_async(source, config))
    except Exception as e:
        logger.error("Failed to fetch price: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _price_async(source: Optional[EnergySource], config: Optional[Path]) -> None:
    sdk = init_components(config)
    try:
        info = await sdk.pricing.get_current_price(source)
    finally:
        await sdk.disconnect()

    text = (
        f"Price: [bold]{format_currency(info.price_per_kwh, info.currency, 4)}[/bold] / kWh\n"
        f"Model: {info.model.value}\n"
        f"Valid from: {info.valid_from}"
    )
    if info.valid_until:
        text += f"\nValid until: {info.valid_until}"
    if info.source is not None:
        text += f"\nSource: [green]{info.source.value}[/green]"

    console.print(Panel.fit(text, title="Current Price"))


@app.command()
def offers(
    source: Optional[EnergySource] = typer.Option(None, help="Filter by energy source"),
    max_price: Optional[float] = typer.Option(None, help="Maximum price per kWh"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List open market offers."""
    try:
        asyncio.run(_offers_async(source, max_price, config))
    except Exception as e:
        logger.error("Failed to list offers: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _offers_async(source: Optional[EnergySource], max_price: Optional[float], config: Optional[Path]) -> None:
    sdk = init_components(config)
    try:
        found = await sdk.market.get_offers(source=source, max_price=max_price)
    finally:
        await sdk.disconnect()

    if not found:
        console.print("[yellow]No offers found[/yellow]")
        return

    table = Table(title="Market Offers")
    table.add_column("Offer ID", style="cyan")
    table.add_column("Seller", style="magenta")
    table.add_column("Source", style="green")
    table.add_column("Energy", style="blue")
    table.add_column("Price / kWh", style="yellow")
    table.add_column("Status")
    table.add_column("Expires", style="dim")

    for offer in sorted(found, key=lambda o: o.price_per_kwh):
        style = _status_style(offer.status)
        table.add_row(
            offer.id,
            offer.seller_id,
            offer.source.value,
            format_energy(offer.energy_available),
            format_currency(offer.price_per_kwh, offer.currency, 4),
            f"[{style}]{offer.status.upper()}[/{style}]",
            offer.expires_at,
        )

    console.print(table)
    total = sum(o.energy_available for o in found)
    console.print(f"\n[bold]Summary:[/bold] {len(found)} offers, {format_energy(total)} available")


@app.command()
def transactions(
    status: Optional[TransactionStatus] = typer.Option(None, help="Filter by status"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List the participant's transactions."""
    try:
        asyncio.run(_transactions_async(status, config))
    except Exception as e:
        logger.error("Failed to list transactions: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


async def _transactions_async(status: Optional[TransactionStatus], config: Optional[Path]) -> None:
    sdk = init_components(config)
    try:
        found = await sdk.transactions.get_transactions(status=status)
    finally:
        await sdk.disconnect()

    if not found:
        console.print("[yellow]No transactions found[/yellow]")
        return

    participant_id = sdk.settings.participant_id
    table = Table(title="Transactions")
    table.add_column("Transaction ID", style="cyan")
    table.add_column("Side", style="magenta")
    table.add_column("Source", style="green")
    table.add_column("Energy", style="blue")
    table.add_column("Total", style="yellow")
    table.add_column("Status")
    table.add_column("Time", style="dim")

    for tx in sorted(found, key=lambda t: t.timestamp):
        side = "SELL" if tx.seller_id == participant_id else "BUY"
        style = _status_style(tx.status.value)
        table.add_row(
            tx.id,
            side,
            tx.source.value,
            format_energy(tx.energy),
            format_currency(tx.total_cost, tx.currency),
            f"[{style}]{tx.status.value.upper()}[/{style}]",
            tx.timestamp,
        )

    console.print(table)


def main():
    """CLI main entry point."""
    app()


if __name__ == "__main__":
    main()
