#!/usr/bin/env python3
"""
Frequency Lookup Script

Looks up radio frequencies for a location or along a trip and prints them:
- Conventional agencies and their channels
- Trunked systems with control channels and talkgroups
"""

import json
import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from freqfinder.api import FreqFinderError, FrequencyClient, RRCredentials, ScanResult
from freqfinder.api.taxonomy import ALL_SERVICES

# Set up logging
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set up rich console
console = Console()


def _credentials(username: Optional[str], password: Optional[str]) -> Optional[RRCredentials]:
    if username and password:
        return RRCredentials(username, password)
    return None


def _services(services: Tuple[str, ...]) -> Optional[list]:
    return list(services) if services else None


def display_result(result: ScanResult):
    """Display a colorful view of one location."""
    console.print(f"\n[bold cyan]{result.location_name}[/bold cyan] [dim]({result.source.value})[/dim]")
    if result.summary:
        console.print(result.summary)

    if result.agencies:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Agency", style="cyan")
        table.add_column("Category")
        table.add_column("Freq", justify="right", style="green")
        table.add_column("Mode")
        table.add_column("Tone/NAC")
        table.add_column("Description")

        for agency in result.agencies:
            for freq in agency.frequencies:
                table.add_row(
                    agency.name,
                    agency.category,
                    freq.freq,
                    freq.mode,
                    freq.tone or freq.nac,
                    freq.description,
                )
        console.print(table)

    for system in result.trunked_systems:
        console.print(
            f"\n[bold yellow]{system.name}[/bold yellow] {system.type} - {system.location}"
        )
        if system.frequencies:
            console.print(
                "Site frequencies: "
                + ", ".join(f"{f.freq} ({f.use})" for f in system.frequencies)
            )
        if system.talkgroups:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("DEC", justify="right", style="green")
            table.add_column("HEX", justify="right")
            table.add_column("Mode")
            table.add_column("Alpha Tag", style="cyan")
            table.add_column("Description")
            table.add_column("Tag")
            for tg in system.talkgroups:
                table.add_row(tg.dec, tg.hex or "", tg.mode, tg.alpha_tag, tg.description, tg.tag)
            console.print(table)


@click.group()
@click.option('--debug/--no-debug', default=False, help='Enable debug logging')
def main(debug: bool):
    """Look up public-safety radio frequencies."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger('freqfinder').setLevel(logging.DEBUG)


@main.command()
@click.argument('location')
@click.option('--service', '-s', multiple=True, help=f"Service category ({', '.join(ALL_SERVICES)})")
@click.option('--username', '-u', envvar='RR_USERNAME', help='RadioReference username')
@click.option('--password', '-p', envvar='RR_PASSWORD', help='RadioReference password')
@click.option('--refresh', is_flag=True, help='Ignore cached results')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of tables')
def lookup(location: str, service: Tuple[str, ...], username: str, password: str, refresh: bool, as_json: bool):
    """Look up frequencies for a ZIP code or place name."""
    client = FrequencyClient(credentials=_credentials(username, password))
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[cyan]Looking up {location}...", total=None)
            result = client.merge_and_cache(location, _services(service), refresh=refresh)
    except FreqFinderError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        display_result(result)


@main.command()
@click.argument('start')
@click.argument('end')
@click.option('--service', '-s', multiple=True, help='Service category')
@click.option('--username', '-u', envvar='RR_USERNAME', help='RadioReference username')
@click.option('--password', '-p', envvar='RR_PASSWORD', help='RadioReference password')
@click.option('--refresh', is_flag=True, help='Ignore cached results')
@click.option('--json', 'as_json', is_flag=True, help='Print JSON instead of tables')
def trip(start: str, end: str, service: Tuple[str, ...], username: str, password: str, refresh: bool, as_json: bool):
    """Plan frequencies for the jurisdictions between START and END."""
    client = FrequencyClient(credentials=_credentials(username, password))
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[cyan]Planning {start} -> {end}...", total=None)
            result = client.plan_trip(start, end, _services(service), refresh=refresh)
    except FreqFinderError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(f"\n[bold]Trip: {result.start_location} -> {result.end_location}[/bold]")
    for stop in result.locations:
        display_result(stop.data)


@main.command()
@click.argument('query')
@click.option('--username', '-u', envvar='RR_USERNAME', help='RadioReference username')
@click.option('--password', '-p', envvar='RR_PASSWORD', help='RadioReference password')
def resolve(query: str, username: str, password: str):
    """Resolve a ZIP code or place name to a county."""
    client = FrequencyClient(credentials=_credentials(username, password))
    try:
        region = client.resolve_location(query)
    except FreqFinderError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for field_name, value in region.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(value)
        table.add_row(field_name, "" if value is None else str(value))
    console.print(table)


if __name__ == '__main__':
    main()
