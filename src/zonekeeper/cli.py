"""Zonekeeper CLI - Command line interface."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

import click
import structlog
from rich.console import Console
from rich.table import Table

from zonekeeper import __version__
from zonekeeper.core.config import ZonekeeperConfig, load_config_from_file

console = Console()

BANNER = """
 ╔═╗╔═╗╔╗╔╔═╗╦╔═╔═╗╔═╗╔═╗╔═╗╦═╗
 ╔═╝║ ║║║║║╣ ╠╩╗║╣ ║╣ ╠═╝║╣ ╠╦╝
 ╚═╝╚═╝╝╚╝╚═╝╩ ╩╚═╝╚═╝╩  ╚═╝╩╚═
   Nameserver delegation tracking
"""


def configure_logging(level: str) -> None:
    """Configure structlog to drop events below the given level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


def build_config(file_config: dict[str, Any], **overrides: Any) -> ZonekeeperConfig:
    """Merge file settings and command line overrides into a config.

    Command line values win over the config file, which wins over the
    environment. Overrides that are None are ignored.
    """
    values = dict(file_config)
    values.update({key: value for key, value in overrides.items() if value is not None})
    return ZonekeeperConfig(**values)


@click.group(invoke_without_command=True)
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to YAML or TOML config file",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (default: info)",
)
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None):
    """Zonekeeper - track domain delegation and onboard domains into Cloudflare.

    \b
    Examples:
        zonekeeper serve
        zonekeeper serve --bind 127.0.0.1:8080
        zonekeeper check example.com
    """
    file_config: dict[str, Any] = {}
    if config_file:
        try:
            file_config = load_config_from_file(config_file)
            console.print(f"Loaded config from {config_file}", style="dim")
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]Failed to load config: {e}[/red]")
            sys.exit(1)

    if log_level:
        file_config["log_level"] = log_level

    ctx.ensure_object(dict)
    ctx.obj["file_config"] = file_config

    if ctx.invoked_subcommand is None:
        console.print(BANNER, style="cyan")
        console.print("Usage: zonekeeper serve", style="yellow")
        console.print("\nCommands:", style="bold")
        console.print("  zonekeeper serve    Run the web interface and reconciliation loops", style="dim")
        console.print("  zonekeeper check    Check a domain's nameserver delegation", style="dim")
        console.print("  zonekeeper config   Show the effective configuration", style="dim")
        console.print("  zonekeeper version  Show version information", style="dim")


@main.command()
@click.option("--bind", "-b", help="HTTP bind address (default: 0.0.0.0:8080)")
@click.option("--active-path", type=click.Path(), help="Active domains JSON file")
@click.option("--pending-path", type=click.Path(), help="Pending domains list file")
@click.option("--removed-path", type=click.Path(), help="Removed domains list file")
@click.option("--record-set", "record_set_path", type=click.Path(), help="Record set CSV file")
@click.option("--active-interval", type=float, help="Seconds between active passes")
@click.option("--pending-interval", type=float, help="Seconds between pending passes")
@click.pass_context
def serve(
    ctx: click.Context,
    bind: str | None,
    active_path: str | None,
    pending_path: str | None,
    removed_path: str | None,
    record_set_path: str | None,
    active_interval: float | None,
    pending_interval: float | None,
):
    """Run the web interface and both reconciliation loops."""
    from zonekeeper.server.main import run_server

    config = build_config(
        ctx.obj["file_config"],
        bind=bind,
        active_path=active_path,
        pending_path=pending_path,
        removed_path=removed_path,
        record_set_path=record_set_path,
        active_interval=active_interval,
        pending_interval=pending_interval,
    )
    configure_logging(config.log_level)

    console.print(BANNER, style="cyan")
    console.print(f"Listening on {config.bind}", style="yellow")
    console.print(f"Expected nameservers: {', '.join(config.expected_nameservers)}", style="dim")
    console.print(
        f"Active pass every {config.active_interval:g}s, pending pass every {config.pending_interval:g}s",
        style="dim",
    )
    if not config.cloudflare_api_token:
        console.print("[yellow]CLOUDFLARE_API_TOKEN is not set[/yellow]")

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        console.print("\nShutting down...", style="yellow")
    except OSError as e:
        console.print(f"[red]Failed to start server: {e}[/red]")
        sys.exit(1)


@main.command()
@click.argument("domain")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check(ctx: click.Context, domain: str, json_output: bool):
    """Check whether DOMAIN delegates to the expected nameservers."""
    from zonekeeper.domains.verification import NameserverVerifier, nameservers_match

    config = build_config(ctx.obj["file_config"])
    configure_logging(config.log_level)

    verifier = NameserverVerifier(
        config.expected_nameservers,
        resolver_address=config.resolver_address,
        timeout=config.dns_timeout,
    )
    actual = asyncio.run(verifier.lookup(domain))
    ok = actual is not None and nameservers_match(actual, config.expected_nameservers)

    if json_output:
        click.echo(
            json.dumps(
                {
                    "domain": domain,
                    "correct": ok,
                    "nameservers": actual,
                    "expected": config.expected_nameservers,
                },
                indent=2,
            )
        )
    else:
        table = Table(title=f"Nameservers for {domain}")
        table.add_column("#", style="dim")
        table.add_column("Observed")
        table.add_column("Expected")
        observed = actual or []
        for i in range(max(len(observed), len(config.expected_nameservers))):
            table.add_row(
                str(i + 1),
                observed[i] if i < len(observed) else "-",
                config.expected_nameservers[i] if i < len(config.expected_nameservers) else "-",
            )
        console.print(table)
        if actual is None:
            console.print("[red]Lookup failed[/red]")
        elif ok:
            console.print("[green]Delegation correct[/green]")
        else:
            console.print("[red]Delegation incorrect[/red]")

    if not ok:
        sys.exit(1)


@main.command(name="config")
@click.pass_context
def show_config(ctx: click.Context):
    """Show the effective configuration."""
    config = build_config(ctx.obj["file_config"])
    click.echo(json.dumps(config.to_display_dict(), indent=2))


@main.command()
def version():
    """Show version information."""
    console.print(BANNER, style="cyan")
    console.print(f"[bold]Version:[/bold] {__version__}")
    console.print(f"[bold]Python:[/bold] {sys.version}")


if __name__ == "__main__":
    main()
