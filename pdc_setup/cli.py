"""
Command-line interface for the PDC database setup tool.

Provides commands for running the setup wizard, executing SQL scripts and
statements through sqlcmd, and managing the setup configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .config import ConfigError, ConfigLoader, SetupSettings
from .config.defaults import DEFAULT_CONFIG_FILENAME, get_default_settings
from .database import ConnectionSettings, OutputLine, ScriptRunner

console = Console()


def _load_settings(config: Optional[str]) -> SetupSettings:
    try:
        return ConfigLoader(config).load()
    except ConfigError as e:
        console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        sys.exit(1)


def _build_connection(
    settings: SetupSettings,
    host: Optional[str],
    database: Optional[str],
    user: Optional[str],
    password: Optional[str],
) -> ConnectionSettings:
    connection = ConnectionSettings()
    connection.host_name = host or settings.database.host
    connection.database_name = database or settings.database.database
    connection.user_name = user
    connection.password = password
    return connection


def _build_runner(settings: SetupSettings, connection: ConnectionSettings) -> ScriptRunner:
    runner = ScriptRunner(
        connection,
        executable=settings.sqlcmd.executable,
        placeholder=settings.database.placeholder,
        temp_dir=settings.temp_dir,
        timeout=settings.sqlcmd.timeout,
        abort_on_error=settings.sqlcmd.abort_on_error,
    )

    def echo(line: OutputLine) -> None:
        console.print(line.text, style="red" if line.is_error else None, markup=False, highlight=False)

    runner.add_listener(echo)
    return runner


def _connection_options(func):
    """Shared --host/--database/--user/--password options."""
    func = click.option("--password", "-P", type=str, envvar="PDC_SETUP_PASSWORD",
                        help="SQL Server password (or set PDC_SETUP_PASSWORD)")(func)
    func = click.option("--user", "-U", type=str, help="SQL Server login (omit for Windows authentication)")(func)
    func = click.option("--database", "-d", type=str, help="Database name")(func)
    func = click.option("--host", "-S", type=str, help="SQL Server host")(func)
    return func


# ============================================================
# Main CLI Group
# ============================================================

@click.group()
@click.version_option(version="1.0.0", prog_name="pdc-setup")
@click.option("--config", "-c", type=click.Path(), default=None,
              help=f"Setup configuration file (default: ./{DEFAULT_CONFIG_FILENAME})")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    PDC Database Setup

    Create and provision the configuration database for the phasor data
    concentrator.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ============================================================
# WIZARD Command
# ============================================================

@cli.command()
@click.option("--export", "-e", type=click.Path(), default=None,
              help="Write the applied settings to this YAML file")
@click.pass_context
def wizard(ctx, export: Optional[str]):
    """Run the interactive database setup wizard."""
    from .wizard import WizardRunner

    settings = _load_settings(ctx.obj["config"])
    runner = WizardRunner(console=console, settings=settings)
    success = runner.run()

    if not success:
        sys.exit(1)

    if export:
        path = runner.export_config(Path(export))
        console.print(f"\nSettings written to: [cyan]{path}[/cyan]")


# ============================================================
# RUN-SCRIPT / RUN-STATEMENT Commands
# ============================================================

@cli.command("run-script")
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@_connection_options
@click.pass_context
def run_script(ctx, script: str, host: str, database: str, user: str, password: str):
    """Run a SQL script against the target database."""
    settings = _load_settings(ctx.obj["config"])
    connection = _build_connection(settings, host, database, user, password)
    runner = _build_runner(settings, connection)

    console.print(f"\n[bold blue]Running {script} on {connection.host_name}...[/bold blue]\n")

    if runner.execute_script(script):
        console.print("\n[green]Script completed successfully.[/green]")
    else:
        console.print(f"\n[red]Script failed: {escape(runner.last_error or '')}[/red]")
        sys.exit(1)


@cli.command("run-statement")
@click.argument("statement", type=str)
@_connection_options
@click.pass_context
def run_statement(ctx, statement: str, host: str, database: str, user: str, password: str):
    """Run a single SQL statement against the target database."""
    settings = _load_settings(ctx.obj["config"])
    connection = _build_connection(settings, host, database, user, password)
    runner = _build_runner(settings, connection)

    if runner.execute_statement(statement):
        console.print("[green]Statement completed successfully.[/green]")
    else:
        console.print(f"[red]Statement failed: {escape(runner.last_error or '')}[/red]")
        sys.exit(1)


# ============================================================
# CONNECTION-STRING Command
# ============================================================

@cli.command("connection-string")
@_connection_options
@click.option("--show-password", is_flag=True, help="Print the password instead of masking it")
@click.pass_context
def connection_string(ctx, host: str, database: str, user: str, password: str, show_password: bool):
    """Print the connection string for the given settings."""
    settings = _load_settings(ctx.obj["config"])
    connection = _build_connection(settings, host, database, user, password)
    click.echo(connection.to_string(mask_password=not show_password))


# ============================================================
# INIT-CONFIG Command
# ============================================================

@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=DEFAULT_CONFIG_FILENAME,
    help="Output file for the setup configuration",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def init_config(output: str, force: bool):
    """Write the default setup configuration."""
    output_path = Path(output)

    if output_path.exists() and not force:
        console.print(f"[red]{output} already exists. Use --force to overwrite.[/red]")
        sys.exit(1)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(get_default_settings(), f, default_flow_style=False, sort_keys=False)

    console.print(Panel.fit(
        f"[green]Configuration written to [cyan]{output}[/cyan][/green]\n\n"
        "[bold]Next steps:[/bold]\n"
        "1. Point [cyan]scripts.directory[/cyan] at the database setup scripts\n"
        "2. Run: [yellow]pdc-setup wizard[/yellow]",
        title="Initialization Complete",
    ))


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    cli()
