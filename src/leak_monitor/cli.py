import asyncio
import logging
import re
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table
from typing_extensions import Annotated

from leak_monitor.core.config_loader import (
    DEFAULT_CONFIG_PATH,
    load_config,
    merge_cli_overrides,
    save_config,
    validate_domains,
)
from leak_monitor.core.logger_config import setup_logging
from leak_monitor.core.monitor import Monitor
from leak_monitor.core.scanner import create_scanner
from leak_monitor.core.schemas import CredentialPattern, MonitorConfig
from leak_monitor.core.utils import console, save_or_print_results

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

BANNER = """🔍 Social Media Leak Monitor
=========================="""


def _parse_pattern(value: str) -> CredentialPattern:
    """Parses a ``TYPE=REGEX`` option value into a credential pattern."""
    type_, sep, regex = value.partition("=")
    if not sep or not type_.strip() or not regex:
        raise typer.BadParameter(f"Expected TYPE=REGEX, got '{value}'")
    try:
        return CredentialPattern(type=type_.strip(), regex=re.compile(regex))
    except re.error as e:
        raise typer.BadParameter(f"Invalid regular expression '{regex}': {e}")


def get_cli_app():
    """Creates the Typer application with all of its commands registered."""
    app = typer.Typer(
        name="leak-monitor",
        help="Monitor social media platforms for leaked credentials.",
        add_completion=False,
        rich_markup_mode="markdown",
    )

    @app.command(name="monitor", help="Scan social sources for leaked credentials.")
    def monitor(
        config_path: Annotated[
            str, typer.Option("--config", "-c", help="Path to config file.")
        ] = DEFAULT_CONFIG_PATH,
        domains: Annotated[
            Optional[str],
            typer.Option(
                "--domains", "-d", help="Comma-separated list of domains to monitor."
            ),
        ] = None,
        once: Annotated[
            bool,
            typer.Option(
                "--once", "-o", help="Run once and exit (default is continuous monitoring)."
            ),
        ] = False,
        interval: Annotated[
            Optional[int],
            typer.Option("--interval", "-i", min=1, help="Check interval in minutes."),
        ] = None,
        verbose: Annotated[
            bool, typer.Option("--verbose", "-v", help="Verbose output.")
        ] = False,
        output_file: Annotated[
            Optional[str],
            typer.Option("--output", help="Save the run's findings to a JSON file."),
        ] = None,
    ):
        """Runs the monitor in single-shot or continuous mode."""
        setup_logging(verbose=verbose)
        console.print(BANNER + "\n")

        config = load_config(config_path)
        cli_domains = [d.strip() for d in domains.split(",")] if domains else None
        config = merge_cli_overrides(
            config, domains=cli_domains, interval=interval, verbose=verbose
        )

        if not config.domains:
            console.print(
                "[bold red]Error:[/bold red] No domains specified. Use -d option or config.json"
            )
            raise typer.Exit(code=1)

        valid_domains = validate_domains(config.domains)
        if not valid_domains:
            console.print("[bold red]Error:[/bold red] No valid domains provided")
            raise typer.Exit(code=1)

        console.print(
            f"Monitoring {len(valid_domains)} domain(s): {', '.join(valid_domains)}"
        )
        console.print(f"Check interval: {config.interval} minutes")
        console.print(
            f"Mode: {'Single scan' if once else 'Continuous monitoring'}\n"
        )

        try:
            monitor_instance = Monitor(
                valid_domains,
                interval=config.interval * 60,
                verbose=config.verbose,
                once=once,
                alerts=config.alerts,
            )
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

        try:
            result = asyncio.run(monitor_instance.run())
        except KeyboardInterrupt:
            monitor_instance.stop()
            console.print("\n[bold yellow]Monitoring stopped.[/bold yellow]")
            result = monitor_instance.result()
        except Exception as e:
            logger.error("Monitor failed: %s", e)
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

        if output_file:
            save_or_print_results(result.model_dump(mode="json"), output_file)

    @app.command(name="extract", help="List every credential-shaped match in a text.")
    def extract(
        text: Annotated[
            Optional[str], typer.Argument(help="Text to scan.")
        ] = None,
        file: Annotated[
            Optional[Path],
            typer.Option("--file", "-f", help="Read the text from a file instead."),
        ] = None,
        patterns: Annotated[
            Optional[List[str]],
            typer.Option(
                "--pattern", "-p", help="Extra signature as TYPE=REGEX (repeatable)."
            ),
        ] = None,
    ):
        """Runs extraction mode and prints each match with its offset."""
        if file is not None:
            try:
                content = file.read_text(encoding="utf-8")
            except OSError as e:
                console.print(f"[bold red]Error:[/bold red] Could not read {file}: {e}")
                raise typer.Exit(code=1)
        elif text is not None:
            content = text
        else:
            console.print("[bold red]Error:[/bold red] Provide TEXT or --file.")
            raise typer.Exit(code=1)

        scanner = create_scanner([_parse_pattern(p) for p in patterns or []])
        matches = scanner.extract_credentials(content)
        if not matches:
            console.print("[green]No credential patterns found.[/green]")
            return

        table = Table(title=f"Extracted Credentials ({len(matches)})")
        table.add_column("Type", style="red")
        table.add_column("Name", style="cyan")
        table.add_column("Offset", justify="right", style="yellow")
        table.add_column("Preview", style="magenta")
        for match in matches:
            table.add_row(match.type, match.name, str(match.index), escape(match.value))
        console.print(table)

    @app.command(name="init-config", help="Write a default config file.")
    def init_config(
        config_path: Annotated[
            str, typer.Option("--config", "-c", help="Path of the config file to write.")
        ] = DEFAULT_CONFIG_PATH,
        domains: Annotated[
            Optional[str],
            typer.Option("--domains", "-d", help="Comma-separated list of domains."),
        ] = None,
        force: Annotated[
            bool, typer.Option("--force", help="Overwrite an existing file.")
        ] = False,
    ):
        """Creates a config file pre-filled with the default settings."""
        if Path(config_path).exists() and not force:
            console.print(
                f"[bold yellow]{config_path} already exists.[/bold yellow] Use --force to overwrite."
            )
            raise typer.Exit(code=1)

        config = MonitorConfig(
            domains=validate_domains(domains.split(",")) if domains else []
        )
        path = save_config(config_path, config)
        console.print(f"[bold green]✅ Wrote configuration to {path}[/bold green]")

    @app.command(name="version", help="Show the leak monitor version.")
    def version():
        """Show the leak monitor version."""
        typer.echo(f"Social Media Leak Monitor v{__version__}")

    return app


app = get_cli_app()


def main():
    """Main entry point for the leak monitor CLI application."""
    app()


if __name__ == "__main__":
    main()
