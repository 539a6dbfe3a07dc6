"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer

from countdown.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $COUNTDOWN_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        import tomllib

        from pydantic import ValidationError
        from rich.syntax import Syntax
        from rich.table import Table

        from countdown.config import load_config
        from countdown.config.paths import get_config_path

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            content = expanded_path.read_text()
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            try:
                config_obj = load_config(expanded_path)
            except tomllib.TOMLDecodeError as e:
                error(f"Invalid TOML: {e}")
                raise typer.Exit(1) from None
            except ValidationError as e:
                error("Configuration validation failed:")
                console.print()
                for err in e.errors():
                    loc = ".".join(str(x) for x in err["loc"])
                    console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
                raise typer.Exit(1) from None

            scheduler = config_obj.scheduler
            table = Table(title="Configuration Summary")
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")
            table.add_row("Tick interval", f"{scheduler.tick_interval_ms} ms")
            table.add_row("Drift threshold", f"{scheduler.drift_threshold_ms} ms")
            table.add_row("Timezone", scheduler.timezone or "[dim]system[/dim]")
            table.add_row(
                "Base time",
                str(scheduler.base_time)
                if scheduler.base_time is not None
                else "[dim]local clock[/dim]",
            )
            table.add_row(
                "Time fixer",
                config_obj.time_fixer.url or "[dim]not configured[/dim]",
            )
            table.add_row(
                "Cancel resync on pause", str(scheduler.cancel_resync_on_pause)
            )
            table.add_row("Locale", config_obj.locale)

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
