"""One-shot countdown display."""

from pathlib import Path
from typing import Annotated

import typer

from countdown.cli.console import console, error


def register(app: typer.Typer) -> None:
    """Register the show command."""

    @app.command()
    def show(
        target: Annotated[
            str,
            typer.Argument(help="Deadline: duration (90s, 1h30m, 2d) or ISO datetime"),
        ],
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
        locale: Annotated[
            str | None,
            typer.Option("--locale", "-l", help="Output locale: en, zh"),
        ] = None,
    ) -> None:
        """Print the time left until TARGET."""
        from rich.table import Table

        from countdown.cli.targets import parse_target
        from countdown.clock import wall_clock_ms
        from countdown.config import load_config
        from countdown.count import calculate
        from countdown.formatting import day_label, format_count

        try:
            config_obj = load_config(config)
        except FileNotFoundError as e:
            error(str(e))
            raise typer.Exit(1) from None

        locale = locale or config_obj.locale
        moment = wall_clock_ms()
        try:
            target_ms = parse_target(target, moment)
        except ValueError as e:
            error(str(e))
            raise typer.Exit(1) from None

        count = calculate(target_ms - moment, moment, config_obj.scheduler.tzinfo())

        try:
            label = day_label(count.day, locale=locale)
            text = format_count(count, locale=locale)
        except ValueError as e:
            error(str(e))
            raise typer.Exit(1) from None

        table = Table(title=f"{label} · {text}")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        for key, value in count.to_dict().items():
            table.add_row(key, str(value))
        console.print(table)
