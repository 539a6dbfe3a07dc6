"""Main CLI application."""

import typer

from countdown.cli.commands import config, show, watch

app = typer.Typer(
    name="countdown",
    help="Countdown - deadline timers with clock drift correction",
    no_args_is_help=True,
)

watch.register(app)
show.register(app)
config.register(app)


def main() -> None:
    app()
