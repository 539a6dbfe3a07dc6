"""Live countdown until a deadline."""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from countdown.cli.console import console, dim, error

if TYPE_CHECKING:
    from countdown.config import CountdownConfig
    from countdown.scheduler import Countdown, ErrorHandler


def register(app: typer.Typer) -> None:
    """Register the watch command."""

    @app.command()
    def watch(
        target: Annotated[
            str,
            typer.Argument(help="Deadline: duration (90s, 1h30m, 2d) or ISO datetime"),
        ],
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
        sync_url: Annotated[
            str | None,
            typer.Option("--sync-url", help="Resync the clock from this URL's Date header"),
        ] = None,
        locale: Annotated[
            str | None,
            typer.Option("--locale", "-l", help="Output locale: en, zh"),
        ] = None,
        timezone: Annotated[
            str | None,
            typer.Option("--timezone", "-z", help="IANA timezone for day boundaries"),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Log scheduler events"),
        ] = False,
    ) -> None:
        """Count down to TARGET, updating twice a second."""
        from pydantic import ValidationError

        from countdown.config import ConfigError, SchedulerConfig, load_config
        from countdown.errors import CountdownError
        from countdown.formatting import SUPPORTED_LOCALES
        from countdown.logging import configure_logging

        try:
            config_obj = load_config(config)
            if sync_url:
                config_obj.time_fixer.url = sync_url
            if timezone:
                config_obj.scheduler = SchedulerConfig.model_validate(
                    {**config_obj.scheduler.model_dump(), "timezone": timezone}
                )
        except FileNotFoundError as e:
            error(str(e))
            raise typer.Exit(1) from None
        except ValidationError as e:
            error("Configuration validation failed:")
            for err in e.errors():
                loc = ".".join(str(x) for x in err["loc"])
                console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
            raise typer.Exit(1) from None

        configure_logging(
            level="DEBUG" if verbose else config_obj.logging.level,
            use_rich=True,
            log_to_file=config_obj.logging.log_to_file,
        )

        locale = locale or config_obj.locale
        if locale not in SUPPORTED_LOCALES:
            error(f"Unsupported locale: {locale}")
            raise typer.Exit(1)

        try:
            asyncio.run(_run(target, config_obj, locale))
        except (ConfigError, CountdownError, ValueError) as e:
            error(str(e))
            raise typer.Exit(1) from None
        except KeyboardInterrupt:
            raise typer.Exit(130) from None


async def _start_countdown(
    target: str,
    config_obj: "CountdownConfig",
    error_handler: "ErrorHandler",
) -> tuple["Countdown", int]:
    """Build the scheduler and resolve TARGET against its corrected clock."""
    from countdown.cli.targets import parse_target
    from countdown.fixers import HttpDateTimeFixer
    from countdown.scheduler import Countdown

    fixer = None
    base_time = config_obj.scheduler.base_time
    if config_obj.time_fixer.url:
        fixer = HttpDateTimeFixer.from_config(config_obj.time_fixer)
        base_time = await fixer()
        dim(f"Clock synced with {fixer.url}")

    countdown = Countdown(
        base_time=base_time, config=config_obj.scheduler, error_handler=error_handler
    )
    if fixer is not None:
        countdown.add_time_fixer(fixer, pass_token=True)

    try:
        target_ms = parse_target(target, countdown.now())
    except ValueError:
        await countdown.aclose()
        raise
    return countdown, target_ms


async def _run(target: str, config_obj: "CountdownConfig", locale: str) -> None:
    from rich.live import Live

    from countdown.count import Count
    from countdown.formatting import day_label, format_count

    done = asyncio.Event()
    failures: list[BaseException] = []

    def on_error(exc: BaseException) -> None:
        failures.append(exc)
        done.set()

    countdown, target_ms = await _start_countdown(target, config_obj, on_error)

    with Live(console=console, refresh_per_second=4, transient=False) as live:

        def render(count: Count) -> None:
            if count.out_time:
                live.update("[green]Time's up![/green]")
                done.set()
                return
            live.update(
                f"[bold]{day_label(count.day, locale=locale)}[/bold]  "
                f"{format_count(count, locale=locale)}"
            )

        try:
            countdown.add_task(target_ms, render)
            await done.wait()
        finally:
            await countdown.aclose()

    if failures:
        raise failures[0]
