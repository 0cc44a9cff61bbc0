"""Command-line entry point for Homeshelf."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .app_context import AppContext, determine_paths, load_context
from .auth import JellyfinClientFactory
from .config import ConfigError, ConfigPaths, bootstrap
from .home import HomeLayout, load_home
from .logging import configure_logging, get_logger
from .models import ItemQuery
from .rotation import day_bucket
from .rows import load_rows
from .services import CatalogError

app = typer.Typer(help="Preview and inspect the Homeshelf home screen.")
console = Console()

CONFIG_DIR_OPTION = typer.Option(
    None,
    "--config-dir",
    dir_okay=True,
    file_okay=False,
    resolve_path=True,
    help="Base directory for config files (defaults to ~/.homeshelf).",
)
DAY_OPTION = typer.Option(None, "--day", min=0, help="Rotation day bucket (defaults to today, UTC).")


def _determine_default_log_level(config_dir: Optional[Path]) -> str:
    paths = determine_paths(config_dir)
    if not paths.global_config.exists():
        return "INFO"

    try:
        context = load_context(paths)
    except ConfigError:
        return "INFO"
    return context.global_config.runtime.log_level.upper()


def _bootstrap_logging(
    ctx: typer.Context,
    verbose: bool,
    json_logs: bool,
    log_file: Optional[Path],
) -> None:
    """Initialise logging once per CLI invocation."""

    if ctx.obj is None:
        ctx.obj = {}

    if ctx.obj.get("_logging_configured"):
        return

    level = "DEBUG" if verbose else "INFO"
    configure_logging(level=level, json_output=json_logs, log_file=log_file)
    ctx.obj["logger"] = get_logger("homeshelf.cli")
    ctx.obj["log_level"] = level
    ctx.obj["json_logs"] = json_logs
    ctx.obj["log_file_path"] = log_file
    ctx.obj["force_log_level"] = verbose
    ctx.obj["_logging_configured"] = True


@app.callback(invoke_without_command=True)
def cli(  # noqa: D401 - Typer generates help text.
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON-formatted logs."),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        dir_okay=False,
        file_okay=True,
        writable=True,
        resolve_path=True,
        help="Optional file to append structured logs to.",
    ),
) -> None:
    """Homeshelf command group."""

    _bootstrap_logging(ctx, verbose, json_logs, log_file)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _logger(ctx: typer.Context):
    return ctx.obj.get("logger", get_logger("homeshelf.cli"))


def _maybe_update_log_level(ctx: typer.Context, config_dir: Optional[Path]) -> None:
    if ctx.obj.get("force_log_level"):
        return

    desired = _determine_default_log_level(config_dir)
    if desired != ctx.obj.get("log_level"):
        configure_logging(
            level=desired,
            json_output=ctx.obj.get("json_logs", False),
            log_file=ctx.obj.get("log_file_path"),
        )
        ctx.obj["logger"] = get_logger("homeshelf.cli")
        ctx.obj["log_level"] = desired


def _load_or_exit(ctx: typer.Context, command: str, config_dir: Optional[Path]) -> AppContext:
    log = _logger(ctx)
    try:
        return load_context(determine_paths(config_dir))
    except ConfigError as exc:
        log.error(f"{command}.config_failed", error=str(exc))
        typer.echo(f"Error loading configuration: {exc}")
        raise typer.Exit(code=1) from exc


def _factory_or_exit(ctx: typer.Context, command: str, context: AppContext) -> JellyfinClientFactory:
    try:
        return JellyfinClientFactory(context.global_config)
    except RuntimeError as exc:
        _logger(ctx).error(f"{command}.client_init_failed", error=str(exc))
        typer.echo(f"Server setup failed: {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def init(
    ctx: typer.Context,
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    force: bool = typer.Option(False, "--force", help="Overwrite existing config.yml"),
) -> None:
    """Write a starter configuration file."""

    log = _logger(ctx)

    paths = ConfigPaths.from_base_dir(config_dir) if config_dir else ConfigPaths.default()
    report = bootstrap(paths, overwrite=force)

    typer.echo(f"Configuration directory: {paths.base_dir}")
    if report.global_config_created:
        if report.global_config_overwritten:
            typer.echo(f"Global config overwritten at: {paths.global_config}")
        else:
            typer.echo(f"Global config created at: {paths.global_config}")
            typer.echo("Update the server api_key and user_id before loading the home screen.")
    else:
        typer.echo(f"Global config already exists at: {paths.global_config}")
        typer.echo("Use --force to regenerate with default values.")

    log.info(
        "init.completed",
        base_dir=str(paths.base_dir),
        global_config=str(paths.global_config),
        force=force,
        base_created=report.base_created,
        global_config_created=report.global_config_created,
        global_config_overwritten=report.global_config_overwritten,
    )


@app.command()
def doctor(ctx: typer.Context, config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """Check that the media server answers catalog requests."""

    log = _logger(ctx)
    _maybe_update_log_level(ctx, config_dir)

    context = _load_or_exit(ctx, "doctor", config_dir)
    factory = _factory_or_exit(ctx, "doctor", context)
    home_settings = context.global_config.home

    async def probe():
        async with factory.get_client() as client:
            service = factory.get_service(client)
            return await service.fetch_genres(ItemQuery(include_item_types=home_settings.include_item_types))

    try:
        genres = asyncio.run(probe())
    except CatalogError as exc:
        log.error("doctor.catalog_failed", status=exc.status_code, error=str(exc))
        typer.echo(f"Server request failed: {exc}")
        raise typer.Exit(code=1) from exc

    log.info("doctor.completed", server=context.global_config.server.url, genres=len(genres))
    typer.echo("Media server access OK.")
    typer.echo(f"Genres available: {len(genres)}")


def _print_layout(layout: HomeLayout) -> None:
    slides = Table(title=f"Carousel (day {layout.day})")
    slides.add_column("#", justify="right")
    slides.add_column("Label")
    slides.add_column("Title")
    slides.add_column("Backdrop")
    for position, slide in enumerate(layout.carousel.slides, start=1):
        slides.add_row(str(position), slide.label, slide.item.name or slide.item.id, slide.backdrop_url or "-")
    console.print(slides)

    rows = Table(title="Rows")
    rows.add_column("#", justify="right")
    rows.add_column("Label")
    rows.add_column("Kind")
    rows.add_column("Items")
    for position, group in enumerate(layout.rows.groups):
        rows.add_row(str(position), group.label, group.kind, "lazy" if group.is_lazy else str(len(group.items)))
    console.print(rows)

    for source, error in sorted(layout.errors.items()):
        console.print(f"[yellow]{source} failed:[/yellow] {error}")


@app.command()
def home(
    ctx: typer.Context,
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    day: Optional[int] = DAY_OPTION,
) -> None:
    """Show the carousel and rows selected for a day."""

    log = _logger(ctx)
    _maybe_update_log_level(ctx, config_dir)

    context = _load_or_exit(ctx, "home", config_dir)
    factory = _factory_or_exit(ctx, "home", context)

    async def build() -> HomeLayout:
        async with factory.get_client() as client:
            return await load_home(factory.get_service(client), context.global_config.home, logger=log, day=day)

    _print_layout(asyncio.run(build()))


@app.command()
def row(
    ctx: typer.Context,
    index: int = typer.Argument(..., min=0, help="Position of the row in the `home` listing."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
    day: Optional[int] = DAY_OPTION,
) -> None:
    """Load the items of one row."""

    log = _logger(ctx)
    _maybe_update_log_level(ctx, config_dir)

    context = _load_or_exit(ctx, "row", config_dir)
    factory = _factory_or_exit(ctx, "row", context)
    selected_day = day if day is not None else day_bucket()

    async def resolve():
        async with factory.get_client() as client:
            service = factory.get_service(client)
            selection = await load_rows(service, context.global_config.home, logger=log, day=selected_day)
            groups = selection.groups
            if index >= len(groups):
                return None, selection.errors
            group = groups[index]
            return (group, await group.load_items(service)), selection.errors

    try:
        resolved, errors = asyncio.run(resolve())
    except CatalogError as exc:
        log.error("row.load_failed", index=index, error=str(exc))
        typer.echo(f"Failed to load row {index}: {exc}")
        raise typer.Exit(code=1) from exc

    if resolved is None:
        for branch, error in sorted(errors.items()):
            typer.echo(f"{branch} rows unavailable: {error}")
        typer.echo(f"No row at position {index} for day {selected_day}.")
        raise typer.Exit(code=1)

    group, items = resolved
    table = Table(title=f"{group.label} ({group.kind})")
    table.add_column("Id")
    table.add_column("Title")
    for item in items:
        table.add_row(item.id or "-", item.name or "")
    console.print(table)


def main() -> None:
    """Run the Typer application."""

    app()


if __name__ == "__main__":  # pragma: no cover - direct execution convenience
    main()
