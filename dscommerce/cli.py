"""Command-line interface for DSCommerce."""

import asyncio
import json
import os
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.table import Table

from dscommerce import __version__
from dscommerce.config import (
    CONFIG_PATH_ENV,
    CommerceConfig,
    ConfigError,
    get_config,
    load_config,
    validate_config,
)
from dscommerce.db.session import create_engine_from_config, create_schema
from dscommerce.logging_config import configure_logging, get_logger

console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file (.dscommercerc or dscommerce.toml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Set logging level (overrides config file)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "human"], case_sensitive=False),
    default=None,
    help="Log output format (overrides config file)",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None, log_format: str | None) -> None:
    """DSCommerce - order and catalog backend

    Configuration priority (highest to lowest):
    1. Command-line options
    2. Environment variables (DSCOMMERCE_*)
    3. Config file (--config, .dscommercerc, dscommerce.toml)
    4. Built-in defaults
    """
    try:
        loaded = load_config(config_file=config)
    except ConfigError as e:
        console.print(f"[yellow]Config error: {e}[/yellow]")
        console.print("[dim]Using default configuration[/dim]\n")
        loaded = CommerceConfig()

    configure_logging(
        level=log_level or loaded.logging.level,
        format=(log_format or loaded.logging.format).lower(),
        file=loaded.logging.file,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = loaded
    ctx.obj["config_file"] = str(Path(config).resolve()) if config else None
    ctx.obj["log_level"] = log_level.upper() if log_level else None
    ctx.obj["log_format"] = log_format.lower() if log_format else None


async def _init_db(config: CommerceConfig, seed: bool, drop: bool) -> None:
    from sqlalchemy.ext.asyncio import async_sessionmaker

    from dscommerce.db.seed import seed_database

    engine = create_engine_from_config(config.database)
    try:
        await create_schema(engine, drop_first=drop)
        if seed:
            factory = async_sessionmaker(engine, expire_on_commit=False)
            async with factory() as session:
                await seed_database(session, bcrypt_rounds=config.security.bcrypt_rounds)
                await session.commit()
    finally:
        await engine.dispose()


@cli.command("init-db")
@click.option("--seed", is_flag=True, help="Load the demo dataset after creating tables")
@click.option("--drop", is_flag=True, help="Drop existing tables first")
@click.pass_context
def init_db(ctx: click.Context, seed: bool, drop: bool) -> None:
    """Create the database schema."""
    config: CommerceConfig = ctx.obj["config"]

    if drop and not click.confirm(
        f"Drop all tables in {config.database.url}?", default=False
    ):
        raise click.Abort()

    try:
        asyncio.run(_init_db(config, seed=seed, drop=drop))
    except Exception as e:
        logger.error("init_db_failed", error=str(e))
        console.print(f"[red]Database initialization failed: {e}[/red]")
        raise click.exceptions.Exit(1)

    console.print(f"[green]Schema ready[/green] at {config.database.url}")
    if seed:
        console.print("[green]Demo data loaded[/green] (password for all users: 123456)")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool) -> None:
    """Run the API server with uvicorn.

    The app loads its configuration on import, so the group options are
    exported to the environment before uvicorn imports it.
    """
    import uvicorn

    overrides = {
        CONFIG_PATH_ENV: ctx.obj.get("config_file"),
        "DSCOMMERCE_LOG_LEVEL": ctx.obj.get("log_level"),
        "DSCOMMERCE_LOG_FORMAT": ctx.obj.get("log_format"),
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value
    get_config.cache_clear()

    config: CommerceConfig = ctx.obj["config"]
    for warning in validate_config(config):
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    uvicorn.run(
        "dscommerce.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=(ctx.obj.get("log_level") or config.logging.level).lower(),
    )


@cli.group("config")
def config_group() -> None:
    """Inspect configuration."""


@config_group.command("show")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "json", "table"], case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.pass_context
def show_config(ctx: click.Context, format: str) -> None:
    """Display effective configuration from all sources.

    Secrets are masked in every output format.
    """
    config: CommerceConfig = ctx.obj["config"]
    data = config.to_dict()
    data["security"]["jwt_secret"] = "***"
    data["security"]["client_secret"] = "***"

    if format == "json":
        click.echo(json.dumps(data, indent=2))
        return
    if format == "yaml":
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
        return

    for section, values in data.items():
        table = Table(title=f"{section.capitalize()} Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in values.items():
            if value is None:
                rendered = "[dim]not set[/dim]"
            elif isinstance(value, list):
                rendered = ", ".join(str(v) for v in value)
            else:
                rendered = str(value)
            table.add_row(key, rendered)
        console.print(table)

    warnings = validate_config(config)
    if warnings:
        console.print("\n[bold yellow]Warnings:[/bold yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
