"""CLI entry point for the coopreg service."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from coopreg.config import ConfigError, Settings, load_settings
from coopreg.logging import setup_logging


def _load(config_path: Path | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    setup_logging(settings.logging)
    return settings


@click.group()
@click.version_option(package_name="coopreg")
def main() -> None:
    """coopreg - homeschool cooperative registration service."""
    pass


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to coopreg.yaml (COOPREG_CONFIG or ./coopreg.yaml if not specified)",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", type=int, default=8000, show_default=True, help="Port to listen on")
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides config)")
def serve(config_path: Path | None, host: str, port: int, db_path: str | None) -> None:
    """Run the HTTP API."""
    import uvicorn  # noqa: PLC0415

    from coopreg.api.app import create_app  # noqa: PLC0415

    settings = _load(config_path)
    if not settings.identity.is_configured:
        click.echo(
            "Warning: identity provider is not configured (AUTH_API_URL, AUTH_API_KEY, "
            "AUTH_APP_ID)",
            err=True,
        )

    app = create_app(db_path=db_path, settings=settings)
    click.echo(f"Serving coopreg API on http://{host}:{port}/api/v1")
    uvicorn.run(app, host=host, port=port, log_config=None)


@main.command("init-db")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to coopreg.yaml (COOPREG_CONFIG or ./coopreg.yaml if not specified)",
)
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides config)")
def init_db(config_path: Path | None, db_path: str | None) -> None:
    """Create the database tables."""
    from coopreg.store import CoopStore  # noqa: PLC0415

    settings = _load(config_path)
    path = db_path or settings.db_path
    store = CoopStore(path)
    store.close()
    click.echo(f"Database ready: {path}")


if __name__ == "__main__":
    main()
