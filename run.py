"""Entry point for the corpus ingestion pipeline."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from src.catalog import WorkCatalog, load_catalog
from src.config import AppConfig, load_config
from src.ingestion.orchestrator import run_catalog
from src.models.report import CatalogRunReport
from src.storage.database import initialize_database

app = typer.Typer(
    name="corpus-ingest",
    help="Sync canonical texts from the remote corpus into the local store.",
    add_completion=False,
)

logger = logging.getLogger("corpus_ingest.cli")

ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to config.yaml")


def _setup(config_path: Path) -> tuple[AppConfig, WorkCatalog]:
    config = load_config(config_path)
    logging.basicConfig(
        level=config.app.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return config, load_catalog(config.ingestion.catalog_path)


def _exit_for(run: CatalogRunReport) -> None:
    for report in run.works:
        typer.echo(f"{report.slug}: {report.state.value}, {report.records_written} records")
    if not run.ok:
        typer.echo(f"Failed works: {', '.join(run.failed)}", err=True)
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db(config_path: Path = ConfigOption) -> None:
    """Create the database schema."""
    config, _ = _setup(config_path)
    initialize_database(config.storage.sqlite_path)
    typer.echo(f"Database ready at {config.storage.sqlite_path}")


@app.command("list")
def list_works(config_path: Path = ConfigOption) -> None:
    """List the works in the catalog."""
    _, catalog = _setup(config_path)
    for slug, descriptor in catalog.items():
        typer.echo(
            f"{slug:32} {descriptor.sub_path:60} "
            f"{descriptor.structure.value:20} depth={descriptor.depth}"
        )


@app.command("sync")
def sync(
    slug: str = typer.Argument(..., help="Work slug, e.g. Genesis"),
    config_path: Path = ConfigOption,
) -> None:
    """Sync one work by slug."""
    config, catalog = _setup(config_path)
    if slug not in catalog:
        typer.echo(f"Unknown work: {slug}", err=True)
        raise typer.Exit(code=2)
    _exit_for(asyncio.run(run_catalog(config, catalog, [slug])))


@app.command("sync-all")
def sync_all(
    only: Optional[list[str]] = typer.Option(None, "--only", help="Restrict to these slugs"),
    config_path: Path = ConfigOption,
) -> None:
    """Sync every work in the catalog, in catalog order."""
    config, catalog = _setup(config_path)
    if only:
        unknown = [slug for slug in only if slug not in catalog]
        if unknown:
            typer.echo(f"Unknown work(s): {', '.join(unknown)}", err=True)
            raise typer.Exit(code=2)
    logger.info("Syncing %d works", len(only) if only else len(catalog))
    _exit_for(asyncio.run(run_catalog(config, catalog, only or None)))


if __name__ == "__main__":
    app()
