"""Shared Typer app object, shared option types, and store/settings utilities."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.engine.config_loader import STORE_BACKENDS, Settings, load_settings
from ..io.store import DocumentStore, open_store

# Shared options used across commands
StoreOption = Annotated[
    Optional[str],
    typer.Option("--store", "-s", help=f"Store backend: {', '.join(STORE_BACKENDS)} (default from config)"),
]
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory for the json store"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help="Extra YAML config merged over ~/.lift-scheduler/config.yaml"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging (retries, pacing, writes)"),
]

app = typer.Typer(
    name="lift-scheduler",
    help="Periodized 12-week lifting program generator and workout logger.",
    no_args_is_help=True,
)


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through Rich; WARNING by default, DEBUG when verbose."""
    from . import views

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.console, show_path=False)],
        force=True,
    )


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings, exiting with a readable error if the YAML is invalid."""
    from . import views

    try:
        return load_settings(config_path)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def get_store(
    settings: Settings,
    backend: str | None = None,
    data_dir: Path | None = None,
) -> DocumentStore:
    """Open the configured store, with per-invocation overrides."""
    from dataclasses import replace

    from . import views

    store_settings = settings.store
    try:
        if backend is not None:
            store_settings = replace(store_settings, backend=backend)
        if data_dir is not None:
            store_settings = replace(store_settings, data_dir=data_dir)
        return open_store(store_settings)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
