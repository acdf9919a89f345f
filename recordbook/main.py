from __future__ import annotations

import sys
from typing import Optional

import typer
from rich.text import Text

from recordbook.config import get_settings
from recordbook.console import console
from recordbook.domain.errors import BackingStoreError
from recordbook.infrastructure.db_factory import build_dsn
from recordbook.menus import Menu, barangay_menu, inventory_menu
from recordbook.session import Session, available_backends, open_session
from recordbook.utils.logging import configure_logging

app = typer.Typer(help="Console record books: inventory and barangay management.")

BackendOption = typer.Option(
    None,
    "--backend",
    "-b",
    help="Storage backend (memory, postgres). Defaults to RECORDBOOK_BACKEND.",
)


def _open(backend: Optional[str]) -> Session:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    try:
        return open_session(backend=backend, settings=settings)
    except ValueError as exc:
        console.print(Text(str(exc), style="red"))
        raise typer.Exit(code=2) from exc
    except BackingStoreError as exc:
        console.print(Text(f"Cannot initialise the record store: {exc}", style="red"))
        raise typer.Exit(code=1) from exc


def _run(session: Session, build_menu) -> None:
    menu: Menu = build_menu(session)
    with session:
        menu.run()


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    dsn = build_dsn(settings).replace(f":{settings.db_password}@", ":***@")
    typer.echo(
        f"backend={settings.backend} (available: {', '.join(available_backends())}) | "
        f"DB={dsn} | low_stock_threshold={settings.low_stock_threshold} | "
        f"log_level={settings.log_level}"
    )


@app.command()
def inventory(backend: Optional[str] = BackendOption) -> None:
    """
    Run the inventory management menu.
    """
    _run(_open(backend), inventory_menu)


@app.command()
def barangay(backend: Optional[str] = BackendOption) -> None:
    """
    Run the barangay management menu (residents, incidents, announcements).
    """
    _run(_open(backend), barangay_menu)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
