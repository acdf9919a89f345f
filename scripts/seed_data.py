"""
Demo data seeding script for recordbook.

Generates deterministic pseudo-random products and residents and loads them
through the facades, so every validation and uniqueness rule applies exactly
as it does for interactive input.
"""

from __future__ import annotations

import random
import sys
import time
from decimal import Decimal
from typing import Dict, List, Optional

import typer

from recordbook.config import get_settings
from recordbook.domain.errors import BackingStoreError
from recordbook.session import Session, open_session
from recordbook.utils.logging import configure_logging

app = typer.Typer(help="Seed demo products and residents into a record store.")

_CATEGORIES = ["Electronics", "Groceries", "Hardware", "Stationery", "Toys"]
_ITEMS = [
    "Laptop", "Rice", "Hammer", "Notebook", "Puzzle", "Monitor", "Soap", "Drill", "Pen", "Kite"
]
_FIRST_NAMES = ["Ana", "Jose", "Maria", "Juan", "Liza", "Paolo", "Rosa", "Carlo"]
_LAST_NAMES = ["Santos", "Reyes", "Cruz", "Bautista", "Garcia", "Mendoza"]
_STREETS = ["Mabini St.", "Rizal Ave.", "Luna St.", "Bonifacio Rd."]


def _generate_products(rows: int, seed: int) -> List[Dict[str, object]]:
    rng = random.Random(seed)
    products = []
    for i in range(rows):
        products.append(
            {
                "name": f"{rng.choice(_ITEMS)} {i + 1:04d}",
                "category": rng.choice(_CATEGORIES),
                "quantity": rng.randint(1, 50),
                "price": Decimal(f"{rng.uniform(1, 5_000):.2f}"),
            }
        )
    return products


def _generate_residents(rows: int, seed: int) -> List[Dict[str, str]]:
    rng = random.Random(seed)
    residents = []
    for i in range(rows):
        residents.append(
            {
                "name": f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)} {i + 1}",
                "address": f"{rng.randint(1, 999)} {rng.choice(_STREETS)}",
                "contact": f"09{rng.randint(100_000_000, 999_999_999)}",
            }
        )
    return residents


def _load(
    session: Session,
    products: List[Dict[str, object]],
    residents: List[Dict[str, str]],
) -> Dict[str, int]:
    counts = {"added": 0, "rejected": 0}
    outcomes = [session.products.add(**fields) for fields in products]
    outcomes += [session.residents.add(**fields) for fields in residents]
    for outcome in outcomes:
        counts["added" if outcome["ok"] else "rejected"] += 1
    return counts


@app.command()
def main(
    products: int = typer.Option(20, "--products", "-p", help="Number of products to generate."),
    residents: int = typer.Option(10, "--residents", "-r", help="Number of residents to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="Backend override (memory, postgres)."
    ),
) -> None:
    """
    Generate demo records and load them into the configured backend.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    start = time.perf_counter()

    try:
        session = open_session(backend=backend, settings=settings)
    except BackingStoreError as exc:
        typer.echo(f"Cannot open record store: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    with session:
        counts = _load(
            session,
            _generate_products(products, seed),
            _generate_residents(residents, seed),
        )

    duration = time.perf_counter() - start
    typer.echo(
        f"Seeded backend={session.backend}: added={counts['added']} "
        f"rejected={counts['rejected']} in {duration:.2f}s"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
