"""
Shared Rich Console for terminal output.

All CLI and reporter output goes through this one instance so tests can
swap it in a single place.

Usage:
    from recordbook.console import console
    console.print("[green]Product added successfully![/green]")
"""

from rich.console import Console

console = Console(highlight=False)
