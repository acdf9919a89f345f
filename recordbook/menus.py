"""
Interactive letter menus for the inventory and barangay applications.

Menus only collect input, call facade verbs and print what comes back; all
record rules live in the facades and stores. Every choice is confirmed with
Y/N before it runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence, TypeVar

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.text import Text

from recordbook.console import console as default_console
from recordbook.facades.abstract import OperationResult, RecordFacade
from recordbook.reporter import (
    ANNOUNCEMENT_DETAIL_COLUMNS,
    INCIDENT_DETAIL_COLUMNS,
    print_cards,
    print_table,
)
from recordbook.session import Session

T = TypeVar("T")

EXIT = "X"


@dataclass(frozen=True)
class MenuEntry:
    letter: str
    label: str
    action: Callable[[], None]


class Menu:
    """A boxed letter menu that loops until the user confirms X."""

    def __init__(
        self, title: str, entries: Sequence[MenuEntry], console: Optional[Console] = None
    ) -> None:
        self.title = title
        self.entries = {entry.letter: entry for entry in entries}
        self.console = console or default_console

    def show(self) -> None:
        lines = Text()
        for entry in self.entries.values():
            lines.append(f"[{entry.letter}] {entry.label}\n", style="yellow")
        lines.append(f"[{EXIT}] Exit Program", style="yellow")
        self.console.print(
            Panel(
                lines,
                title=Text(self.title, style="bold"),
                box=box.ASCII,
                border_style="cyan",
                padding=(0, 15),
                expand=False,
            )
        )

    def choose(self) -> str:
        valid = ", ".join(self.entries)
        while True:
            choice = Prompt.ask("Enter your choice", console=self.console).strip().upper()
            if choice != EXIT and choice not in self.entries:
                self.console.print(f"[red]Invalid option! Please enter {valid} or {EXIT}.[/red]\n")
                continue
            question = f"You selected: [green]{choice}[/green]. Proceed?"
            if Confirm.ask(question, console=self.console):
                return choice
            self.console.print("[red]Action cancelled. Returning to menu...[/red]\n")

    def run(self) -> None:
        while True:
            self.show()
            choice = self.choose()
            if choice == EXIT:
                self.console.print("[magenta]Exiting program... Goodbye![/magenta]")
                return
            self.entries[choice].action()
            self.console.print()


class _Prompter:
    """Input helpers shared by both applications."""

    KEEP = " (leave blank to keep current)"

    def __init__(self, console: Console) -> None:
        self.console = console

    def _ask(self, label: str) -> str:
        return Prompt.ask(label, default="", show_default=False, console=self.console)

    def text(self, label: str, keep_blank: bool = False, optional: bool = False) -> str:
        if keep_blank:
            return self._ask(label + self.KEEP)
        if optional:
            return self._ask(f"{label} (optional)")
        return Prompt.ask(label, console=self.console)

    def number(
        self, label: str, parse: Callable[[str], T], keep_blank: bool = False
    ) -> Optional[T]:
        suffix = self.KEEP if keep_blank else ""
        while True:
            raw = self._ask(label + suffix).strip()
            if not raw and keep_blank:
                return None
            try:
                return parse(raw)
            except (ValueError, InvalidOperation):
                self.console.print("[red]Invalid input! Please enter a number.[/red]")

    def again(self, question: str) -> bool:
        return Confirm.ask(question, default=False, console=self.console)

    def report(self, result: OperationResult) -> None:
        style = "green" if result.get("ok") else "red"
        self.console.print(Text(result.get("message", ""), style=style))


def _decimal(raw: str) -> Decimal:
    value = Decimal(raw)
    if not value.is_finite():
        raise InvalidOperation(raw)
    return value


def _view(facade: RecordFacade, title: str, console: Console) -> None:
    result = facade.view_all()
    if not result["ok"]:
        _Prompter(console).report(result)
        return
    print_table(facade.renderer, result["records"], title=title, console=console)


def inventory_menu(session: Session, console: Optional[Console] = None) -> Menu:
    out = console or default_console
    ask = _Prompter(out)
    products = session.products

    def add() -> None:
        while True:
            out.print(Text("\n===== Add New Product =====", style="green"))
            result = products.add(
                name=ask.text("Enter Product Name"),
                category=ask.text("Enter Product Category"),
                quantity=ask.number("Enter Quantity", int),
                price=ask.number("Enter Price", _decimal),
            )
            ask.report(result)
            _view(products, "Current Inventory", out)
            if not ask.again("Add another product?"):
                return

    def search() -> None:
        _view(products, "Current Inventory", out)
        result = products.search(ask.text("Enter product name to search"))
        out.print(Text("\n===== Search Results =====", style="green"))
        print_cards(result.get("records", []), products.columns, "No matching product found.", out)

    def update() -> None:
        _view(products, "Current Inventory", out)
        name = ask.text("Enter product name to update")
        result = products.update(
            name,
            name=ask.text("New Name", keep_blank=True),
            category=ask.text("New Category", keep_blank=True),
            quantity=ask.number("New Quantity", int, keep_blank=True),
            price=ask.number("New Price", _decimal, keep_blank=True),
        )
        ask.report(result)
        _view(products, "Updated Inventory", out)

    def delete() -> None:
        _view(products, "Current Inventory", out)
        ask.report(products.delete(ask.text("Enter product name to delete")))
        _view(products, "Updated Inventory", out)

    def sell() -> None:
        _view(products, "Current Inventory", out)
        name = ask.text("Enter product name to sell")
        quantity = IntPrompt.ask("Enter quantity sold", console=out)
        ask.report(products.process_sale(name, quantity))
        _view(products, "Updated Inventory", out)

    def low_stock() -> None:
        result = products.low_stock()
        threshold = products.low_stock_threshold
        out.print(Text(f"\n===== LOW STOCK PRODUCTS (Qty < {threshold}) =====", style="yellow"))
        if not result["ok"] or not result["records"]:
            ask.report(result)
            return
        for product in result["records"]:
            out.print(Text(f"{product.name} Qty: {product.quantity}", style="red"))

    return Menu(
        "INVENTORY MANAGEMENT SYSTEM",
        [
            MenuEntry("A", "Add New Products", add),
            MenuEntry("B", "View All Products", lambda: _view(products, "All Products", out)),
            MenuEntry("C", "Search Records", search),
            MenuEntry("D", "Update Product Details", update),
            MenuEntry("E", "Delete Product Details", delete),
            MenuEntry("F", "Process Sales", sell),
            MenuEntry("G", "Display Low Stock Alerts", low_stock),
        ],
        console=out,
    )


def barangay_menu(session: Session, console: Optional[Console] = None) -> Menu:
    out = console or default_console
    ask = _Prompter(out)
    residents = session.residents
    incidents = session.incidents
    announcements = session.announcements

    def add_resident() -> None:
        while True:
            out.print(Text("\n===== Add New Resident =====", style="green"))
            result = residents.add(
                name=ask.text("Enter Full Name"),
                address=ask.text("Enter Address"),
                contact=ask.text("Enter Contact Number"),
            )
            ask.report(result)
            _view(residents, "Resident Records", out)
            if not ask.again("Add another resident?"):
                return

    def update_resident() -> None:
        _view(residents, "Current Residents", out)
        name = ask.text("Enter resident name to update")
        result = residents.update(
            name,
            name=ask.text("New Full Name", keep_blank=True),
            address=ask.text("New Address", keep_blank=True),
            contact=ask.text("New Contact", keep_blank=True),
        )
        ask.report(result)
        _view(residents, "Updated Resident Records", out)

    def search_resident() -> None:
        _view(residents, "Current Residents", out)
        result = residents.search(ask.text("Enter name keyword to search"))
        out.print(Text("\n===== Search Results =====", style="green"))
        found = result.get("records", [])
        print_cards(found, residents.columns, "No matching residents found.", out)

    def delete_resident() -> None:
        _view(residents, "Current Residents", out)
        ask.report(residents.delete(ask.text("Enter resident name to delete")))
        _view(residents, "Updated Resident Records", out)

    def report_incident() -> None:
        while True:
            out.print(Text("\n===== Report New Incident =====", style="green"))
            result = incidents.report(
                incident_type=ask.text("Enter Incident Type (e.g., Crime, Accident)"),
                location=ask.text("Enter Location"),
                date=ask.text("Enter Date (YYYY-MM-DD)"),
                time=ask.text("Enter Time (HH:MM)"),
                description=ask.text("Enter Description", optional=True),
            )
            ask.report(result)
            _view(incidents, "Incident Reports", out)
            if not ask.again("Report another incident?"):
                return

    def view_incidents() -> None:
        _view(incidents, "Incident Reports", out)
        records = incidents.view_all().get("records", [])
        if records:
            out.print(Text("\nDetails of each incident:", style="blue"))
            print_cards(records, INCIDENT_DETAIL_COLUMNS, console=out)

    def search_incident() -> None:
        _view(incidents, "Current Incidents", out)
        result = incidents.search(ask.text("Enter incident type or location keyword to search"))
        out.print(Text("\n===== Search Results =====", style="green"))
        found = result.get("records", [])
        print_cards(found, INCIDENT_DETAIL_COLUMNS, "No matching incidents found.", out)

    def delete_incident() -> None:
        _view(incidents, "Current Incidents", out)
        ask.report(incidents.delete(ask.text("Enter incident type or location to delete")))
        _view(incidents, "Updated Incident Reports", out)

    def add_announcement() -> None:
        while True:
            out.print(Text("\n===== Add New Announcement =====", style="green"))
            result = announcements.add(
                title=ask.text("Enter Title"),
                date=ask.text("Enter Date (YYYY-MM-DD)"),
                content=ask.text("Enter Content"),
            )
            ask.report(result)
            _view(announcements, "Announcements", out)
            if not ask.again("Add another announcement?"):
                return

    def view_announcements() -> None:
        _view(announcements, "Announcements", out)
        records = announcements.view_all().get("records", [])
        if records:
            out.print(Text("\nDetails of each announcement:", style="blue"))
            print_cards(records, ANNOUNCEMENT_DETAIL_COLUMNS, console=out)

    def delete_announcement() -> None:
        _view(announcements, "Current Announcements", out)
        ask.report(announcements.delete(ask.text("Enter announcement title to delete")))
        _view(announcements, "Updated Announcements", out)

    return Menu(
        "BARANGAY MANAGEMENT SYSTEM",
        [
            MenuEntry("A", "Add Resident", add_resident),
            MenuEntry("B", "View All Residents", lambda: _view(residents, "Resident Records", out)),
            MenuEntry("C", "Update Resident", update_resident),
            MenuEntry("D", "Search Resident", search_resident),
            MenuEntry("E", "Delete Resident", delete_resident),
            MenuEntry("F", "Report Incident", report_incident),
            MenuEntry("G", "View Incidents", view_incidents),
            MenuEntry("H", "Search Incident", search_incident),
            MenuEntry("I", "Delete Incident", delete_incident),
            MenuEntry("J", "Add Announcement", add_announcement),
            MenuEntry("K", "View Announcements", view_announcements),
            MenuEntry("L", "Delete Announcement", delete_announcement),
        ],
        console=out,
    )


__all__ = ["Menu", "MenuEntry", "inventory_menu", "barangay_menu"]
