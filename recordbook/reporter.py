"""
Fixed-width table rendering for record collections.

`TableRenderer` lays records out as a bordered text table with one column per
`Column(label, field, width)`. Values longer than their column are wrapped
onto continuation lines, so a record may occupy several physical lines. The
renderer only builds strings; `print_table` and `print_cards` send them to
the shared rich console with colour.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from rich.console import Console
from rich.text import Text

from recordbook.console import console as default_console

NO_RECORDS = "No records found."


@dataclass(frozen=True)
class Column:
    """One table column: header label, record field and width in characters."""

    label: str
    field: str
    width: int

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"column {self.label!r} needs a positive width, got {self.width}")


def format_value(value: Any) -> str:
    """
    Stringify a cell value. Decimals and floats always get two decimal places
    so every row of a currency column lines up (1200 -> "1200.00").
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (Decimal, float)):
        return f"{value:.2f}"
    return str(value).replace("\r", " ").replace("\n", " ")


def wrap_cell(text: str, width: int) -> List[str]:
    """
    Split `text` into consecutive chunks of at most `width` characters.

    An empty string is a single blank line; a string exactly `width` long is
    one line with no trailing empty chunk.
    """
    if not text:
        return [""]
    return [text[start : start + width] for start in range(0, len(text), width)]


def _field_value(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


class TableRenderer:
    """
    Render records as a bordered fixed-width table.

    Parameters
    ----------
    columns : sequence of Column
        Column layout, left to right.
    border_every_row : bool
        Draw a border line after every record (default). When False a
        single border closes the table.
    empty_message : str
        Notice rendered instead of a table when there are no records.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        border_every_row: bool = True,
        empty_message: str = NO_RECORDS,
    ) -> None:
        if not columns:
            raise ValueError("a table needs at least one column")
        self.columns = tuple(columns)
        self.border_every_row = border_every_row
        self.empty_message = empty_message

    @property
    def width(self) -> int:
        """Length of every rendered line."""
        return sum(column.width for column in self.columns) + 2 * len(self.columns) + 1

    def border(self) -> str:
        return "+" + "-" * (self.width - 2) + "+"

    def _line(self, cells: Sequence[str]) -> str:
        parts = [f"| {cell.ljust(column.width)}" for cell, column in zip(cells, self.columns)]
        return "".join(parts) + "|"

    def header(self) -> str:
        return self._line([column.label[: column.width] for column in self.columns])

    def row_lines(self, record: Any) -> List[str]:
        wrapped = [
            wrap_cell(format_value(_field_value(record, column.field)), column.width)
            for column in self.columns
        ]
        height = max(len(chunks) for chunks in wrapped)
        return [
            self._line([chunks[i] if i < len(chunks) else "" for chunks in wrapped])
            for i in range(height)
        ]

    def render_lines(self, records: Iterable[Any]) -> List[str]:
        rows = list(records)
        if not rows:
            return [self.empty_message]
        border = self.border()
        lines = [border, self.header(), border]
        for record in rows:
            lines.extend(self.row_lines(record))
            if self.border_every_row:
                lines.append(border)
        if not self.border_every_row:
            lines.append(border)
        return lines

    def render(self, records: Iterable[Any]) -> str:
        return "\n".join(self.render_lines(records))


def render_cards(
    records: Iterable[Any], columns: Sequence[Column], separator: str = "-" * 25
) -> str:
    """
    Render records as "Label: value" blocks, one block per record, without
    wrapping. Used for search results and detail listings.
    """
    pad = max((len(column.label) for column in columns), default=0)
    blocks: List[str] = []
    for record in records:
        lines = [
            f"{column.label.ljust(pad)}: {format_value(_field_value(record, column.field))}"
            for column in columns
        ]
        lines.append(separator)
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def print_table(
    renderer: TableRenderer,
    records: Iterable[Any],
    title: Optional[str] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Print a rendered table; header in cyan, the empty notice in red.
    """
    out = console or default_console
    if title:
        out.print(Text(f"\n===== {title} =====", style="bold green"))
    lines = renderer.render_lines(records)
    if len(lines) == 1:
        out.print(Text(lines[0], style="red"))
        return
    for index, line in enumerate(lines):
        style = "cyan" if index == 1 else ""
        out.print(Text(line, style=style), soft_wrap=True)


def print_cards(
    records: Iterable[Any],
    columns: Sequence[Column],
    empty_message: str = NO_RECORDS,
    console: Optional[Console] = None,
) -> None:
    out = console or default_console
    rows = list(records)
    if not rows:
        out.print(Text(empty_message, style="red"))
        return
    out.print(Text(render_cards(rows, columns)), soft_wrap=True)


PRODUCT_COLUMNS = (
    Column("Product Name", "name", 20),
    Column("Category", "category", 15),
    Column("Qty", "quantity", 8),
    Column("Price", "price", 10),
)

RESIDENT_COLUMNS = (
    Column("Name", "name", 25),
    Column("Address", "address", 30),
    Column("Contact", "contact", 15),
)

INCIDENT_COLUMNS = (
    Column("Type", "type", 15),
    Column("Location", "location", 20),
    Column("Date", "date", 12),
    Column("Time", "time", 8),
)

INCIDENT_DETAIL_COLUMNS = INCIDENT_COLUMNS + (Column("Description", "description", 40),)

ANNOUNCEMENT_COLUMNS = (
    Column("Title", "title", 25),
    Column("Date", "date", 12),
)

ANNOUNCEMENT_DETAIL_COLUMNS = ANNOUNCEMENT_COLUMNS + (Column("Content", "content", 40),)


__all__ = [
    "Column",
    "TableRenderer",
    "format_value",
    "wrap_cell",
    "render_cards",
    "print_table",
    "print_cards",
    "NO_RECORDS",
    "PRODUCT_COLUMNS",
    "RESIDENT_COLUMNS",
    "INCIDENT_COLUMNS",
    "INCIDENT_DETAIL_COLUMNS",
    "ANNOUNCEMENT_COLUMNS",
    "ANNOUNCEMENT_DETAIL_COLUMNS",
]
