"""
Plain-text table rendering of catalog data.

The rendering is a convenience for MCP clients that show raw text; callers
must treat any failure here as "no table" and keep the JSON envelope.
"""

import io
import json
from typing import Any, Dict, List, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

# Columns shown for catalog lists when the records carry them
PREFERRED_COLUMNS = ("id", "name", "type", "vcs", "slug", "version")
ID_ALIASES = ("id", "_id")
RENDER_WIDTH = 160


def _cell(value: Any) -> Text:
    # Text keeps brackets in catalog values from being read as markup
    if value is None:
        return Text("-")
    if isinstance(value, (dict, list)):
        return Text(json.dumps(value, separators=(",", ":")))
    return Text(str(value))


def _id_of(item: Dict[str, Any]) -> Any:
    for key in ID_ALIASES:
        if key in item:
            return item[key]
    return None


def select_columns(items: Sequence[Dict[str, Any]]) -> List[str]:
    """Pick the columns to show for a list of catalogs."""
    present = set()
    first = None
    for item in items:
        if isinstance(item, dict):
            present.update(item.keys())
            first = first if first is not None else item
    if "_id" in present:
        present.add("id")

    columns = [c for c in PREFERRED_COLUMNS if c in present]
    if columns:
        return columns
    return list(first.keys()) if first else []


def build_list_table(items: Sequence[Dict[str, Any]]) -> Table:
    """Return a rich table with one row per catalog."""
    columns = select_columns(items)
    table = Table(box=box.SIMPLE)
    for column in columns:
        table.add_column(column.upper(), overflow="fold")
    for item in items:
        if not isinstance(item, dict):
            raise TypeError(f"catalog entries must be objects, got {type(item).__name__}")
        row = []
        for column in columns:
            value = _id_of(item) if column == "id" else item.get(column)
            row.append(_cell(value))
        table.add_row(*row)
    return table


def build_detail_table(item: Dict[str, Any]) -> Table:
    """Return a rich field/value table for a single catalog."""
    table = Table(box=box.SIMPLE)
    table.add_column("FIELD", style="bold")
    table.add_column("VALUE", overflow="fold")
    for key, value in item.items():
        table.add_row(Text(str(key)), _cell(value))
    return table


def render_table(data: Any) -> str:
    """
    Render catalog data as plain text.

    Args:
        data: A catalog object or a list of catalog objects

    Returns:
        The rendered table without trailing whitespace

    Raises:
        TypeError: If the data is not a catalog or list of catalogs
    """
    if isinstance(data, list):
        table = build_list_table(data)
    elif isinstance(data, dict):
        table = build_detail_table(data)
    else:
        raise TypeError(f"cannot render {type(data).__name__} as a table")

    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=RENDER_WIDTH,
        color_system=None,
        force_terminal=False,
        no_color=True,
    )
    console.print(table)
    return buffer.getvalue().rstrip()
