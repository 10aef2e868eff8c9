"""
Console rendering of device data.

Human output looks like::

    +-----------------------+------------+
    | Label                 | Value      |
    +-----------------------+------------+
    | Débit flux descendant | 15999 Kbps |
    | Débit flux montant    | 1021 Kbps  |
    +-----------------------+------------+

Script output is the same data joined with ``;`` and no quoting; CSV output
quotes every cell.
"""

from collections.abc import Mapping, Sequence
from enum import Enum

Row = dict[str, str]


class OutputStyle(Enum):
    HUMAN = "human"
    SCRIPT = "script"
    CSV = "csv"


def to_rows(data: Mapping | Sequence, key_header: str = "Label", value_header: str = "Value") -> list[Row]:
    """
    Normalise *data* to a list of rows.

    A flat mapping becomes one ``Label``/``Value`` row per entry; a
    sequence of mappings is kept as is.
    """
    if isinstance(data, Mapping):
        if all(isinstance(v, Mapping) for v in data.values()) and data:
            return [{k: str(v) for k, v in row.items()} for row in data.values()]
        return [{key_header: str(k), value_header: str(v)} for k, v in data.items()]
    return [{k: str(v) for k, v in row.items()} for row in data]


def _columns(rows: list[Row]) -> list[str]:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def draw_text_table(data: Mapping | Sequence, newline: str = "\n") -> str:
    """Render *data* as a box table; column width fits its widest cell."""
    rows = to_rows(data)
    if not rows:
        return ""
    columns = _columns(rows)
    widths = {
        col: max([len(col)] + [len(row.get(col, "")) for row in rows])
        for col in columns
    }

    bar = "+" + "+".join("-" * (widths[col] + 2) for col in columns) + "+"
    header = "|" + "|".join(f" {col.ljust(widths[col])} " for col in columns) + "|"
    lines = [bar, header, bar]
    for row in rows:
        lines.append(
            "|" + "|".join(f" {row.get(col, '').ljust(widths[col])} " for col in columns) + "|"
        )
    lines.append(bar)
    return newline.join(lines)


def table_to_csv(
    data: Mapping | Sequence,
    enclosure: str = '"',
    separator: str = ";",
    newline: str = "\n",
) -> str:
    """Render *data* as delimited text, first line holding the column names."""
    rows = to_rows(data)
    if not rows:
        return ""
    columns = _columns(rows)

    def _cell(text: str) -> str:
        if enclosure:
            text = text.replace(enclosure, enclosure * 2)
        return f"{enclosure}{text}{enclosure}"

    lines = [separator.join(_cell(col) for col in columns)]
    for row in rows:
        lines.append(separator.join(_cell(row.get(col, "")) for col in columns))
    return newline.join(lines)


class DataFormatter:
    """Formats tables and scalar values in the chosen :class:`OutputStyle`."""

    def __init__(self, style: OutputStyle = OutputStyle.HUMAN, separator: str = ";", newline: str = "\n") -> None:
        self.style = style
        self.separator = separator
        self.newline = newline

    def format(self, data, label: str | None = None) -> str:
        output = f"[ {label} ]{self.newline}" if label else ""
        if isinstance(data, (Mapping, list, tuple)):
            if self.style is OutputStyle.HUMAN:
                output += draw_text_table(data, self.newline)
            elif self.style is OutputStyle.SCRIPT:
                output += table_to_csv(data, "", self.separator, self.newline)
            else:
                output += table_to_csv(data, '"', self.separator, self.newline)
        else:
            output += str(data)
        return output
