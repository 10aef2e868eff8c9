"""
Table extraction.

Two shapes are produced from device pages:

* **key/value tables** – each row holds a ``<th>`` label and a ``<td>``
  value; returned as an ordered ``dict``.
* **headered tables** – column names come from ``<thead>``, data from
  ``<tbody>`` rows; returned as a list of ordered ``dict`` rows.  Cells whose
  text is empty fall back to the ``alt`` text of an image inside them
  (the GUI shows several states as icons only).
"""

from collections.abc import Iterator

from bs4 import Tag

from .html_parser import normalize_text, parse_html, select_table

KeyValueTable = dict[str, str]
HeaderedTable = list[dict[str, str]]

_SECTIONS = ("thead", "tbody", "tfoot")


def _child_tags(node: Tag, name: str | tuple[str, ...]) -> list[Tag]:
    return node.find_all(name, recursive=False)


def _direct_rows(table: Tag) -> Iterator[Tag]:
    """Rows that belong to *table* itself, not to nested tables."""
    for child in table.children:
        if not isinstance(child, Tag):
            continue
        if child.name == "tr":
            yield child
        elif child.name in _SECTIONS:
            yield from _child_tags(child, "tr")


def _synthetic_column(index: int) -> str:
    return f"{{Column {index}}}"


def key_value_table(html: str, selector: str) -> KeyValueTable:
    """
    Extract label/value pairs from the table at *selector*.

    Within each row the first ``<th>`` is the label and the first ``<td>``
    the value.  Rows lacking either (or where either is blank) are skipped.
    """
    table = select_table(parse_html(html), selector)
    data: KeyValueTable = {}
    for row in _direct_rows(table):
        th = row.find("th", recursive=False)
        td = row.find("td", recursive=False)
        if th is None or td is None:
            continue
        label = normalize_text(th.get_text())
        value = normalize_text(td.get_text())
        if label and value:
            data[label] = value
    return data


def _cell_value(cell: Tag) -> str:
    text = normalize_text(cell.get_text())
    if text:
        return text
    for img in cell.find_all("img"):
        alt = normalize_text(img.get("alt") or "")
        if alt:
            return alt
    return ""


def headered_table(html: str, selector: str) -> HeaderedTable:
    """
    Extract rows of the table at *selector*, keyed by its header cells.

    Data cells past the last header get the synthetic name
    ``{Column <index>}``.
    """
    table = select_table(parse_html(html), selector)

    columns: list[str] = []
    for thead in _child_tags(table, "thead"):
        for tr in _child_tags(thead, "tr"):
            columns.extend(normalize_text(th.get_text()) for th in _child_tags(tr, "th"))

    rows: HeaderedTable = []
    for tbody in _child_tags(table, "tbody"):
        for tr in _child_tags(tbody, "tr"):
            row: dict[str, str] = {}
            for index, cell in enumerate(_child_tags(tr, "td")):
                name = columns[index] if index < len(columns) else _synthetic_column(index)
                row[name] = _cell_value(cell)
            if row:     # sub-header or spacer line
                rows.append(row)
    return rows
