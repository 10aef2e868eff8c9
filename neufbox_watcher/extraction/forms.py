"""Snapshot of current form values, for read-modify-write submissions."""

from .html_parser import normalize_text, parse_html, select_node

FormSnapshot = dict[str, str]

_CHECKABLE_TYPES = frozenset({"radio", "checkbox"})


def form_snapshot(html: str, scope_selector: str) -> FormSnapshot:
    """
    Collect ``name -> value`` for every ``<input>`` and ``<select>`` found
    under the node at *scope_selector*, in document order.

    * radio / checkbox inputs count only when ``checked``;
    * other inputs contribute their ``value`` attribute (or ``""``);
    * selects contribute the value of their ``selected`` option.  When
      several options are marked, the last one wins, which is also what a
      browser submits for a single-choice select.
    """
    scope = select_node(parse_html(html), scope_selector)

    data: FormSnapshot = {}
    for node in scope.find_all(["input", "select"]):
        name = node.get("name")
        if not name:
            continue

        if node.name == "input":
            input_type = (node.get("type") or "text").lower()
            if input_type in _CHECKABLE_TYPES:
                if node.has_attr("checked"):
                    data[name] = node.get("value") or ""
            else:
                data[name] = node.get("value") or ""
            continue

        for option in node.find_all("option"):
            if option.has_attr("selected"):
                value = option.get("value")
                data[name] = value if value is not None else normalize_text(option.get_text())
    return data
