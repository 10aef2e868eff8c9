"""
Extraction submodule – turns device HTML/XML into structured data.

* :mod:`.html_parser` – tolerant parsing, selector lookup, text normalisation
* :mod:`.status`      – single status indicator (``StatusValue``)
* :mod:`.tables`      – key/value and headered tables
* :mod:`.forms`       – current form values for re-submission
* :mod:`.ajax_xml`    – XML answers of AJAX endpoints
"""

from neufbox_watcher.extraction.forms import FormSnapshot, form_snapshot
from neufbox_watcher.extraction.html_parser import normalize_text, parse_html
from neufbox_watcher.extraction.status import StatusValue, status_as_string, status_at
from neufbox_watcher.extraction.tables import (
    HeaderedTable,
    KeyValueTable,
    headered_table,
    key_value_table,
)

__all__ = [
    "FormSnapshot",
    "HeaderedTable",
    "KeyValueTable",
    "StatusValue",
    "form_snapshot",
    "headered_table",
    "key_value_table",
    "normalize_text",
    "parse_html",
    "status_as_string",
    "status_at",
]
