"""Tolerant HTML parsing and text normalisation using BeautifulSoup."""

import re

from bs4 import BeautifulSoup, Tag

from ..errors import ExtractionError, ExtractionErrorKind, logged

_BS4_PARSER = "lxml"

_WS_RE = re.compile(r"\s+")
_TRIM_CHARS = " \xa0"    # space and non-breaking space


def parse_html(html: str) -> BeautifulSoup:
    """Parse *html* into a queryable tree; invalid markup is accepted."""
    return BeautifulSoup(html, _BS4_PARSER)


def trim(text: str) -> str:
    return text.strip(_TRIM_CHARS)


def normalize_text(text: str) -> str:
    """
    Drop line breaks, collapse whitespace runs to one space and trim
    spaces / non-breaking spaces at both ends.

    ``"a\\n  b"`` becomes ``"a b"``.
    """
    text = text.replace("\r\n", "").replace("\n", "")
    return trim(_WS_RE.sub(" ", text))


def select_node(root: BeautifulSoup | Tag, selector: str) -> Tag:
    """Return the first node matching *selector* or raise ``NOT_FOUND``."""
    node = root.select_one(selector)
    if node is None:
        raise logged(ExtractionError(
            f'Cannot find node at selector "{selector}"',
            ExtractionErrorKind.NOT_FOUND,
            selector,
        ))
    return node


def select_table(root: BeautifulSoup | Tag, selector: str) -> Tag:
    """Like :func:`select_node` but the node must be a ``<table>``."""
    node = root.select_one(selector)
    if node is None:
        raise logged(ExtractionError(
            f'Cannot find <table> node at selector "{selector}"',
            ExtractionErrorKind.NOT_FOUND,
            selector,
        ))
    if node.name != "table":
        raise logged(ExtractionError(
            f'Node at selector "{selector}" is <{node.name}>, not <table>',
            ExtractionErrorKind.WRONG_NODE_TYPE,
            selector,
        ))
    return node
