"""Importer anchor search over a generic markup tree.

The walk only relies on elements exposing a tag name, attributes, children
and text, so it works for any parser that can be adapted to ``MarkupElement``.
"""
import re
from typing import Iterable, Iterator, Optional, Protocol

from stalefinder.domain.errors import ImporterCountParseError, ImportersNotFoundError


IMPORTERS_MARKER = "?importers"

_COUNT_TOKEN = re.compile(r"[0-9]+")


class MarkupElement(Protocol):
    """Anything with a tag, attributes, children and text content."""

    @property
    def tag(self) -> Optional[str]:
        """Element name, or None for documents and text nodes."""
        ...

    def get_attribute(self, name: str) -> Optional[str]:
        ...

    def children(self) -> Iterable['MarkupElement']:
        ...

    def text(self) -> str:
        ...


def iter_depth_first(root: MarkupElement) -> Iterator[MarkupElement]:
    """Yield ``root`` and its descendants in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children())))


def is_importers_anchor(node: MarkupElement, marker: str = IMPORTERS_MARKER) -> bool:
    """True for ``<a>`` elements whose href contains the importers marker."""
    if node.tag != "a":
        return False
    href = node.get_attribute("href")
    return href is not None and marker in href


def parse_leading_count(text: str) -> int:
    """Parse the first whitespace-delimited token of ``text`` as a count.

    Raises:
        ImporterCountParseError: When the token is missing or not a non-negative integer
    """
    parts = text.split()
    if not parts:
        raise ImporterCountParseError("couldn't parse '': anchor has no text")
    token = parts[0]
    if not _COUNT_TOKEN.fullmatch(token):
        raise ImporterCountParseError(f"couldn't parse {token!r}: not a non-negative integer")
    return int(token)


def find_importer_count(root: MarkupElement, marker: str = IMPORTERS_MARKER) -> int:
    """Return the importer count advertised by the first qualifying anchor.

    Only a positive count is accepted; anchors advertising zero importers are
    skipped. If no positive count exists, the first unparseable anchor is
    reported, otherwise the anchor is considered missing.

    Raises:
        ImporterCountParseError: An importers anchor could not be parsed
        ImportersNotFoundError: No importers anchor with a positive count exists
    """
    first_error: Optional[ImporterCountParseError] = None

    for node in iter_depth_first(root):
        if not is_importers_anchor(node, marker):
            continue
        try:
            count = parse_leading_count(node.text())
        except ImporterCountParseError as e:
            if first_error is None:
                first_error = e
            continue
        if count > 0:
            return count

    if first_error is not None:
        raise first_error
    raise ImportersNotFoundError(f'didn\'t find <a href="{marker}">')
