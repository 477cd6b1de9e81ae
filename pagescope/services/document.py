"""A small, read-only query surface over a parsed HTML tree.

Extraction passes only ever talk to :class:`Document` and :class:`Node`, so
they never depend on BeautifulSoup's object shape directly.  The whole API is
CSS selection, text content, and attribute lookup returning ``None`` for
missing attributes.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag


class Node:
    """One element of a :class:`Document`."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name

    def text(self) -> str:
        """Concatenated text of the element and all of its descendants."""
        return self._tag.get_text()

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return None
        # Multi-valued attributes (rel, class, …) come back from bs4 as lists
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def has_attr(self, name: str) -> bool:
        return self._tag.has_attr(name)

    def select_one(self, selector: str) -> Optional["Node"]:
        found = self._tag.select_one(selector)
        return Node(found) if found is not None else None

    def __repr__(self) -> str:
        return f"<Node {self.name}>"


class Document:
    """A parsed HTML page scoped to a single extraction call."""

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html or "", "lxml")

    def select(self, selector: str) -> List[Node]:
        """Return every element matching *selector*, in document order."""
        return [Node(tag) for tag in self._soup.select(selector)]

    def select_one(self, selector: str) -> Optional[Node]:
        found = self._soup.select_one(selector)
        return Node(found) if found is not None else None

    def first_text(self, selector: str) -> Optional[str]:
        node = self.select_one(selector)
        return node.text() if node is not None else None

    def first_attr(self, selector: str, name: str) -> Optional[str]:
        """Attribute *name* of the first element matching *selector*."""
        node = self.select_one(selector)
        return node.attr(name) if node is not None else None

    def count(self, selector: str) -> int:
        return len(self._soup.select(selector))
