"""Stable addresses for nodes of a collection tree.

A path is a sequence of ``item`` indices from the root, optionally followed
by a field tail naming a location inside the addressed node::

    /item[0]/item[2]               second-level item
    /item[0]/item[2]/request/url   the URL of that item's request
    /info/description              a field of the root
    /                              the root itself

Rules report issues with these paths and the fixer resolves the very same
paths to find what to mutate, so both go through ``resolve``.
"""

import re
from dataclasses import dataclass

from postman_linter.parser.base import Collection, Item

_ITEM_SEGMENT = re.compile(r"item\[(\d+)\]")


@dataclass(frozen=True)
class NodePath:
    items: tuple[int, ...] = ()
    field: str = ""

    def child(self, index: int) -> "NodePath":
        return NodePath(self.items + (index,))

    def at(self, field: str) -> "NodePath":
        """Address ``field`` inside the node this path points at."""
        return NodePath(self.items, field)

    @property
    def node(self) -> "NodePath":
        return NodePath(self.items)

    def __str__(self) -> str:
        text = "".join(f"/item[{index}]" for index in self.items)
        if self.field:
            text += f"/{self.field}"
        return text or "/"

    @classmethod
    def parse(cls, text: str) -> "NodePath | None":
        """Parse the string form; None when an item step is malformed."""
        items: list[int] = []
        tail: list[str] = []
        for segment in text.split("/"):
            if not segment:
                continue
            if not tail and segment.startswith("item"):
                match = _ITEM_SEGMENT.fullmatch(segment)
                if match is None:
                    return None
                items.append(int(match.group(1)))
            else:
                tail.append(segment)
        return cls(tuple(items), "/".join(tail))


def resolve(collection: Collection, path: NodePath | str) -> Collection | Item | None:
    """Return the node ``path`` points at, or None if it does not exist.

    The field tail does not take part in resolution.
    """
    if isinstance(path, str):
        path = NodePath.parse(path)
        if path is None:
            return None

    node: Collection | Item = collection
    for index in path.items:
        children = node.children
        if index >= len(children):
            return None
        node = children[index]
    return node


def ancestors(collection: Collection, path: NodePath) -> list[Item] | None:
    """Items strictly between the root and the node at ``path``."""
    node: Collection | Item = collection
    chain: list[Item] = []
    for index in path.items:
        children = node.children
        if index >= len(children):
            return None
        node = children[index]
        chain.append(node)
    return chain[:-1]
