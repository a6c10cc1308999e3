"""Folder-level script inheritance and tree traversal.

Postman runs a folder's test and pre-request scripts for every request
below it, so a rule must treat an ancestor folder's script as satisfying a
request's obligation. ``walk`` hands every node its inherited scope; it uses
an explicit stack so deeply nested folders never grow the call stack.
"""

import re
from dataclasses import dataclass
from typing import Iterator

from postman_linter.parser.base import Collection, Item
from postman_linter.paths import NodePath, ancestors


@dataclass(frozen=True)
class InheritedScripts:
    """Scripts of every ancestor folder, one entry per event, root first."""

    test_scripts: tuple[str, ...] = ()
    prerequest_scripts: tuple[str, ...] = ()

    def extend(self, folder: Item) -> "InheritedScripts":
        return InheritedScripts(
            self.test_scripts + tuple(folder.scripts("test")),
            self.prerequest_scripts + tuple(folder.scripts("prerequest")),
        )

    def has_pattern(self, pattern: re.Pattern) -> bool:
        return any(pattern.search(script) for script in self.test_scripts)

    def has_any(self, patterns: list[re.Pattern]) -> bool:
        return any(self.has_pattern(pattern) for pattern in patterns)

    def has_variable(self, name: str) -> bool:
        """Whether an ancestor pre-request script sets environment variable ``name``."""
        setter = re.compile(r"pm\.environment\.set\s*\(\s*['\"]" + re.escape(name) + r"['\"]")
        return any(setter.search(script) for script in self.prerequest_scripts)

    @property
    def has_tests(self) -> bool:
        return any(script.strip() for script in self.test_scripts)


@dataclass(frozen=True)
class NodeContext:
    """An item reached during traversal, with where it sits and what it inherits."""

    item: Item
    path: NodePath
    index: int
    scope: InheritedScripts

    def name(self, default: str | None = None) -> str:
        """Display name, ``Item-<n>`` when unnamed unless another default is given."""
        if default is None:
            default = f"Item-{self.index + 1}"
        return self.item.display_name(default)


def walk(collection: Collection) -> Iterator[NodeContext]:
    """Yield every folder and request in document (pre-)order."""
    stack: list[NodeContext] = []
    root_scope = InheritedScripts()
    for index in reversed(range(len(collection.children))):
        stack.append(NodeContext(collection.children[index], NodePath((index,)), index, root_scope))

    while stack:
        context = stack.pop()
        yield context
        children = context.item.children
        if not children:
            continue
        child_scope = context.scope.extend(context.item)
        for index in reversed(range(len(children))):
            stack.append(NodeContext(children[index], context.path.child(index), index, child_scope))


def iter_requests(collection: Collection) -> Iterator[NodeContext]:
    """Yield every request in document order."""
    return (context for context in walk(collection) if context.item.is_request)


def inherited(collection: Collection, path: NodePath | str) -> InheritedScripts | None:
    """Scripts inherited by the node at ``path`` from its ancestor folders.

    The node's own scripts are not included. None when the path does not
    resolve.
    """
    if isinstance(path, str):
        path = NodePath.parse(path)
        if path is None:
            return None
    chain = ancestors(collection, path)
    if chain is None:
        return None
    scope = InheritedScripts()
    for folder in chain:
        scope = scope.extend(folder)
    return scope
