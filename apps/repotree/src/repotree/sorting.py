"""Presentation order: directories first, then files, each by name.

Names are compared ordinally and case-sensitively, like the remote source.
"""

from collections.abc import Iterable

from .models import DIRECTORY, DirectoryNode, Entry, FileNode, Node


def sort_key(item: Entry | FileNode | DirectoryNode) -> tuple[bool, str]:
    return (item.kind != DIRECTORY, item.name)


def sort_entries(entries: Iterable[Entry]) -> list[Entry]:
    return sorted(entries, key=sort_key)


def sort_nodes(nodes: Iterable[Node]) -> list[Node]:
    return sorted(nodes, key=sort_key)


def sort_forest(nodes: Iterable[Node]) -> list[Node]:
    """Return a copy of ``nodes`` ordered at every level."""
    ordered: list[Node] = []
    for node in sort_nodes(nodes):
        if isinstance(node, DirectoryNode):
            node = node.model_copy(update={"children": tuple(sort_forest(node.children))})
        ordered.append(node)
    return ordered
