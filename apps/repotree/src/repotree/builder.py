"""Rebuild a file tree from a flat entry list using only paths."""

import logging
from collections.abc import Iterable, Iterator

from .models import DirectoryNode, Entry, FileNode, Node
from .sorting import sort_nodes

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def parent_path(path: str) -> str | None:
    """
    Return the path of the directory containing ``path``.

    ``None`` means ``path`` is a root: it has no separator, or its only
    separator is the leading character.
    """
    index = path.rfind(PATH_SEPARATOR)
    if index <= 0:
        return None
    return path[:index]


def build_tree(entries: Iterable[Entry]) -> list[Node]:
    """
    Build a sorted forest from entries that each carry their full path.

    Input order does not matter. Entries whose parent directory is absent
    (for example because the traversal gave up on that subtree) are promoted
    to roots rather than dropped. The first entry wins when a path repeats.

    Args:
        entries: Decoded entries

    Returns:
        Root nodes, directories first, each directory holding its sorted children
    """
    index: dict[str, Entry] = {}
    for entry in entries:
        if entry.path in index:
            logger.warning("Duplicate entry for %s, keeping the first", entry.path)
            continue
        index[entry.path] = entry

    child_paths: dict[str, list[str]] = {
        path: [] for path, entry in index.items() if entry.is_directory
    }
    root_paths: list[str] = []
    orphans = 0

    for path in index:
        parent = parent_path(path)
        if parent is None:
            root_paths.append(path)
        elif parent in child_paths:
            child_paths[parent].append(path)
        else:
            if parent in index:
                logger.warning("Parent %s of %s is a file, promoting to root", parent, path)
            else:
                logger.warning("Parent %s of %s not found, promoting to root", parent, path)
            orphans += 1
            root_paths.append(path)

    # A child always has more separators than its parent, so deepest-first
    # guarantees every directory's children exist before it is built.
    built: dict[str, Node] = {}

    def node_for(path: str) -> Node:
        if path in built:
            return built[path]
        return FileNode.from_entry(index[path])

    for path in sorted(child_paths, key=lambda p: p.count(PATH_SEPARATOR), reverse=True):
        children = sort_nodes(node_for(child) for child in child_paths[path])
        built[path] = DirectoryNode.from_entry(index[path], tuple(children))

    roots = sort_nodes(node_for(path) for path in root_paths)
    logger.info(
        "Built tree: %d roots from %d entries (%d orphans promoted)",
        len(roots),
        len(index),
        orphans,
    )
    return roots


def iter_nodes(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield every node of a forest in pre-order."""
    stack = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, DirectoryNode):
            stack.extend(reversed(node.children))


def flatten(nodes: Iterable[Node]) -> list[Entry]:
    """Turn a forest back into a pre-order entry list."""
    return [node.to_entry() for node in iter_nodes(nodes)]
