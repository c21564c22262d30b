"""Tests for tree reconstruction from flat entries."""

import logging

import pytest
from pydantic import ValidationError

from repotree.builder import build_tree, flatten, iter_nodes, parent_path
from repotree.models import DIRECTORY, FILE, DirectoryNode, Entry, FileNode
from repotree.protocol import decode_entries


def entry(path, kind=FILE, size=None):
    return Entry(kind=kind, name=path.rsplit("/", 1)[-1], path=path, size=size)


def directory(path):
    return entry(path, kind=DIRECTORY)


def assert_parent_invariant(nodes, parent=None, ancestors=()):
    for node in nodes:
        assert node.path not in ancestors
        if parent is not None:
            assert parent_path(node.path) == parent.path
        if isinstance(node, DirectoryNode):
            assert_parent_invariant(node.children, node, ancestors + (node.path,))


def assert_ordering_invariant(nodes):
    kinds = [node.kind for node in nodes]
    assert kinds == sorted(kinds, key=lambda kind: kind != DIRECTORY)
    for kind in (DIRECTORY, FILE):
        names = [node.name for node in nodes if node.kind == kind]
        assert names == sorted(names)
    for node in nodes:
        if isinstance(node, DirectoryNode):
            assert_ordering_invariant(node.children)


class TestParentPath:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("README.md", None),
            ("/README.md", None),
            ("src/App.java", "src"),
            ("a/b/c.txt", "a/b"),
        ],
    )
    def test_parent_path(self, path, expected):
        assert parent_path(path) == expected


class TestBuildTree:
    """Tests for build_tree."""

    def test_two_roots_with_file_child(self):
        nodes = build_tree(
            decode_entries(
                "directory|src|src|0\n"
                "file|App.java|src/App.java|1200\n"
                "directory|lib|lib|0\n"
            )
        )
        assert [n.name for n in nodes] == ["lib", "src"]
        lib, src = nodes
        assert lib.children == ()
        (app,) = src.children
        assert isinstance(app, FileNode)
        assert app.name == "App.java"
        assert app.size == 1200

    def test_dangling_parent_promotes_orphan(self, caplog):
        with caplog.at_level(logging.WARNING, logger="repotree.builder"):
            nodes = build_tree(decode_entries("file|x.txt|a/b/x.txt|10\n"))
        assert len(nodes) == 1
        assert nodes[0].name == "x.txt"
        assert nodes[0].path == "a/b/x.txt"
        assert "not found" in caplog.text

    def test_malformed_line_is_skipped(self):
        nodes = build_tree(decode_entries("bogus\nfile|r.md|r.md|5\n"))
        assert nodes == [FileNode(name="r.md", path="r.md", size=5)]

    def test_empty_input(self):
        assert build_tree([]) == []
        assert build_tree(decode_entries("")) == []

    def test_children_distinguish_files_from_empty_directories(self):
        nodes = build_tree([directory("empty"), entry("file.txt")])
        empty, file = nodes
        assert empty.children == ()
        assert empty.children is not None
        assert file.children is None

    def test_nested_tree_invariants(self):
        entries = [
            directory("src"),
            directory("src/main"),
            entry("src/main/Main.java", size=3),
            entry("src/main/Abc.java", size=1),
            directory("src/main/util"),
            entry("src/App.java"),
            entry("README.md"),
            directory("docs"),
            entry("docs/index.md"),
            entry("Zeta.txt"),
        ]
        nodes = build_tree(entries)
        assert_parent_invariant(nodes)
        assert_ordering_invariant(nodes)
        assert [n.path for n in iter_nodes(nodes)] == [
            "docs",
            "docs/index.md",
            "src",
            "src/main",
            "src/main/util",
            "src/main/Abc.java",
            "src/main/Main.java",
            "src/App.java",
            "README.md",
            "Zeta.txt",
        ]

    def test_input_order_does_not_matter(self):
        entries = [
            directory("src"),
            entry("src/App.java", size=2),
            directory("src/main"),
            entry("src/main/Main.java"),
            entry("README.md"),
        ]
        assert build_tree(entries) == build_tree(list(reversed(entries)))

    def test_orphaned_directory_keeps_its_children(self):
        nodes = build_tree([directory("a/b"), entry("a/b/c.txt")])
        (b,) = nodes
        assert b.path == "a/b"
        assert [c.path for c in b.children] == ["a/b/c.txt"]

    def test_file_parent_promotes_child(self, caplog):
        with caplog.at_level(logging.WARNING, logger="repotree.builder"):
            nodes = build_tree([entry("a"), entry("a/b.txt")])
        assert sorted(n.path for n in nodes) == ["a", "a/b.txt"]
        assert "is a file" in caplog.text

    def test_duplicate_path_keeps_first(self):
        nodes = build_tree([entry("a.txt", size=1), entry("a.txt", size=2)])
        assert nodes == [FileNode(name="a.txt", path="a.txt", size=1)]

    def test_nodes_are_immutable(self):
        (node,) = build_tree([directory("src")])
        with pytest.raises(ValidationError):
            node.name = "other"

    def test_count_files(self):
        nodes = build_tree([directory("src"), entry("src/a"), entry("src/b"), directory("src/c"), entry("d")])
        assert sum(n.count_files() for n in nodes) == 3


class TestFlatten:
    def test_flatten_is_pre_order(self):
        entries = [directory("src"), entry("src/App.java", size=5), entry("README.md")]
        assert flatten(build_tree(entries)) == entries

    def test_flatten_rebuilds_same_tree(self):
        nodes = build_tree([directory("b"), entry("b/x"), directory("a"), entry("z")])
        assert build_tree(flatten(nodes)) == nodes
