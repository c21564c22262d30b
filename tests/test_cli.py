"""Tests for the click CLI."""

import json

import pytest
from click.testing import CliRunner

from conftest import SAMPLE_LISTINGS, FakeSource
from repotree.cli import cli, render_tree
from repotree.config import Settings
from repotree.errors import RepositoryNotFoundError
from repotree.models import DirectoryNode, FileNode


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, args, source=None, settings=None):
    obj = {"settings": settings or Settings(owner="octo")}
    if source is not None:
        obj["source"] = source
    return runner.invoke(cli, args, obj=obj)


class TestTreeCommand:
    def test_renders_tree(self, runner, sample_source):
        result = invoke(runner, ["tree", "repo"], sample_source)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[:7] == [
            "repo/",
            "├── docs/",
            "├── src/",
            "│   ├── main/",
            "│   │   └── Main.java (300 bytes)",
            "│   └── App.java (1200 bytes)",
            "└── README.md (120 bytes)",
        ]
        assert "6 entries, 3 files" in result.output

    def test_json_output(self, runner, sample_source):
        result = invoke(runner, ["tree", "repo", "--json"], sample_source)
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["repository"] == "repo"
        assert [n["name"] for n in data["nodes"]] == ["docs", "src", "README.md"]

    def test_depth_option_truncates(self, runner, sample_source):
        result = invoke(runner, ["tree", "repo", "--max-depth", "0"], sample_source)
        assert result.exit_code == 0, result.output
        assert "truncated" in result.output
        assert sample_source.calls == [""]

    def test_failed_subtree_is_reported(self, runner):
        source = FakeSource(
            dict(SAMPLE_LISTINGS),
            failing={"docs": RepositoryNotFoundError("gone", "repo", "docs")},
        )
        result = invoke(runner, ["tree", "repo", "-j", "2"], source)
        assert result.exit_code == 0, result.output
        assert "Could not list: docs" in result.output

    def test_missing_repository_fails(self, runner):
        source = FakeSource(failing={"": RepositoryNotFoundError("Repository or path not found: nope", "nope")})
        result = invoke(runner, ["tree", "nope"], source)
        assert result.exit_code == 1
        assert "Repository or path not found: nope" in result.output

    def test_invalid_option_value(self, runner, sample_source):
        result = invoke(runner, ["tree", "repo", "--max-entries", "0"], sample_source)
        assert result.exit_code == 1


class TestOtherCommands:
    def test_ls_root(self, runner, sample_source):
        result = invoke(runner, ["ls", "repo"], sample_source)
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["docs/", "src/", "README.md  120"]

    def test_ls_directory_json(self, runner, sample_source):
        result = invoke(runner, ["ls", "repo", "src", "--json"], sample_source)
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["path"] == "src"
        assert [e["name"] for e in data["entries"]] == ["main", "App.java"]

    def test_repos(self, runner):
        source = FakeSource(repositories="repo1|A cool | test repo|http://x|Java|3|1|false\n")
        result = invoke(runner, ["repos"], source)
        assert result.exit_code == 0, result.output
        assert "repo1  [Java, public, ★3, forks 1]" in result.output
        assert "A cool | test repo" in result.output
        assert "1 repositories" in result.output

    def test_cat(self, runner):
        source = FakeSource(files={"README.md": "# Title\n"})
        result = invoke(runner, ["cat", "repo", "README.md"], source)
        assert result.exit_code == 0, result.output
        assert result.output == "# Title\n"

    def test_capabilities(self, runner, sample_source):
        result = invoke(runner, ["capabilities"], sample_source)
        assert result.exit_code == 0, result.output
        assert "list_files_tree" in result.output.splitlines()

    def test_owner_required(self, runner):
        result = invoke(runner, ["ls", "repo"], settings=Settings())
        assert result.exit_code == 2
        assert "owner" in result.output


class TestRenderTree:
    def test_render_nested(self):
        nodes = [
            DirectoryNode(
                name="a",
                path="a",
                children=(FileNode(name="x", path="a/x"), FileNode(name="y", path="a/y", size=1)),
            ),
            FileNode(name="b", path="b"),
        ]
        assert list(render_tree(nodes)) == [
            "├── a/",
            "│   ├── x",
            "│   └── y (1 bytes)",
            "└── b",
        ]

    def test_render_empty(self):
        assert list(render_tree([])) == []
