"""Shared fixtures: an in-memory listing source."""

import threading
from collections.abc import Callable

import pytest

from repotree.errors import ListingError, RepositoryNotFoundError


class FakeSource:
    """Listing source serving canned protocol text per path."""

    def __init__(
        self,
        listings: dict[str, str] | None = None,
        failing: dict[str, ListingError] | None = None,
        files: dict[str, str] | None = None,
        repositories: str = "",
        on_call: Callable[[str], None] | None = None,
    ):
        self.listings = listings or {}
        self.failing = failing or {}
        self.files = files or {}
        self.repositories = repositories
        self.on_call = on_call
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def list_directory(self, repository: str, path: str = "") -> str:
        with self._lock:
            self.calls.append(path)
        if self.on_call is not None:
            self.on_call(path)
        if path in self.failing:
            raise self.failing[path]
        return self.listings.get(path, "")

    def read_file(self, repository: str, path: str) -> str:
        if path not in self.files:
            raise RepositoryNotFoundError(f"not found: {path}", repository, path)
        return self.files[path]

    def list_repositories(self) -> str:
        return self.repositories


SAMPLE_LISTINGS = {
    "": (
        "directory|src|src|0\n"
        "file|README.md|README.md|120\n"
        "directory|docs|docs|0\n"
    ),
    "src": (
        "directory|main|src/main|0\n"
        "file|App.java|src/App.java|1200\n"
    ),
    "src/main": "file|Main.java|src/main/Main.java|300\n",
    "docs": "",
}

SAMPLE_PREORDER = [
    "src",
    "src/main",
    "src/main/Main.java",
    "src/App.java",
    "README.md",
    "docs",
]


@pytest.fixture
def sample_source() -> FakeSource:
    return FakeSource(dict(SAMPLE_LISTINGS))
