"""Listing sources: where protocol text comes from."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import httpx

from ghcontents import GitHubClient

from .errors import (
    AuthenticationError,
    ListingError,
    ListingTransportError,
    RateLimitError,
    RepositoryNotFoundError,
)
from .models import DIRECTORY, FILE, Entry, RepoSummary
from .protocol import encode_entries, encode_repo_summaries, is_encodable

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE = "N/A"


class ListingSource(Protocol):
    """Remote capabilities the core depends on."""

    def list_directory(self, repository: str, path: str = "") -> str:
        """Return the entries directly under ``path`` as protocol lines."""
        ...

    def read_file(self, repository: str, path: str) -> str:
        """Return the raw UTF-8 content of a file."""
        ...

    def list_repositories(self) -> str:
        """Return the owner's repositories as summary lines."""
        ...


def error_for_status(
    response: httpx.Response, repository: str | None, path: str | None
) -> ListingError:
    """Map a failed GitHub response onto the listing error taxonomy."""
    status = response.status_code
    location = f"{repository}/{path}" if path else f"{repository}"
    if status == 404:
        return RepositoryNotFoundError(f"Repository or path not found: {location}", repository, path)
    if status == 401:
        return AuthenticationError("Bad credentials: check the GitHub token", repository, path)
    if status in (403, 429):
        if status == 429 or response.headers.get("X-RateLimit-Remaining") == "0":
            return RateLimitError(f"GitHub API rate limit exceeded while listing {location}", repository, path)
        return AuthenticationError(f"Access forbidden to {location}", repository, path)
    return ListingTransportError(f"GitHub API error {status} for {location}", repository, path)


@contextmanager
def translate_errors(repository: str | None, path: str | None = None) -> Iterator[None]:
    """Re-raise httpx failures as ``ListingError`` subclasses."""
    try:
        yield
    except httpx.HTTPStatusError as e:
        raise error_for_status(e.response, repository, path) from e
    except httpx.RequestError as e:
        raise ListingTransportError(f"Network error contacting GitHub: {e}", repository, path) from e


class GitHubListingSource:
    """Listing source backed by the GitHub contents API."""

    def __init__(self, client: GitHubClient, owner: str, ref: str | None = None):
        """
        Initialize the source.

        Args:
            client: Configured GitHub client
            owner: Owner of the repositories to list
            ref: Branch/tag/commit (None for each repository's default branch)
        """
        self.client = client
        self.owner = owner
        self.ref = ref
        logger.debug("GitHub listing source for owner=%s ref=%s", owner, ref)

    def list_directory(self, repository: str, path: str = "") -> str:
        with translate_errors(repository, path):
            contents = self.client.get_contents(self.owner, repository, path, self.ref)

        entries: list[Entry] = []
        for item in contents:
            entry = Entry(
                kind=DIRECTORY if item.is_dir else FILE,
                name=item.name,
                path=item.path,
                size=None if item.is_dir else item.size,
            )
            if not is_encodable(entry):
                logger.warning("Skipping %s: name cannot be written as a listing line", entry.path)
                continue
            entries.append(entry)

        logger.info("Listed %d items in %s/%s", len(entries), repository, path or "<root>")
        return encode_entries(entries)

    def read_file(self, repository: str, path: str) -> str:
        with translate_errors(repository, path):
            try:
                file = self.client.get_file_content(self.owner, repository, path, self.ref)
            except ValueError as e:
                raise ListingError(str(e), repository, path) from e
        return file.content

    def list_repositories(self) -> str:
        with translate_errors(self.owner):
            repositories = self.client.list_repositories(self.owner)

        summaries = [
            RepoSummary(
                name=repo.name,
                # Summary lines cannot carry line breaks
                description=" ".join((repo.description or "").split()),
                url=repo.html_url,
                language=repo.language or UNKNOWN_LANGUAGE,
                stars=repo.stargazers_count,
                forks=repo.forks_count,
                is_private=repo.private,
            )
            for repo in repositories
        ]
        logger.info("Listed %d repositories of %s", len(summaries), self.owner)
        return encode_repo_summaries(summaries)
