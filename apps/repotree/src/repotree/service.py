"""File tree service: the operations exposed to callers."""

import logging
import threading

from .builder import build_tree
from .models import FileListing, FileTree, RepositoryList
from .protocol import decode_repo_summaries
from .sorting import sort_entries
from .source import ListingSource
from .traversal import TraversalDriver, TraversalLimits, normalize_path

logger = logging.getLogger(__name__)


def _require_repository(repository: str) -> str:
    if not repository or not repository.strip():
        raise ValueError("Repository name must not be empty")
    return repository.strip()


class FileTreeService:
    """Lists repositories and materializes their file trees."""

    def __init__(
        self,
        source: ListingSource,
        limits: TraversalLimits | None = None,
        concurrency: int = 1,
    ):
        """
        Initialize the service.

        Args:
            source: Listing source (e.g. GitHubListingSource)
            limits: Bounds applied to full-tree walks
            concurrency: Parallel sibling listings during full-tree walks
        """
        self.source = source
        self.limits = limits or TraversalLimits()
        self.concurrency = concurrency

    def _driver(self, cancel_event: threading.Event | None = None) -> TraversalDriver:
        return TraversalDriver(
            self.source,
            limits=self.limits,
            concurrency=self.concurrency,
            cancel_event=cancel_event,
        )

    def list_repositories(self) -> RepositoryList:
        """List the owner's repositories."""
        logger.info("Listing repositories")
        repositories = decode_repo_summaries(self.source.list_repositories())
        logger.info("%d repositories parsed", len(repositories))
        return RepositoryList(total=len(repositories), repositories=repositories)

    def list_files_flat(self, repository: str, path: str = "") -> FileListing:
        """
        List one directory level, directories first.

        Args:
            repository: Repository name
            path: Directory path (empty for root)

        Returns:
            FileListing with sorted entries
        """
        repository = _require_repository(repository)
        path = normalize_path(path)
        logger.info("Listing files: %s path=%s", repository, path or "<root>")
        entries = sort_entries(self._driver().list_level(repository, path))
        return FileListing(repository=repository, path=path, entries=entries, total=len(entries))

    def list_files_in_directory(self, repository: str, path: str) -> FileListing:
        """List a directory on demand; a blank path lists the root."""
        if not normalize_path(path):
            logger.warning("Empty directory path, listing root of %s", repository)
        return self.list_files_flat(repository, path)

    def list_files_tree(
        self, repository: str, cancel_event: threading.Event | None = None
    ) -> FileTree:
        """
        Materialize the whole repository as a sorted tree.

        Subtree failures only shrink the tree (see ``failed_paths``); only a
        repository-level failure raises.

        Args:
            repository: Repository name
            cancel_event: Stops the walk early when set

        Returns:
            FileTree with root nodes
        """
        repository = _require_repository(repository)
        logger.info("Building file tree: %s", repository)
        result = self._driver(cancel_event).walk(repository)
        nodes = build_tree(result.entries)
        total_files = sum(node.count_files() for node in nodes)
        return FileTree(
            repository=repository,
            nodes=nodes,
            total_entries=len(result.entries),
            total_files=total_files,
            truncated=result.truncated,
            cancelled=result.cancelled,
            failed_paths=result.failed_paths,
        )

    def read_file_content(self, repository: str, path: str) -> str:
        """Read the raw content of a file."""
        repository = _require_repository(repository)
        path = normalize_path(path)
        if not path:
            raise ValueError("File path must not be empty")
        logger.info("Reading file: %s path=%s", repository, path)
        return self.source.read_file(repository, path)
