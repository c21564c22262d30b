"""Traversal of a remote repository, one listing call per directory."""

import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from .errors import ListingError
from .models import Entry
from .protocol import decode_entries, encode_entries
from .source import ListingSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_ENTRIES = 10_000

# Returns the children of a directory entry at the given depth, or None
# when the directory is not expanded.
Expander = Callable[[Entry, int], list[Entry] | None]


@dataclass(frozen=True)
class TraversalLimits:
    """Bounds for a full walk.

    A directory nested ``max_depth`` levels below the root is still emitted
    but not listed. At most ``max_entries`` entries are emitted.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_entries: int = DEFAULT_MAX_ENTRIES

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {self.max_entries}")


@dataclass
class TraversalResult:
    """Pre-order entries of a walk plus what was left out."""

    entries: list[Entry] = field(default_factory=list)
    truncated: bool = False
    cancelled: bool = False
    failed_paths: list[str] = field(default_factory=list)
    listing_calls: int = 0


def normalize_path(path: str | None) -> str:
    """Strip whitespace and surrounding separators; ``None`` means the root."""
    if not path:
        return ""
    return path.strip().strip("/")


class TraversalDriver:
    """Issues listing calls against a source, either one level or the whole tree."""

    def __init__(
        self,
        source: ListingSource,
        limits: TraversalLimits | None = None,
        concurrency: int = 1,
        cancel_event: threading.Event | None = None,
    ):
        """
        Initialize the driver.

        Args:
            source: Listing source to call
            limits: Depth and size bounds for full walks
            concurrency: Number of sibling listings fetched in parallel (1 = sequential)
            cancel_event: When set, no further listing calls are issued
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.source = source
        self.limits = limits or TraversalLimits()
        self.concurrency = concurrency
        self.cancel_event = cancel_event

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def list_level(self, repository: str, path: str = "") -> list[Entry]:
        """
        List a single directory.

        Errors from the source propagate to the caller.
        """
        path = normalize_path(path)
        logger.debug("Listing %s/%s", repository, path or "<root>")
        return decode_entries(self.source.list_directory(repository, path))

    def _list_subtree(self, repository: str, path: str) -> list[Entry] | None:
        try:
            return self.list_level(repository, path)
        except ListingError as e:
            logger.warning("Skipping subtree %s/%s: %s", repository, path, e)
            return None

    def walk(self, repository: str) -> TraversalResult:
        """
        Walk the whole repository depth-first.

        Every directory entry is emitted before its descendants. A failing
        subdirectory is skipped and recorded in ``failed_paths``; a failing
        root listing raises.

        Args:
            repository: Repository name

        Returns:
            TraversalResult with entries in pre-order
        """
        logger.info(
            "Walking %s (max_depth=%d, max_entries=%d, concurrency=%d)",
            repository,
            self.limits.max_depth,
            self.limits.max_entries,
            self.concurrency,
        )
        result = TraversalResult()
        if self._cancelled():
            result.cancelled = True
            return result

        root_entries = self.list_level(repository)
        result.listing_calls = 1

        if self.concurrency > 1:
            expand = self._prefetch_levels(repository, root_entries, result)
        else:
            expand = self._sequential_expander(repository, result)
        self._emit(root_entries, expand, result)

        logger.info(
            "Walked %s: %d entries, %d listing calls, %d failed, truncated=%s",
            repository,
            len(result.entries),
            result.listing_calls,
            len(result.failed_paths),
            result.truncated,
        )
        return result

    def walk_text(self, repository: str) -> str:
        """Walk the repository and encode the result as one listing response."""
        return encode_entries(self.walk(repository).entries)

    def _emit(self, root_entries: list[Entry], expand: Expander, result: TraversalResult) -> None:
        stack: list[tuple[Iterator[Entry], int]] = [(iter(root_entries), 1)]
        while stack:
            iterator, depth = stack[-1]
            entry = next(iterator, None)
            if entry is None:
                stack.pop()
                continue

            if len(result.entries) >= self.limits.max_entries:
                logger.warning("Entry limit %d reached, truncating", self.limits.max_entries)
                result.truncated = True
                return
            result.entries.append(entry)

            if not entry.is_directory:
                continue
            if depth > self.limits.max_depth:
                logger.debug("Depth limit reached at %s", entry.path)
                result.truncated = True
                continue

            children = expand(entry, depth)
            if children:
                stack.append((iter(children), depth + 1))

    def _sequential_expander(self, repository: str, result: TraversalResult) -> Expander:
        def expand(entry: Entry, depth: int) -> list[Entry] | None:
            if self._cancelled():
                result.cancelled = True
                return None
            result.listing_calls += 1
            children = self._list_subtree(repository, entry.path)
            if children is None:
                result.failed_paths.append(entry.path)
            return children

        return expand

    def _prefetch_levels(
        self, repository: str, root_entries: list[Entry], result: TraversalResult
    ) -> Expander:
        """Fetch one depth level at a time with a bounded pool, then expand from the cache.

        Prefetching stops early on the depth and size bounds. Directories the
        pre-order emission still reaches are then listed on demand, so both
        modes emit the same entries.
        """
        listings: dict[str, list[Entry]] = {}
        frontier = [entry.path for entry in root_entries if entry.is_directory]
        depth = 1
        fetched = len(root_entries)

        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            while frontier:
                if depth > self.limits.max_depth or fetched >= self.limits.max_entries:
                    break
                if self._cancelled():
                    result.cancelled = True
                    break

                logger.debug("Fetching %d directories at depth %d", len(frontier), depth)
                futures = [
                    pool.submit(self._list_subtree, repository, path) for path in frontier
                ]
                result.listing_calls += len(futures)

                next_frontier: list[str] = []
                for path, future in zip(frontier, futures):
                    children = future.result()
                    if children is None:
                        result.failed_paths.append(path)
                        continue
                    listings[path] = children
                    fetched += len(children)
                    next_frontier.extend(child.path for child in children if child.is_directory)

                frontier = next_frontier
                depth += 1

        failed = set(result.failed_paths)
        fetch = self._sequential_expander(repository, result)

        def expand(entry: Entry, depth: int) -> list[Entry] | None:
            if entry.path in listings:
                return listings[entry.path]
            if entry.path in failed:
                return None
            return fetch(entry, depth)

        return expand
