"""Materialize remote repository listings as file trees."""

from .builder import build_tree, flatten, iter_nodes, parent_path
from .errors import (
    AuthenticationError,
    ListingError,
    ListingTransportError,
    ProtocolError,
    RateLimitError,
    RepoTreeError,
    RepositoryNotFoundError,
    UnknownCapabilityError,
)
from .models import (
    DirectoryNode,
    Entry,
    FileListing,
    FileNode,
    FileTree,
    Node,
    RepoSummary,
    RepositoryList,
)
from .protocol import (
    decode_entries,
    decode_repo_summaries,
    encode_entries,
    encode_repo_summaries,
)
from .registry import CapabilityRegistry
from .service import FileTreeService
from .sorting import sort_entries, sort_forest, sort_nodes
from .source import GitHubListingSource, ListingSource
from .traversal import TraversalDriver, TraversalLimits, TraversalResult

__all__ = [
    "AuthenticationError",
    "CapabilityRegistry",
    "DirectoryNode",
    "Entry",
    "FileListing",
    "FileNode",
    "FileTree",
    "FileTreeService",
    "GitHubListingSource",
    "ListingError",
    "ListingSource",
    "ListingTransportError",
    "Node",
    "ProtocolError",
    "RateLimitError",
    "RepoSummary",
    "RepoTreeError",
    "RepositoryList",
    "RepositoryNotFoundError",
    "TraversalDriver",
    "TraversalLimits",
    "TraversalResult",
    "UnknownCapabilityError",
    "build_tree",
    "decode_entries",
    "decode_repo_summaries",
    "encode_entries",
    "encode_repo_summaries",
    "flatten",
    "iter_nodes",
    "parent_path",
    "sort_entries",
    "sort_forest",
    "sort_nodes",
]
