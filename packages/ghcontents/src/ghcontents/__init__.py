"""GitHub contents API client utilities."""

from .client import GitHubClient, get_token
from .models import GitHubContent, GitHubFile, GitHubRepository

__all__ = ["GitHubClient", "GitHubContent", "GitHubFile", "GitHubRepository", "get_token"]
