"""Exceptions raised by repotree."""


class RepoTreeError(Exception):
    """Base class for all repotree errors."""


class ProtocolError(RepoTreeError, ValueError):
    """A value cannot be written in the line protocol."""


class ListingError(RepoTreeError):
    """A listing or read call against the remote source failed."""

    def __init__(self, message: str, repository: str | None = None, path: str | None = None):
        super().__init__(message)
        self.repository = repository
        self.path = path


class RepositoryNotFoundError(ListingError):
    """Repository or path does not exist (or is invisible to the token)."""


class AuthenticationError(ListingError):
    """Bad credentials or insufficient permissions."""


class RateLimitError(ListingError):
    """The remote API rate limit is exhausted."""


class ListingTransportError(ListingError):
    """Network failure or unexpected response status."""


class UnknownCapabilityError(KeyError):
    """No capability is registered under the requested name."""
