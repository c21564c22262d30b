"""Explicit registry of the capabilities offered by a FileTreeService."""

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from .errors import UnknownCapabilityError
from .service import FileTreeService

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Static mapping from capability name to callable, fixed at construction."""

    def __init__(self, capabilities: Mapping[str, Callable[..., Any]]):
        self._capabilities = MappingProxyType(dict(capabilities))
        logger.debug("Registered capabilities: %s", ", ".join(self._capabilities))

    @classmethod
    def for_service(cls, service: FileTreeService) -> "CapabilityRegistry":
        return cls(
            {
                "list_repositories": service.list_repositories,
                "list_files": service.list_files_flat,
                "list_files_tree": service.list_files_tree,
                "list_files_in_directory": service.list_files_in_directory,
                "read_file": service.read_file_content,
            }
        )

    def names(self) -> list[str]:
        return sorted(self._capabilities)

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._capabilities[name]
        except KeyError:
            raise UnknownCapabilityError(name) from None

    def invoke(self, name: str, **kwargs: Any) -> Any:
        logger.debug("Invoking %s with %s", name, kwargs)
        return self.get(name)(**kwargs)
