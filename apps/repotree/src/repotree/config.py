"""Settings loaded from the environment (and a .env file when present)."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .traversal import DEFAULT_MAX_DEPTH, DEFAULT_MAX_ENTRIES, TraversalLimits

logger = logging.getLogger(__name__)

ENV_PREFIX = "REPOTREE_"


class Settings(BaseModel):
    """Repotree settings."""

    owner: str | None = None
    ref: str | None = None
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, ge=1)
    concurrency: int = Field(default=1, ge=1)

    @property
    def limits(self) -> TraversalLimits:
        return TraversalLimits(max_depth=self.max_depth, max_entries=self.max_entries)


def load_settings(environ: dict[str, str] | None = None, dotenv: bool = True) -> Settings:
    """
    Build settings from ``REPOTREE_*`` variables.

    The owner falls back to ``GITHUB_USERNAME``. Unset variables keep their
    defaults; invalid values raise a pydantic ``ValidationError``.
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = dict(os.environ)

    values: dict[str, str] = {}
    for name in ("owner", "ref", "max_depth", "max_entries", "concurrency"):
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            values[name] = value
    if "owner" not in values and environ.get("GITHUB_USERNAME"):
        values["owner"] = environ["GITHUB_USERNAME"]

    settings = Settings(**values)
    logger.debug("Loaded settings: %s", settings)
    return settings
