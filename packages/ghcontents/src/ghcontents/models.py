"""GitHub API data models."""

from typing import Literal

from pydantic import BaseModel


class GitHubContent(BaseModel):
    """GitHub content item (file, directory, symlink or submodule)."""

    name: str
    path: str
    sha: str | None = None
    size: int | None = None
    url: str | None = None
    html_url: str | None = None
    git_url: str | None = None
    download_url: str | None = None
    type: Literal["file", "dir", "symlink", "submodule"]
    content: str | None = None  # Base64 encoded content for files
    encoding: str | None = None  # Usually "base64" for files

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class GitHubFile(BaseModel):
    """GitHub file with decoded content."""

    name: str
    path: str
    sha: str | None = None
    size: int | None = None
    html_url: str | None = None
    content: str
    encoding: str = "utf-8"


class GitHubRepository(BaseModel):
    """Repository metadata as returned by the repos endpoints."""

    name: str
    full_name: str | None = None
    description: str | None = None
    html_url: str
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    private: bool = False
    default_branch: str | None = None
