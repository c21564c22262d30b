"""Repotree data models."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

EntryKind = Literal["file", "directory"]

FILE: EntryKind = "file"
DIRECTORY: EntryKind = "directory"


def file_extension(name: str) -> str | None:
    """Return the extension of ``name`` including the dot, ``None`` if it has none."""
    dot = name.rfind(".")
    if 0 < dot < len(name) - 1:
        return name[dot:]
    return None


class Entry(BaseModel):
    """One decoded listing line: a file or directory and its repository path."""

    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    name: str
    path: str
    size: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_name_and_size(self) -> "Entry":
        if self.name != self.path.rsplit("/", 1)[-1]:
            raise ValueError(f"name {self.name!r} is not the last segment of {self.path!r}")
        if self.kind == DIRECTORY and self.size is not None:
            raise ValueError(f"directory {self.path!r} cannot have a size")
        return self

    @property
    def is_directory(self) -> bool:
        return self.kind == DIRECTORY

    @property
    def extension(self) -> str | None:
        if self.is_directory:
            return None
        return file_extension(self.name)


class FileNode(BaseModel):
    """Leaf of a file tree."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = FILE
    name: str
    path: str
    size: int | None = Field(default=None, ge=0)
    children: None = None

    @classmethod
    def from_entry(cls, entry: Entry) -> "FileNode":
        return cls(name=entry.name, path=entry.path, size=entry.size)

    @property
    def extension(self) -> str | None:
        return file_extension(self.name)

    def to_entry(self) -> Entry:
        return Entry(kind=FILE, name=self.name, path=self.path, size=self.size)

    def count_files(self) -> int:
        return 1


class DirectoryNode(BaseModel):
    """Directory of a file tree with its finalized, sorted children."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["directory"] = DIRECTORY
    name: str
    path: str
    children: tuple["Node", ...] = ()

    @classmethod
    def from_entry(cls, entry: Entry, children: tuple["Node", ...] = ()) -> "DirectoryNode":
        return cls(name=entry.name, path=entry.path, children=children)

    def to_entry(self) -> Entry:
        return Entry(kind=DIRECTORY, name=self.name, path=self.path)

    def count_files(self) -> int:
        """Count files below this directory, recursively."""
        return sum(child.count_files() for child in self.children)


Node = Annotated[Union[FileNode, DirectoryNode], Field(discriminator="kind")]

DirectoryNode.model_rebuild()


class RepoSummary(BaseModel):
    """Repository summary line."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    url: str = ""
    language: str = ""
    stars: int = 0
    forks: int = 0
    is_private: bool = False


class FileListing(BaseModel):
    """Single-level listing of one directory."""

    repository: str
    path: str = ""
    entries: list[Entry] = Field(default_factory=list)
    total: int = 0


class FileTree(BaseModel):
    """Fully materialized repository tree."""

    repository: str
    nodes: list[Node] = Field(default_factory=list)
    total_entries: int = 0
    total_files: int = 0
    truncated: bool = False
    cancelled: bool = False
    failed_paths: list[str] = Field(default_factory=list)


class RepositoryList(BaseModel):
    """Repositories of the configured owner."""

    total: int = 0
    repositories: list[RepoSummary] = Field(default_factory=list)
