"""
Core protocols defining the interfaces for graph extraction components.
"""
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Protocol

from depgraph.types import ReferenceMatch


FileType = Literal['file', 'directory']


@dataclass(frozen=True)
class FileEntry:
    """One entry of a recursive file listing."""
    name: str
    path: str
    file_type: FileType
    children: List['FileEntry'] = field(default_factory=list)


class FileTreeProvider(Protocol):
    """Lists the configuration root as a tree of FileEntry records."""

    async def get_file_tree(self) -> List[FileEntry]:
        """Returns the top-level entries under the configuration root."""
        ...


class FileReader(Protocol):
    """Reads document content by path."""

    async def read(self, path: str) -> Optional[str]:
        """Returns file content, or None when there is nothing to read. May raise."""
        ...


class NameNormalizer(Protocol):
    """Normalize raw reference names into comparable identifiers."""

    def normalize(self, name: str) -> str:
        ...


class ReferenceExtractor(Protocol):
    """Extract candidate references from document content."""

    def extract(self, content: str) -> List[ReferenceMatch]:
        """Returns references in discovery order, deduplicated by (type, name)."""
        ...
