"""
Local filesystem implementations of the file tree provider and file reader.

- LocalFileTreeProvider: Lists a configuration root as FileEntry records
- LocalFileReader: Reads UTF-8 documents without blocking the event loop
"""
import asyncio
from pathlib import Path
from typing import Iterable, List, Optional

from .protocols import FileEntry, FileReader, FileTreeProvider


DEFAULT_SKIP_DIRS = frozenset({'.git', 'node_modules', '__pycache__'})


class LocalFileTreeProvider(FileTreeProvider):
    """
    Walks a configuration root (typically ``~/.claude``) into a FileEntry tree.

    Entries are sorted by name within each directory so repeated listings of an
    unchanged tree are identical. Symlinked directories are not followed.
    """

    def __init__(self, root: Path, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS):
        """
        Args:
            root: Configuration root directory
            skip_dirs: Directory names that are never descended
        """
        self.root = Path(root).expanduser()
        self.skip_dirs = frozenset(skip_dirs)

        if not self.root.is_dir():
            raise ValueError(f"Configuration root does not exist: {self.root}")

    async def get_file_tree(self) -> List[FileEntry]:
        return await asyncio.to_thread(self.list_tree)

    def list_tree(self) -> List[FileEntry]:
        """Synchronous listing of the whole tree."""
        return self._list_dir(self.root)

    def _list_dir(self, directory: Path) -> List[FileEntry]:
        entries: List[FileEntry] = []
        for child in sorted(directory.iterdir(), key=lambda p: p.name):
            if child.is_dir() and not child.is_symlink():
                if child.name in self.skip_dirs:
                    continue
                entries.append(FileEntry(
                    name=child.name,
                    path=child.as_posix(),
                    file_type='directory',
                    children=self._list_dir(child),
                ))
            elif child.is_file():
                entries.append(FileEntry(name=child.name, path=child.as_posix(), file_type='file'))
        return entries


class LocalFileReader(FileReader):
    """Reads text files from disk in a worker thread."""

    def __init__(self, encoding: str = 'utf-8'):
        self.encoding = encoding

    async def read(self, path: str) -> Optional[str]:
        """
        Read a file's content.

        Raises:
            OSError: If the file cannot be opened
            UnicodeDecodeError: If the file is not valid text in ``encoding``
        """
        return await asyncio.to_thread(Path(path).expanduser().read_text, encoding=self.encoding)
