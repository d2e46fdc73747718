"""Working-tree accessors: the files a repository checks out into."""

from abc import ABC, abstractmethod
from pathlib import Path

from .errors import InvalidFileName


class WorkTree(ABC):
    """Flat working directory of named files holding bytes."""

    @abstractmethod
    def read(self, name: str) -> bytes:
        """Return the bytes of ``name``; raises FileNotFoundError if absent."""

    @abstractmethod
    def write(self, name: str, data: bytes) -> None:
        """Create or overwrite ``name``."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove ``name`` if present."""

    @abstractmethod
    def list_files(self) -> list[str]:
        """Sorted names of the plain files in the tree."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if ``name`` is a file in the tree."""


class MemoryTree(WorkTree):
    """A dict-backed working tree."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})

    def read(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError:
            raise FileNotFoundError(name) from None

    def write(self, name: str, data: bytes) -> None:
        if not isinstance(data, bytes):
            raise TypeError(f"Expected bytes, got {type(data).__name__}")
        self.files[name] = data

    def delete(self, name: str) -> None:
        self.files.pop(name, None)

    def list_files(self) -> list[str]:
        return sorted(self.files)

    def exists(self, name: str) -> bool:
        return name in self.files


class DirectoryTree(WorkTree):
    """The plain files directly inside a directory on disk.

    Subdirectories (including the repository metadata directory) are
    never listed, read or touched.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise InvalidFileName()
        return self.root / name

    def read(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def write(self, name: str, data: bytes) -> None:
        self._path(name).write_bytes(data)

    def delete(self, name: str) -> None:
        path = self._path(name)
        if path.is_file():
            path.unlink()

    def list_files(self) -> list[str]:
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()
