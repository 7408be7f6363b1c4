"""
Addressable storage for advisory document files.

The storage root acts as a key-value store: file name -> file content.
DocumentStore makes that explicit so the index can be exercised against
MemoryStore in tests and against DirectoryStore on disk.

Design decisions:
- Stores move bytes only; parsing belongs to the documents package
- write_atomic either replaces the whole file or leaves the old one
- No locking: a single process is expected to own a storage root
"""
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Union

from documents import FILE_SUFFIX


logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Minimal file-like collection the index reads from and writes to."""

    @abstractmethod
    def list_names(self) -> List[str]:
        """Return the names of all advisory document files, sorted."""
        pass

    @abstractmethod
    def read(self, name: str) -> bytes:
        """
        Return the content of a document file.

        Raises:
            FileNotFoundError: If no file exists under ``name``
        """
        pass

    @abstractmethod
    def exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def write_atomic(self, name: str, data: bytes) -> None:
        """Replace (or create) ``name`` with ``data`` in a single step."""
        pass


class DirectoryStore(DocumentStore):
    """Document files kept flat in one directory on disk."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        if not self.root.is_dir():
            raise FileNotFoundError(f"Advisories directory not found: {self.root}")

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid document file name: {name!r}")
        return self.root / name

    def list_names(self) -> List[str]:
        return sorted(
            p.name for p in self.root.iterdir()
            if p.is_file() and p.name.endswith(FILE_SUFFIX)
        )

    def read(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def exists(self, name: str) -> bool:
        return self._path(name).exists()

    def write_atomic(self, name: str, data: bytes) -> None:
        """
        Write to a temporary file beside the target, then swap it in.

        The temporary file lives in the same directory so os.replace stays
        a rename on one filesystem. Any failure removes the temporary file
        and leaves the previous content untouched.
        """
        destination = self._path(name)
        fd, temp_name = tempfile.mkstemp(dir=self.root, prefix=f".{name}.", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, destination)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {len(data)} bytes to {destination}")

    def __repr__(self) -> str:
        return f"DirectoryStore({str(self.root)!r})"


class MemoryStore(DocumentStore):
    """In-memory store for tests."""

    def __init__(self, files: Dict[str, bytes] = None):
        self.files: Dict[str, bytes] = dict(files or {})

    def list_names(self) -> List[str]:
        return sorted(n for n in self.files if n.endswith(FILE_SUFFIX))

    def read(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError:
            raise FileNotFoundError(name) from None

    def exists(self, name: str) -> bool:
        return name in self.files

    def write_atomic(self, name: str, data: bytes) -> None:
        self.files[name] = bytes(data)

    def __repr__(self) -> str:
        return f"MemoryStore({len(self.files)} files)"
