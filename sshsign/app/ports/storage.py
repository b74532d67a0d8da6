"""Storage port interface for filesystem operations."""

from pathlib import Path
from typing import Protocol


class StoragePort(Protocol):
    """Port interface for storage operations.

    Abstracts filesystem I/O to enable testing and alternative backends.

    Side effects: Reads/writes files (offline).
    """

    def read_text(self, path: Path) -> str:
        """Read text file.

        Args:
            path: File path

        Returns:
            File contents as string
        """
        ...

    def read_bytes(self, path: Path) -> bytes:
        """Read binary file.

        Args:
            path: File path

        Returns:
            File contents
        """
        ...

    def file_mode(self, path: Path) -> int:
        """Return the permission bits of ``path``."""
        ...

    def write_bytes(self, path: Path, content: bytes, *, mode: int = 0o644) -> None:
        """Write binary file with the given permission bits.

        Args:
            path: File path
            content: Content to write
            mode: POSIX permission bits applied to the file
        """
        ...
