"""Filesystem-backed storage port implementation."""

from __future__ import annotations

import os
import stat
from pathlib import Path

from sshsign.app.ports import StoragePort


class FileSystemStorageAdapter(StoragePort):
    """Adapter that performs direct filesystem operations."""

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def file_mode(self, path: Path) -> int:
        return stat.S_IMODE(Path(path).stat().st_mode)

    def write_bytes(self, path: Path, content: bytes, *, mode: int = 0o644) -> None:
        destination = Path(path)
        destination.parent.mkdir(parents=True, exist_ok=True)

        fd = os.open(destination, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        try:
            os.write(fd, content)
        finally:
            os.close(fd)

        try:
            os.chmod(destination, mode)
        except PermissionError:
            # Windows may not support POSIX-style chmod; best effort only.
            pass
