"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .keeper_vault import KeeperVaultAdapter
from .key_file import FileKeyStoreAdapter
from .storage import FileSystemStorageAdapter

__all__ = [
    "FileKeyStoreAdapter",
    "FileSystemStorageAdapter",
    "KeeperVaultAdapter",
]
