"""Port interfaces for the ssh-sign application layer.

These protocol interfaces define contracts for adapters.
Services depend on these ports, never on concrete implementations.
"""

__all__ = [
    "KeyPair",
    "KeyStorePort",
    "StoragePort",
]

from sshsign.app.ports.key_store import KeyPair, KeyStorePort
from sshsign.app.ports.storage import StoragePort
