"""Signing service: fetch a key, sign payloads, write armored signatures."""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from sshsign.app.ports import KeyPair, KeyStorePort, StoragePort
from sshsign.sshsig import DEFAULT_HASH_ALGORITHM, sign_commit

logger = logging.getLogger(__name__)

SIGNATURE_SUFFIX = ".sig"


class SigningService:
    """Orchestrates commit signing.

    Key retrieval goes through a key store port and all file I/O through
    the storage port. Key material lives only for the duration of a call.
    """

    def __init__(
        self,
        key_store_resolver: Callable[[str], KeyStorePort],
        storage_port: StoragePort,
        *,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ):
        """Initialize signing service.

        Args:
            key_store_resolver: Returns the key store responsible for a key id
            storage_port: Filesystem operations port
            hash_algorithm: Digest used for the signed payload
        """
        self.resolve_key_store = key_store_resolver
        self.storage = storage_port
        self.hash_algorithm = hash_algorithm

    def fetch_key(self, key_id: str) -> KeyPair:
        return self.resolve_key_store(key_id).fetch(key_id)

    def _sign(self, key_pair: KeyPair, data: bytes) -> bytes:
        passphrase = key_pair.passphrase.get_secret_value() if key_pair.passphrase else None
        return sign_commit(
            key_pair.private_key.get_secret_value(),
            data,
            passphrase=passphrase,
            hash_algorithm=self.hash_algorithm,
        )

    def sign_bytes(self, key_id: str, data: bytes) -> bytes:
        """Sign ``data`` and return the armored signature."""
        return self._sign(self.fetch_key(key_id), data)

    def sign_files(self, key_id: str, paths: Sequence[Path]) -> list[Path]:
        """Sign each file, writing ``<file>.sig`` with the file's permission bits.

        Args:
            key_id: Key identifier passed to the key store
            paths: Payload files to sign

        Returns:
            Paths of the written signature files, in input order
        """
        key_pair = self.fetch_key(key_id)

        written: list[Path] = []
        for path in paths:
            path = Path(path)
            armored = self._sign(key_pair, self.storage.read_bytes(path))
            signature_path = path.with_name(path.name + SIGNATURE_SUFFIX)
            self.storage.write_bytes(signature_path, armored, mode=self.storage.file_mode(path))
            logger.debug("Wrote signature %s", signature_path)
            written.append(signature_path)
        return written
