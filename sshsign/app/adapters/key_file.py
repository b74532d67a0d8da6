"""Local private key file adapter implementing KeyStorePort."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import SecretStr

from sshsign.app.ports.key_store import KeyPair, KeyStorePort
from sshsign.errors import UpstreamKeyRetrievalError

logger = logging.getLogger(__name__)


class FileKeyStoreAdapter(KeyStorePort):
    """Reads a private key (and its ``.pub`` sibling, if any) from disk."""

    def __init__(self, *, passphrase: str | None = None) -> None:
        self._passphrase = passphrase

    def fetch(self, key_id: str) -> KeyPair:
        path = Path(key_id).expanduser()
        try:
            private_key = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise UpstreamKeyRetrievalError(f"unable to read key file {path}: {exc}") from exc

        public_path = path.with_name(path.name + ".pub")
        public_key = None
        if public_path.is_file():
            public_key = public_path.read_text(encoding="utf-8").strip() or None

        logger.debug("Loaded private key from %s", path)
        return KeyPair(
            private_key=SecretStr(private_key),
            public_key=public_key,
            passphrase=SecretStr(self._passphrase) if self._passphrase else None,
        )
