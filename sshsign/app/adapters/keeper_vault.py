"""Keeper Secrets Manager adapter implementing KeyStorePort."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from sshsign.app.ports.key_store import KeyPair, KeyStorePort
from sshsign.errors import UpstreamKeyRetrievalError

logger = logging.getLogger(__name__)


class KeeperVaultAdapter(KeyStorePort):
    """Fetches SSH key pairs stored as ``keyPair`` fields of vault records.

    ``key_id`` is the record UID, i.e. git's ``user.signingkey``.
    """

    KEY_PAIR_FIELD = "keyPair"
    PASSPHRASE_FIELD = "password"

    def __init__(self, *, config_path: Path | None = None, client: Any | None = None) -> None:
        self._config_path = config_path
        self._client = client

    def _create_client(self) -> Any:
        if self._config_path is None:
            raise UpstreamKeyRetrievalError("config file not found")

        try:
            # imported lazily to keep optional dependency
            from keeper_secrets_manager_core import SecretsManager
            from keeper_secrets_manager_core.storage import FileKeyValueStorage
        except ImportError as exc:
            raise UpstreamKeyRetrievalError(
                "The 'keeper-secrets-manager-core' package is required for vault keys. "
                "Install with `pip install git-ssh-sign[keeper]`."
            ) from exc

        return SecretsManager(config=FileKeyValueStorage(str(self._config_path)))

    def fetch(self, key_id: str) -> KeyPair:
        client = self._client if self._client is not None else self._create_client()

        logger.debug("Fetching record %s from Keeper Secrets Manager", key_id)
        try:
            records = client.get_secrets([key_id])
        except Exception as exc:  # noqa: BLE001 - SDK surfaces network/auth failures untyped
            raise UpstreamKeyRetrievalError(f"failed to fetch record {key_id}: {exc}") from exc

        if not records:
            raise UpstreamKeyRetrievalError(f"no records found for UID: {key_id}")

        return self._key_pair_from_record(records[0], key_id)

    def _key_pair_from_record(self, record: Any, key_id: str) -> KeyPair:
        data = getattr(record, "dict", None) or {}
        fields = list(data.get("fields", [])) + list(data.get("custom", []))

        key_pair = self._first_value(fields, self.KEY_PAIR_FIELD)
        if not isinstance(key_pair, dict) or not key_pair.get("privateKey"):
            raise UpstreamKeyRetrievalError(f"record {key_id} has no private key")

        passphrase = self._first_value(fields, self.PASSPHRASE_FIELD)
        return KeyPair(
            private_key=SecretStr(key_pair["privateKey"]),
            public_key=key_pair.get("publicKey") or None,
            passphrase=SecretStr(passphrase) if isinstance(passphrase, str) and passphrase else None,
        )

    @staticmethod
    def _first_value(fields: list[dict[str, Any]], field_type: str) -> Any:
        for field in fields:
            if field.get("type") != field_type:
                continue
            values = field.get("value") or []
            if values:
                return values[0]
        return None
