"""Keeper Secrets Manager adapter tests with an injected client."""

import pytest

from sshsign.app.adapters import KeeperVaultAdapter
from sshsign.errors import UpstreamKeyRetrievalError


class FakeRecord:
    def __init__(self, data: dict) -> None:
        self.dict = data


class FakeSecretsManager:
    def __init__(self, records=None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.requested: list[list[str]] = []

    def get_secrets(self, uids):
        self.requested.append(list(uids))
        if self.error is not None:
            raise self.error
        return self.records


def _ssh_record(private_key: str, public_key: str | None = None, password: str | None = None):
    fields = [
        {"type": "keyPair", "value": [{"privateKey": private_key, "publicKey": public_key}]},
    ]
    if password is not None:
        fields.append({"type": "password", "value": [password]})
    return FakeRecord({"title": "git signing key", "type": "sshKeys", "fields": fields})


def test_fetch_returns_key_pair(ed25519_key) -> None:
    client = FakeSecretsManager([_ssh_record(ed25519_key.private_key, ed25519_key.public_key)])

    key_pair = KeeperVaultAdapter(client=client).fetch("XyZ123")

    assert client.requested == [["XyZ123"]]
    assert key_pair.private_key.get_secret_value() == ed25519_key.private_key
    assert key_pair.public_key == ed25519_key.public_key
    assert key_pair.passphrase is None


def test_fetch_reads_passphrase_field(ed25519_key) -> None:
    client = FakeSecretsManager([_ssh_record(ed25519_key.private_key, password="s3cret")])

    key_pair = KeeperVaultAdapter(client=client).fetch("uid")

    assert key_pair.passphrase is not None
    assert key_pair.passphrase.get_secret_value() == "s3cret"


def test_fetch_missing_record() -> None:
    adapter = KeeperVaultAdapter(client=FakeSecretsManager([]))
    with pytest.raises(UpstreamKeyRetrievalError, match="no records found for UID: uid"):
        adapter.fetch("uid")


def test_fetch_record_without_key_pair() -> None:
    record = FakeRecord({"fields": [{"type": "login", "value": ["alice"]}]})
    adapter = KeeperVaultAdapter(client=FakeSecretsManager([record]))
    with pytest.raises(UpstreamKeyRetrievalError, match="has no private key"):
        adapter.fetch("uid")


def test_fetch_wraps_client_errors() -> None:
    adapter = KeeperVaultAdapter(client=FakeSecretsManager(error=ConnectionError("offline")))
    with pytest.raises(UpstreamKeyRetrievalError, match="offline"):
        adapter.fetch("uid")


def test_missing_config_file() -> None:
    with pytest.raises(UpstreamKeyRetrievalError, match="config file not found"):
        KeeperVaultAdapter(config_path=None).fetch("uid")
