"""Pytest configuration and fixtures."""

from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from sshsign.config import Settings


@dataclass(frozen=True)
class KeyFixture:
    """OpenSSH private key text plus its authorized-key line."""

    private_key: str
    public_key: str
    comment: str

    @property
    def public_key_with_comment(self) -> str:
        return f"{self.public_key} {self.comment}"


def _key_fixture(private_key, comment: str) -> KeyFixture:
    private_text = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.OpenSSH,
        serialization.NoEncryption(),
    ).decode("ascii")
    public_text = (
        private_key.public_key()
        .public_bytes(serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH)
        .decode("ascii")
    )
    return KeyFixture(private_key=private_text, public_key=public_text, comment=comment)


@pytest.fixture(scope="session")
def ed25519_key() -> KeyFixture:
    return _key_fixture(ed25519.Ed25519PrivateKey.generate(), "alice@example.com")


@pytest.fixture(scope="session")
def other_ed25519_key() -> KeyFixture:
    return _key_fixture(ed25519.Ed25519PrivateKey.generate(), "mallory@example.com")


@pytest.fixture(scope="session")
def rsa_key() -> KeyFixture:
    return _key_fixture(
        rsa.generate_private_key(public_exponent=65537, key_size=2048), "bob@example.com"
    )


@pytest.fixture(scope="session")
def ecdsa_key() -> KeyFixture:
    return _key_fixture(ec.generate_private_key(ec.SECP256R1()), "carol@example.com")


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Per-test scratch directory."""
    return tmp_path


@pytest.fixture
def allowed_signers_file(temp_dir: Path, ed25519_key: KeyFixture, rsa_key: KeyFixture) -> Path:
    """Registry listing alice (Ed25519) and bob (RSA)."""
    path = temp_dir / "allowed_signers"
    path.write_text(
        f"alice@example.com {ed25519_key.public_key}\n"
        f"bob@example.com {rsa_key.public_key_with_comment}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def override_settings(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Settings, None, None]:
    """Provide isolated settings scoped to tests."""

    import sshsign.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    # Keep the developer's own Keeper config and .env out of the tests.
    monkeypatch.setenv("HOME", str(temp_dir / "home"))
    monkeypatch.chdir(temp_dir)

    settings = config_module.Settings()
    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
