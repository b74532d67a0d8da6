"""Key store port interface for private key retrieval."""

from typing import Protocol

from pydantic import BaseModel, Field, SecretStr


class KeyPair(BaseModel):
    """Key material returned by a key store."""

    private_key: SecretStr = Field(..., description="Private key text (OpenSSH or PEM)")
    public_key: str | None = Field(
        default=None, description="Authorized-key line of the public half (optional)"
    )
    passphrase: SecretStr | None = Field(
        default=None, description="Passphrase protecting the private key (optional)"
    )


class KeyStorePort(Protocol):
    """Port interface for fetching signing keys.

    Adapters never cache or persist the returned material.

    Side effects: Reads a local file or performs a network round-trip.
    """

    def fetch(self, key_id: str) -> KeyPair:
        """Fetch key material.

        Args:
            key_id: Opaque key identifier (file path or vault record UID)

        Returns:
            Key pair for ``key_id``

        Raises:
            UpstreamKeyRetrievalError: If the key cannot be retrieved
        """
        ...
