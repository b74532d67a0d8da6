"""Exception taxonomy shared by the codec, verification engine and services."""

from __future__ import annotations


class SSHSignError(Exception):
    """Base class for all errors raised by sshsign."""


class FormatError(SSHSignError):
    """Armored signature failed structural validation."""


class KeyParseError(SSHSignError):
    """Public or private key material could not be parsed."""


class UnsupportedSignerError(KeyParseError):
    """Key type has no algorithm-selectable signer."""


class SigningPrimitiveError(SSHSignError):
    """The underlying signing primitive failed."""


class SignatureVerificationError(SSHSignError):
    """Signature bytes do not verify over the signed payload."""


class FingerprintMismatch(SSHSignError):
    """Principal key and signature key have different fingerprints."""

    def __init__(self, message: str = "fingerprint does not match") -> None:
        super().__init__(message)


class RegistryError(SSHSignError):
    """Allowed-signers input is malformed or unreadable."""


class MalformedRegistryLine(RegistryError):
    """A registry line lacks an identity, key type and key blob."""

    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(
            f"malformed allowed signers line {line_number}: expected "
            "'<principal> <key-type> <base64-key>'"
        )


class UpstreamKeyRetrievalError(SSHSignError):
    """Key retrieval from the external secret store failed."""
