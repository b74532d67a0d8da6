"""SSH key primitives backed by the ``cryptography`` package.

Provides the operations the SSHSIG codec relies on: parsing private keys,
parsing public keys from wire blobs or authorized-key lines, marshalling
public keys to wire bytes, SHA-256 fingerprints, and algorithm-selectable
signing and verification for Ed25519, RSA and ECDSA keys.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass, field
from typing import Any, Protocol

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from sshsign.errors import (
    FormatError,
    KeyParseError,
    SignatureVerificationError,
    SigningPrimitiveError,
    UnsupportedSignerError,
)
from sshsign.sshsig.wire import WireReader, pack_mpint, pack_string

KEY_ALGO_RSA = "ssh-rsa"
KEY_ALGO_ED25519 = "ssh-ed25519"
KEY_ALGO_RSA_SHA256 = "rsa-sha2-256"
KEY_ALGO_RSA_SHA512 = "rsa-sha2-512"

_KEY_TYPE_PREFIXES = ("ssh-", "ecdsa-", "sk-")

_RSA_HASHES: dict[str, type[hashes.HashAlgorithm]] = {
    KEY_ALGO_RSA_SHA256: hashes.SHA256,
    KEY_ALGO_RSA_SHA512: hashes.SHA512,
}

# cryptography curve name -> (SSH curve identifier, digest)
_ECDSA_CURVES: dict[str, tuple[str, type[hashes.HashAlgorithm]]] = {
    "secp256r1": ("nistp256", hashes.SHA256),
    "secp384r1": ("nistp384", hashes.SHA384),
    "secp521r1": ("nistp521", hashes.SHA512),
}


@dataclass(frozen=True, slots=True)
class SSHPublicKey:
    """Parsed public key with its canonical wire encoding."""

    key_type: str
    blob: bytes
    key: Any = field(compare=False, repr=False)

    @classmethod
    def from_cryptography(cls, key: Any) -> "SSHPublicKey":
        try:
            encoded = key.public_bytes(
                serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH
            )
        except (ValueError, TypeError) as exc:
            raise KeyParseError(f"unsupported public key: {exc}") from exc
        key_type, blob_b64 = encoded.split(b" ")[:2]
        return cls(key_type=key_type.decode("ascii"), blob=base64.b64decode(blob_b64), key=key)

    def marshal(self) -> bytes:
        return self.blob

    def authorized_key(self) -> str:
        """Render as ``"<key-type> <base64>"``."""
        return f"{self.key_type} {base64.b64encode(self.blob).decode('ascii')}"

    def fingerprint(self) -> str:
        return fingerprint_sha256(self)


@dataclass(frozen=True, slots=True)
class SSHSignature:
    """Wire-level signature: algorithm identifier plus raw signature bytes."""

    format: str
    blob: bytes
    rest: bytes = b""

    def marshal(self) -> bytes:
        return pack_string(self.format) + pack_string(self.blob) + self.rest

    @classmethod
    def unmarshal(cls, data: bytes) -> "SSHSignature":
        reader = WireReader(data)
        sig_format = reader.read_text()
        blob = reader.read_string()
        return cls(format=sig_format, blob=blob, rest=reader.read_rest())


def _load_public_key(key_type: bytes, blob_b64: bytes) -> SSHPublicKey:
    try:
        key = serialization.load_ssh_public_key(key_type + b" " + blob_b64)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyParseError(f"unable to parse public key: {exc}") from exc
    return SSHPublicKey.from_cryptography(key)


def parse_public_key(blob: bytes) -> SSHPublicKey:
    """Parse a wire-format public key blob."""
    try:
        key_type = WireReader(blob).read_string()
    except FormatError as exc:
        raise KeyParseError(f"unable to parse public key: {exc}") from exc
    return _load_public_key(key_type, base64.b64encode(blob))


def parse_authorized_key(line: str | bytes) -> SSHPublicKey:
    """Parse an authorized-key style line: ``[options] <key-type> <base64> [comment]``."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    tokens = line.split()
    for index, token in enumerate(tokens[:-1]):
        if not token.startswith(_KEY_TYPE_PREFIXES):
            continue
        try:
            key_type = token.encode("ascii")
            blob_b64 = tokens[index + 1].encode("ascii")
            base64.b64decode(blob_b64, validate=True)
        except UnicodeEncodeError as exc:
            raise KeyParseError(f"non-ASCII characters in key line near {token!r}") from exc
        except binascii.Error as exc:
            raise KeyParseError(f"invalid base64 key data for {token}") from exc
        return _load_public_key(key_type, blob_b64)
    raise KeyParseError("no public key found in authorized key line")


def fingerprint_sha256(public_key: SSHPublicKey) -> str:
    """Return the OpenSSH ``SHA256:<base64>`` fingerprint (unpadded)."""
    digest = hashlib.sha256(public_key.marshal()).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def key_type_label(key_type: str) -> str:
    """Short, upper-cased key type used in verification reports.

    ``ssh-ed25519`` -> ``ED25519``, ``ecdsa-sha2-nistp256`` -> ``ECDSA``,
    ``sk-ssh-ed25519@openssh.com`` -> ``ED25519-SK``.
    """
    name = key_type.split("@", 1)[0]
    suffix = ""
    if name.startswith("sk-"):
        name = name[3:]
        suffix = "-SK"
    parts = name.split("-")
    word = parts[1] if parts[0] == "ssh" and len(parts) > 1 else parts[0]
    return word.upper() + suffix


class AlgorithmSigner(Protocol):
    """Signer capable of producing signatures under an explicit algorithm."""

    @property
    def public_key(self) -> SSHPublicKey:
        ...

    @property
    def native_algorithm(self) -> str:
        ...

    def sign_with_algorithm(self, data: bytes, algorithm: str | None = None) -> SSHSignature:
        """Sign ``data``; ``None`` selects the key's native algorithm."""
        ...


class _KeySigner:
    supported_algorithms: tuple[str, ...] = ()

    def __init__(self, private_key: Any) -> None:
        self._private_key = private_key
        self._public_key = SSHPublicKey.from_cryptography(private_key.public_key())

    @property
    def public_key(self) -> SSHPublicKey:
        return self._public_key

    @property
    def native_algorithm(self) -> str:
        return self._public_key.key_type

    def sign_with_algorithm(self, data: bytes, algorithm: str | None = None) -> SSHSignature:
        algorithm = algorithm or self.native_algorithm
        if algorithm not in self.supported_algorithms:
            raise SigningPrimitiveError(
                f"algorithm {algorithm} is not supported for {self.native_algorithm} keys"
            )
        try:
            blob = self._sign(data, algorithm)
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise SigningPrimitiveError(f"signing with {algorithm} failed: {exc}") from exc
        return SSHSignature(format=algorithm, blob=blob)

    def _sign(self, data: bytes, algorithm: str) -> bytes:  # pragma: no cover - abstract
        raise NotImplementedError


class Ed25519Signer(_KeySigner):
    supported_algorithms = (KEY_ALGO_ED25519,)

    def _sign(self, data: bytes, algorithm: str) -> bytes:
        return self._private_key.sign(data)


class RSASigner(_KeySigner):
    # Legacy ssh-rsa (SHA-1) signatures are deliberately absent.
    supported_algorithms = tuple(_RSA_HASHES)

    def _sign(self, data: bytes, algorithm: str) -> bytes:
        return self._private_key.sign(data, padding.PKCS1v15(), _RSA_HASHES[algorithm]())


class ECDSASigner(_KeySigner):
    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        if private_key.curve.name not in _ECDSA_CURVES:
            raise UnsupportedSignerError(f"unsupported ECDSA curve: {private_key.curve.name}")
        super().__init__(private_key)
        self.supported_algorithms = (self.native_algorithm,)
        self._hash = _ECDSA_CURVES[private_key.curve.name][1]

    def _sign(self, data: bytes, algorithm: str) -> bytes:
        der = self._private_key.sign(data, ec.ECDSA(self._hash()))
        r, s = decode_dss_signature(der)
        return pack_mpint(r) + pack_mpint(s)


def signer_for(private_key: Any) -> AlgorithmSigner:
    """Wrap a ``cryptography`` private key in its :class:`AlgorithmSigner`."""
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return Ed25519Signer(private_key)
    if isinstance(private_key, rsa.RSAPrivateKey):
        return RSASigner(private_key)
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        return ECDSASigner(private_key)
    raise UnsupportedSignerError(
        f"{type(private_key).__name__} keys do not support algorithm-selectable signing"
    )


def parse_private_key(
    material: str | bytes, passphrase: str | bytes | None = None
) -> AlgorithmSigner:
    """Parse an OpenSSH or PEM private key into an :class:`AlgorithmSigner`.

    Args:
        material: Private key text
        passphrase: Optional passphrase; ignored for unencrypted keys

    Raises:
        KeyParseError: If the material is malformed or the passphrase is wrong
        UnsupportedSignerError: If the key type cannot sign with SSHSIG
    """
    data = material.encode("utf-8") if isinstance(material, str) else bytes(material)
    data = data.strip() + b"\n"
    password = passphrase.encode("utf-8") if isinstance(passphrase, str) else passphrase

    if b"OPENSSH PRIVATE KEY" in data:
        loader = serialization.load_ssh_private_key
    else:
        loader = serialization.load_pem_private_key

    try:
        try:
            private_key = loader(data, password=password)
        except TypeError:
            # Raised both for "encrypted but no password" and the inverse.
            if password is None:
                raise
            private_key = loader(data, password=None)
    except TypeError as exc:
        raise KeyParseError(f"unable to load private key: {exc}") from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyParseError(f"unable to parse private key: {exc}") from exc

    return signer_for(private_key)


def verify_signature(public_key: SSHPublicKey, signature: SSHSignature, data: bytes) -> None:
    """Check ``signature`` over ``data`` with ``public_key``.

    Raises:
        SignatureVerificationError: If the algorithm does not belong to the key
            type or the signature bytes do not verify
    """
    key = public_key.key
    try:
        if isinstance(key, ed25519.Ed25519PublicKey):
            _expect_format(signature, (KEY_ALGO_ED25519,))
            key.verify(signature.blob, data)
        elif isinstance(key, rsa.RSAPublicKey):
            _expect_format(signature, tuple(_RSA_HASHES))
            key.verify(signature.blob, data, padding.PKCS1v15(), _RSA_HASHES[signature.format]())
        elif isinstance(key, ec.EllipticCurvePublicKey):
            _expect_format(signature, (public_key.key_type,))
            reader = WireReader(signature.blob)
            r, s = reader.read_mpint(), reader.read_mpint()
            reader.expect_end()
            digest = _ECDSA_CURVES[key.curve.name][1]
            key.verify(encode_dss_signature(r, s), data, ec.ECDSA(digest()))
        else:
            raise SignatureVerificationError(
                f"verification is not supported for {public_key.key_type} keys"
            )
    except InvalidSignature as exc:
        raise SignatureVerificationError("signature does not verify") from exc
    except FormatError as exc:
        raise SignatureVerificationError(f"malformed signature blob: {exc}") from exc


def _expect_format(signature: SSHSignature, allowed: tuple[str, ...]) -> None:
    if signature.format not in allowed:
        raise SignatureVerificationError(
            f"signature algorithm {signature.format} does not match key "
            f"(expected one of: {', '.join(allowed)})"
        )
