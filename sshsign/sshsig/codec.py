"""SSHSIG armored signature codec.

Wire layout (OpenSSH ``PROTOCOL.sshsig``)::

    byte[6]  MAGIC_PREAMBLE "SSHSIG"
    uint32   SIG_VERSION
    string   publickey
    string   namespace
    string   reserved
    string   hash_algorithm
    string   signature

The marshalled structure is base64 armored in a single ``SSH SIGNATURE``
PEM block. The bytes actually signed are ``"SSHSIG"`` followed by the
marshalled :class:`MessageWrapper`.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO

from sshsign.errors import FormatError
from sshsign.sshsig.keys import (
    KEY_ALGO_RSA,
    KEY_ALGO_RSA_SHA512,
    AlgorithmSigner,
    SSHPublicKey,
    SSHSignature,
    parse_private_key,
    parse_public_key,
)
from sshsign.sshsig.wire import WireReader, pack_string, pack_uint32
from sshsign.utils.hashing import (
    SUPPORTED_HASH_ALGORITHMS,
    compute_digest,
    compute_digest_stream,
)

logger = logging.getLogger(__name__)

MAGIC_HEADER = b"SSHSIG"
SIG_VERSION = 1
NAMESPACE = "git"
DEFAULT_HASH_ALGORITHM = "sha512"
PEM_LABEL = "SSH SIGNATURE"
ARMOR_LINE_WIDTH = 70

_PEM_BLOCK_RE = re.compile(
    rb"-----BEGIN ([^\r\n-]+)-----\r?\n(.*?)-----END \1-----",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class MessageWrapper:
    """Payload envelope that is hashed into the signed byte sequence."""

    hash: bytes
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    namespace: str = NAMESPACE
    reserved: str = ""

    def marshal(self) -> bytes:
        return (
            pack_string(self.namespace)
            + pack_string(self.reserved)
            + pack_string(self.hash_algorithm)
            + pack_string(self.hash)
        )


@dataclass(frozen=True, slots=True)
class ArmoredSignature:
    """Raw SSHSIG structure as found inside the PEM block."""

    magic_header: bytes
    version: int
    public_key: bytes
    namespace: str
    reserved: str
    hash_algorithm: str
    signature: bytes

    def marshal(self) -> bytes:
        return (
            self.magic_header
            + pack_uint32(self.version)
            + pack_string(self.public_key)
            + pack_string(self.namespace)
            + pack_string(self.reserved)
            + pack_string(self.hash_algorithm)
            + pack_string(self.signature)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "ArmoredSignature":
        reader = WireReader(data)
        wrapped = cls(
            magic_header=reader.read_bytes(len(MAGIC_HEADER)),
            version=reader.read_uint32(),
            public_key=reader.read_string(),
            namespace=reader.read_text(),
            reserved=reader.read_text(),
            hash_algorithm=reader.read_text(),
            signature=reader.read_string(),
        )
        reader.expect_end()
        return wrapped


@dataclass(frozen=True, slots=True)
class DecodedSignature:
    """Validated signature: syntactically sound key, signature and envelope.

    Decoding says nothing about whether ``signature`` is valid for any
    particular payload.
    """

    signature: SSHSignature
    public_key: SSHPublicKey
    hash_algorithm: str
    namespace: str = NAMESPACE


def armor(payload: bytes) -> bytes:
    """Wrap ``payload`` in an ``SSH SIGNATURE`` PEM block."""
    body = base64.b64encode(payload)
    lines = [body[i : i + ARMOR_LINE_WIDTH] for i in range(0, len(body), ARMOR_LINE_WIDTH)]
    return (
        f"-----BEGIN {PEM_LABEL}-----\n".encode("ascii")
        + b"".join(line + b"\n" for line in lines)
        + f"-----END {PEM_LABEL}-----\n".encode("ascii")
    )


def _decode_pem(data: bytes) -> tuple[str, bytes]:
    blocks = _PEM_BLOCK_RE.findall(data)
    if not blocks:
        raise FormatError("unable to decode pem file")
    if len(blocks) > 1:
        raise FormatError(f"expected exactly one PEM block, found {len(blocks)}")

    label, body = blocks[0]
    # Drop RFC 1421 style headers, if any.
    lines = [line.strip() for line in body.splitlines()]
    encoded = b"".join(line for line in lines if line and b":" not in line)
    try:
        payload = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise FormatError("invalid base64 in pem body") from exc
    return label.decode("ascii", errors="replace"), payload


def encode(
    signature: SSHSignature,
    public_key: SSHPublicKey,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> bytes:
    """Armor a signature produced over the ``hash_algorithm`` digest.

    Args:
        signature: Signature over the SSHSIG signed-data sequence
        public_key: Public half of the signing key
        hash_algorithm: Digest used when building the signed data

    Returns:
        PEM armored SSHSIG bytes
    """
    wrapped = ArmoredSignature(
        magic_header=MAGIC_HEADER,
        version=SIG_VERSION,
        public_key=public_key.marshal(),
        namespace=NAMESPACE,
        reserved="",
        hash_algorithm=hash_algorithm,
        signature=signature.marshal(),
    )
    return armor(wrapped.marshal())


def decode(data: bytes | str) -> DecodedSignature:
    """Decode and validate an armored SSHSIG signature.

    Structural checks run before the embedded signature and public key are
    unpacked, so unsupported or malicious envelopes are rejected without
    parsing their key material.

    Raises:
        FormatError: If the envelope is malformed or unsupported
        KeyParseError: If the embedded public key cannot be parsed
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    label, payload = _decode_pem(data)
    if label != PEM_LABEL:
        raise FormatError(f"wrong pem block type: {label}. Expected {PEM_LABEL}")

    wrapped = ArmoredSignature.unmarshal(payload)

    if wrapped.version != SIG_VERSION:
        raise FormatError(f"unsupported signature version: {wrapped.version}")
    if wrapped.magic_header != MAGIC_HEADER:
        raise FormatError(f"invalid magic header: {wrapped.magic_header!r}")
    if wrapped.namespace != NAMESPACE:
        raise FormatError(f"invalid signature namespace: {wrapped.namespace}")
    if wrapped.hash_algorithm not in SUPPORTED_HASH_ALGORITHMS:
        raise FormatError(f"unsupported hash algorithm: {wrapped.hash_algorithm}")

    signature = SSHSignature.unmarshal(wrapped.signature)
    public_key = parse_public_key(wrapped.public_key)

    return DecodedSignature(
        signature=signature,
        public_key=public_key,
        hash_algorithm=wrapped.hash_algorithm,
        namespace=wrapped.namespace,
    )


def build_signed_data(
    data: bytes | BinaryIO, hash_algorithm: str = DEFAULT_HASH_ALGORITHM
) -> bytes:
    """Return the exact byte sequence an SSHSIG signature covers."""
    if hash_algorithm not in SUPPORTED_HASH_ALGORITHMS:
        raise FormatError(f"unsupported hash algorithm: {hash_algorithm}")
    if isinstance(data, (bytes, bytearray, memoryview)):
        digest = compute_digest(bytes(data), hash_algorithm)
    else:
        digest = compute_digest_stream(data, hash_algorithm)
    wrapper = MessageWrapper(hash=digest, hash_algorithm=hash_algorithm)
    return MAGIC_HEADER + wrapper.marshal()


def signing_algorithm_for(signer: AlgorithmSigner) -> str | None:
    """Pick the signature algorithm; ``None`` means the key's native one.

    SSHSIG verifiers reject ``ssh-rsa`` (SHA-1) signatures, so RSA keys always
    sign with ``rsa-sha2-512``.
    """
    if signer.public_key.key_type == KEY_ALGO_RSA:
        return KEY_ALGO_RSA_SHA512
    return None


def create_signature(
    signer: AlgorithmSigner,
    data: bytes | BinaryIO,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> SSHSignature:
    """Sign ``data`` in the git namespace without armoring the result."""
    signed_data = build_signed_data(data, hash_algorithm)
    algorithm = signing_algorithm_for(signer)
    logger.debug(
        "Signing with %s key using %s",
        signer.public_key.key_type,
        algorithm or signer.native_algorithm,
    )
    return signer.sign_with_algorithm(signed_data, algorithm)


def sign_commit(
    private_key_material: str | bytes,
    data: bytes | BinaryIO,
    *,
    passphrase: str | bytes | None = None,
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> bytes:
    """Sign commit bytes and return the armored SSHSIG signature.

    Raises:
        KeyParseError: If the private key material is malformed
        UnsupportedSignerError: If the key type cannot select its algorithm
        SigningPrimitiveError: If the signing primitive fails
    """
    signer = parse_private_key(private_key_material, passphrase)
    signature = create_signature(signer, data, hash_algorithm)
    return encode(signature, signer.public_key, hash_algorithm)
