"""Hashing utilities for payload digests."""

import hashlib
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, BinaryIO

# Digest constructors accepted in SSHSIG envelopes.
SUPPORTED_HASH_ALGORITHMS: Mapping[str, Callable[..., Any]] = MappingProxyType(
    {
        "sha256": hashlib.sha256,
        "sha512": hashlib.sha512,
    }
)


def _constructor(algorithm: str) -> Callable[..., Any]:
    try:
        return SUPPORTED_HASH_ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"unsupported hash algorithm: {algorithm}") from None


def compute_digest(content: bytes, algorithm: str = "sha512") -> bytes:
    """Compute the raw digest of content.

    Args:
        content: Bytes to hash
        algorithm: ``sha256`` or ``sha512``

    Returns:
        Raw digest bytes

    Raises:
        ValueError: If the algorithm is not supported
    """
    hasher = _constructor(algorithm)()
    hasher.update(content)
    return hasher.digest()


def compute_digest_stream(
    handle: BinaryIO, algorithm: str = "sha512", chunk_size: int = 65536
) -> bytes:
    """Compute the raw digest of a binary stream.

    Args:
        handle: Readable binary file object
        algorithm: ``sha256`` or ``sha512``
        chunk_size: Size of chunks to read (default 64KB)

    Returns:
        Raw digest bytes
    """
    hasher = _constructor(algorithm)()
    while True:
        chunk = handle.read(chunk_size)
        if not chunk:
            break
        hasher.update(chunk)
    return hasher.digest()
