"""Utility modules for common operations."""

from sshsign.utils.hashing import SUPPORTED_HASH_ALGORITHMS, compute_digest, compute_digest_stream

__all__ = [
    "SUPPORTED_HASH_ALGORITHMS",
    "compute_digest",
    "compute_digest_stream",
]
