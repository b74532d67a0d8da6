"""Verification engine for the find-principals / verify / check-novalidate stages.

Each stage is a pure function of the parsed registry, the decoded signature
and (for ``verify``) the candidate principal, so callers may run many
verifications concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import BinaryIO

from sshsign.errors import FingerprintMismatch
from sshsign.sshsig.allowed_signers import AllowedSigner
from sshsign.sshsig.codec import DecodedSignature, build_signed_data
from sshsign.sshsig.keys import (
    SSHPublicKey,
    fingerprint_sha256,
    key_type_label,
    parse_authorized_key,
    verify_signature,
)

logger = logging.getLogger(__name__)

NO_PRINCIPAL_MATCHED = "No principal matched"


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Human-readable outcome of the ``verify`` or ``check-novalidate`` stage.

    ``email`` is ``None`` for check-novalidate reports and may be empty for
    verify reports whose principal is absent from the registry.
    """

    namespace: str
    key_type: str
    fingerprint: str
    email: str | None = None

    def render(self) -> str:
        if self.email is None:
            return (
                f'Good "{self.namespace}" signature with {self.key_type} key {self.fingerprint}'
            )
        return (
            f'Good "{self.namespace}" signature for {self.email} '
            f"with {self.key_type} key {self.fingerprint}"
        )


def find_matching_principals(
    allowed_signers: Sequence[AllowedSigner], signature: DecodedSignature
) -> list[str]:
    """Return the key lines whose wire bytes equal the signature's key.

    Registry order and duplicates are preserved; no match yields ``[]``.

    Raises:
        KeyParseError: If a registry key line cannot be parsed
    """
    expected = signature.public_key.marshal()
    matches = [
        signer.public_key
        for signer in allowed_signers
        if parse_authorized_key(signer.public_key).marshal() == expected
    ]
    logger.debug("Matched %d of %d allowed signers", len(matches), len(allowed_signers))
    return matches


def verify_fingerprints(principal: str | bytes, public_key: SSHPublicKey) -> None:
    """Confirm ``principal`` names exactly ``public_key``.

    Only compares identities; the signature bytes are not checked here.

    Raises:
        KeyParseError: If ``principal`` is not a parseable key line
        FingerprintMismatch: If the SHA-256 fingerprints differ
    """
    principal_key = parse_authorized_key(principal)
    if fingerprint_sha256(principal_key) != fingerprint_sha256(public_key):
        raise FingerprintMismatch()


def verify_signed_data(signature: DecodedSignature, data: bytes | BinaryIO) -> None:
    """Check the signature bytes over ``data`` with the embedded public key.

    Raises:
        SignatureVerificationError: If the signature does not cover ``data``
    """
    signed_data = build_signed_data(data, signature.hash_algorithm)
    verify_signature(signature.public_key, signature.signature, signed_data)


def lookup_email(allowed_signers: Sequence[AllowedSigner], principal: str) -> str:
    """Return the identity of the first entry listing ``principal``, else ``""``."""
    principal = principal.strip()
    for signer in allowed_signers:
        if signer.public_key == principal:
            return signer.email
    return ""


def verify_principal(
    allowed_signers: Sequence[AllowedSigner],
    signature: DecodedSignature,
    principal: str,
    data: bytes | BinaryIO | None = None,
) -> VerificationReport:
    """Run the ``verify`` stage for a caller-chosen principal.

    Args:
        allowed_signers: Parsed registry, used only to look up the email
        signature: Decoded signature
        principal: Key line chosen by the caller (normally find-principals output)
        data: Signed payload; when given, the signature bytes are verified too

    Raises:
        FingerprintMismatch: If the principal is not the signing key
        SignatureVerificationError: If ``data`` is given and does not verify
    """
    verify_fingerprints(principal, signature.public_key)
    if data is not None:
        verify_signed_data(signature, data)

    principal_key = parse_authorized_key(principal)
    return VerificationReport(
        namespace=signature.namespace,
        email=lookup_email(allowed_signers, principal),
        key_type=key_type_label(principal_key.key_type),
        fingerprint=fingerprint_sha256(principal_key),
    )


def check_novalidate(signature: DecodedSignature) -> VerificationReport:
    """Describe the signing key without asserting any trust in it."""
    return VerificationReport(
        namespace=signature.namespace,
        key_type=key_type_label(signature.public_key.key_type),
        fingerprint=fingerprint_sha256(signature.public_key),
    )
