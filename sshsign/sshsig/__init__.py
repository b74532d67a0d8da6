"""SSHSIG codec, allowed-signers reader and verification engine.

This package is pure: it never touches the filesystem or network.
"""

from sshsign.sshsig.allowed_signers import AllowedSigner, parse_allowed_signers
from sshsign.sshsig.codec import (
    DEFAULT_HASH_ALGORITHM,
    MAGIC_HEADER,
    NAMESPACE,
    PEM_LABEL,
    ArmoredSignature,
    DecodedSignature,
    MessageWrapper,
    build_signed_data,
    create_signature,
    decode,
    encode,
    sign_commit,
    signing_algorithm_for,
)
from sshsign.sshsig.keys import (
    AlgorithmSigner,
    SSHPublicKey,
    SSHSignature,
    fingerprint_sha256,
    key_type_label,
    parse_authorized_key,
    parse_private_key,
    parse_public_key,
)
from sshsign.sshsig.verify import (
    NO_PRINCIPAL_MATCHED,
    VerificationReport,
    check_novalidate,
    find_matching_principals,
    lookup_email,
    verify_fingerprints,
    verify_principal,
    verify_signed_data,
)

__all__ = [
    "DEFAULT_HASH_ALGORITHM",
    "MAGIC_HEADER",
    "NAMESPACE",
    "NO_PRINCIPAL_MATCHED",
    "PEM_LABEL",
    "AlgorithmSigner",
    "AllowedSigner",
    "ArmoredSignature",
    "DecodedSignature",
    "MessageWrapper",
    "SSHPublicKey",
    "SSHSignature",
    "VerificationReport",
    "build_signed_data",
    "check_novalidate",
    "create_signature",
    "decode",
    "encode",
    "find_matching_principals",
    "fingerprint_sha256",
    "key_type_label",
    "lookup_email",
    "parse_allowed_signers",
    "parse_authorized_key",
    "parse_private_key",
    "parse_public_key",
    "sign_commit",
    "signing_algorithm_for",
    "verify_fingerprints",
    "verify_principal",
    "verify_signed_data",
]
