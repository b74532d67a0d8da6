"""Key primitive tests: parsing, fingerprints, algorithm-selectable signing."""

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, x25519

from sshsign.errors import (
    KeyParseError,
    SignatureVerificationError,
    SigningPrimitiveError,
    UnsupportedSignerError,
)
from sshsign.sshsig.keys import (
    ECDSASigner,
    Ed25519Signer,
    RSASigner,
    SSHSignature,
    fingerprint_sha256,
    key_type_label,
    parse_authorized_key,
    parse_private_key,
    parse_public_key,
    signer_for,
    verify_signature,
)


def test_parse_private_key_selects_signer_per_key_type(ed25519_key, rsa_key, ecdsa_key) -> None:
    assert isinstance(parse_private_key(ed25519_key.private_key), Ed25519Signer)
    assert isinstance(parse_private_key(rsa_key.private_key), RSASigner)
    assert isinstance(parse_private_key(ecdsa_key.private_key), ECDSASigner)


def test_parse_private_key_rejects_garbage() -> None:
    with pytest.raises(KeyParseError):
        parse_private_key("invalid key")


def test_parse_private_key_tolerates_trailing_whitespace(ed25519_key) -> None:
    signer = parse_private_key(ed25519_key.private_key.rstrip() + "\t\t\n")
    assert signer.public_key.authorized_key() == ed25519_key.public_key


def test_encrypted_pem_key_requires_passphrase() -> None:
    private_key = ed25519.Ed25519PrivateKey.generate()
    pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.BestAvailableEncryption(b"hunter2"),
    )

    with pytest.raises(KeyParseError):
        parse_private_key(pem)

    signer = parse_private_key(pem, passphrase="hunter2")
    assert signer.native_algorithm == "ssh-ed25519"


def test_passphrase_ignored_for_unencrypted_key(ed25519_key) -> None:
    signer = parse_private_key(ed25519_key.private_key, passphrase="unused")
    assert signer.public_key.authorized_key() == ed25519_key.public_key


def test_key_agreement_keys_are_not_algorithm_signers() -> None:
    with pytest.raises(UnsupportedSignerError):
        signer_for(x25519.X25519PrivateKey.generate())


def test_parse_authorized_key_ignores_comment_and_options(ed25519_key) -> None:
    plain = parse_authorized_key(ed25519_key.public_key)
    commented = parse_authorized_key(ed25519_key.public_key_with_comment)
    with_options = parse_authorized_key(f'namespaces="git" {ed25519_key.public_key}')

    assert plain == commented == with_options
    assert plain.key_type == "ssh-ed25519"


def test_parse_authorized_key_rejects_lines_without_key() -> None:
    with pytest.raises(KeyParseError):
        parse_authorized_key("alice@example.com")
    with pytest.raises(KeyParseError):
        parse_authorized_key("ssh-ed25519 not-base64!!")


@pytest.mark.parametrize(
    "line",
    ["eve@example.com ssh-ed25519 AAAAé", "ssh-éd AAAA", b"ssh-ed25519 AAAA\xc3\xa9"],
)
def test_parse_authorized_key_rejects_non_ascii(line) -> None:
    with pytest.raises(KeyParseError):
        parse_authorized_key(line)


def test_parse_public_key_round_trips_wire_blob(rsa_key) -> None:
    parsed = parse_authorized_key(rsa_key.public_key)
    assert parse_public_key(parsed.marshal()) == parsed


def test_parse_public_key_rejects_truncated_blob() -> None:
    with pytest.raises(KeyParseError):
        parse_public_key(b"\x00\x00\x00\x0bssh-ed")


def test_fingerprint_matches_openssh_format(ed25519_key) -> None:
    key = parse_authorized_key(ed25519_key.public_key)
    blob = base64.b64decode(ed25519_key.public_key.split()[1])
    expected = base64.b64encode(hashlib.sha256(blob).digest()).decode().rstrip("=")

    assert fingerprint_sha256(key) == f"SHA256:{expected}"
    assert "=" not in fingerprint_sha256(key)


@pytest.mark.parametrize(
    ("key_type", "label"),
    [
        ("ssh-ed25519", "ED25519"),
        ("ssh-rsa", "RSA"),
        ("ecdsa-sha2-nistp256", "ECDSA"),
        ("sk-ssh-ed25519@openssh.com", "ED25519-SK"),
    ],
)
def test_key_type_label(key_type: str, label: str) -> None:
    assert key_type_label(key_type) == label


def test_rsa_signer_refuses_legacy_sha1(rsa_key) -> None:
    signer = parse_private_key(rsa_key.private_key)
    with pytest.raises(SigningPrimitiveError):
        signer.sign_with_algorithm(b"data", "ssh-rsa")
    with pytest.raises(SigningPrimitiveError):
        signer.sign_with_algorithm(b"data")


@pytest.mark.parametrize("fixture_name", ["ed25519_key", "rsa_key", "ecdsa_key"])
def test_signatures_verify_and_detect_tampering(request, fixture_name: str) -> None:
    key = request.getfixturevalue(fixture_name)
    signer = parse_private_key(key.private_key)
    algorithm = "rsa-sha2-256" if fixture_name == "rsa_key" else None
    signature = signer.sign_with_algorithm(b"payload", algorithm)

    verify_signature(signer.public_key, signature, b"payload")
    with pytest.raises(SignatureVerificationError):
        verify_signature(signer.public_key, signature, b"tampered")


def test_verify_signature_rejects_foreign_algorithm(ed25519_key) -> None:
    signer = parse_private_key(ed25519_key.private_key)
    signature = signer.sign_with_algorithm(b"payload")
    relabelled = SSHSignature(format="ssh-rsa", blob=signature.blob)

    with pytest.raises(SignatureVerificationError, match="does not match key"):
        verify_signature(signer.public_key, relabelled, b"payload")


def test_ssh_signature_unmarshal_keeps_rest() -> None:
    sig = SSHSignature(format="ssh-ed25519", blob=b"\x01" * 64, rest=b"\x01\x00\x00\x00\x07")
    assert SSHSignature.unmarshal(sig.marshal()) == sig
