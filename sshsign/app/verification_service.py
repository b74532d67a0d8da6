"""Verification service running git's signature stages from files."""

import logging
from pathlib import Path

from sshsign.app.ports import StoragePort
from sshsign.errors import FormatError, RegistryError
from sshsign.sshsig import (
    AllowedSigner,
    DecodedSignature,
    VerificationReport,
    check_novalidate,
    decode,
    find_matching_principals,
    parse_allowed_signers,
    verify_principal,
)

logger = logging.getLogger(__name__)


class VerificationService:
    """Re-reads registry and signature files on every call; keeps no state."""

    def __init__(self, storage_port: StoragePort, *, strict_registry: bool = True):
        self.storage = storage_port
        self.strict_registry = strict_registry

    def load_allowed_signers(self, path: Path) -> list[AllowedSigner]:
        try:
            text = self.storage.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise RegistryError(f"unable to read allowed signers file {path}: {exc}") from exc
        return parse_allowed_signers(text, strict=self.strict_registry)

    def load_signature(self, path: Path) -> DecodedSignature:
        try:
            data = self.storage.read_bytes(path)
        except OSError as exc:
            raise FormatError(f"unable to read signature file {path}: {exc}") from exc
        return decode(data)

    def find_principals(self, allowed_signers_path: Path, signature_path: Path) -> list[str]:
        """Key lines from the registry matching the signature's key (may be empty)."""
        logger.debug("find-principals: %s against %s", signature_path, allowed_signers_path)
        allowed_signers = self.load_allowed_signers(allowed_signers_path)
        signature = self.load_signature(signature_path)
        return find_matching_principals(allowed_signers, signature)

    def verify(
        self,
        allowed_signers_path: Path,
        signature_path: Path,
        principal: str,
        data: bytes | None = None,
    ) -> VerificationReport:
        """Confirm ``principal`` signed; ``data`` enables the payload check."""
        logger.debug("verify: %s for principal %s", signature_path, principal)
        signature = self.load_signature(signature_path)
        allowed_signers = self.load_allowed_signers(allowed_signers_path)
        return verify_principal(allowed_signers, signature, principal, data)

    def check_novalidate(self, signature_path: Path) -> VerificationReport:
        logger.debug("check-novalidate: %s", signature_path)
        return check_novalidate(self.load_signature(signature_path))
