"""Application layer for ssh-sign.

This layer orchestrates the SSHSIG core without direct filesystem or network
I/O. All side effects are delegated to adapters via port interfaces.
"""

__all__ = [
    "SigningService",
    "VerificationService",
]

from sshsign.app.signing_service import SigningService
from sshsign.app.verification_service import VerificationService
