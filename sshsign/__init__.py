"""ssh-sign - SSHSIG commit signing and verification backed by a secrets vault.

Drop-in ``gpg.ssh.program`` for git: signs commits with keys held in Keeper
Secrets Manager (or local key files) and answers git's verification stages.
"""

__version__ = "0.1.0"
__author__ = "ssh-sign Contributors"

from sshsign.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
