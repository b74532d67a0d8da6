"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sshsign.app import SigningService, VerificationService
from sshsign.app.adapters import (
    FileKeyStoreAdapter,
    FileSystemStorageAdapter,
    KeeperVaultAdapter,
)
from sshsign.app.ports import KeyStorePort, StoragePort
from sshsign.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    storage_port: StoragePort
    key_store_resolver: Callable[[str], KeyStorePort]
    signing_service: SigningService
    verification_service: VerificationService


def build_key_store_resolver(
    file_key_store: KeyStorePort, vault_key_store: KeyStorePort
) -> Callable[[str], KeyStorePort]:
    """Local key files take precedence; any other key id is a vault record UID."""

    def resolve(key_id: str) -> KeyStorePort:
        if Path(key_id).expanduser().is_file():
            logger.debug("Using local key file %s", key_id)
            return file_key_store
        logger.debug("Using vault record %s", key_id)
        return vault_key_store

    return resolve


def bootstrap_application(
    settings: Settings | None = None,
    *,
    vault_key_store: KeyStorePort | None = None,
) -> ApplicationContainer:
    """Create the application container for the given settings."""
    settings = settings or get_settings()
    storage = FileSystemStorageAdapter()

    if vault_key_store is None:
        vault_key_store = KeeperVaultAdapter(config_path=settings.get_keeper_config_path())
    resolver = build_key_store_resolver(
        FileKeyStoreAdapter(passphrase=settings.get_key_passphrase()),
        vault_key_store,
    )

    return ApplicationContainer(
        settings=settings,
        storage_port=storage,
        key_store_resolver=resolver,
        signing_service=SigningService(
            resolver,
            storage,
            hash_algorithm=settings.hash_algorithm,
        ),
        verification_service=VerificationService(
            storage,
            strict_registry=settings.allowed_signers_strict,
        ),
    )
