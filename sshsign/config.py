"""Configuration management with Pydantic settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sshsign.utils.hashing import SUPPORTED_HASH_ALGORITHMS

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_keeper_config_candidates(home: Path | None = None) -> list[Path]:
    """Keeper Secrets Manager config locations, in lookup order."""
    home = home if home is not None else Path.home()
    return [
        home / ".keeper" / "ssh" / "config.json",
        home / ".keeper" / "config.json",
    ]


class Settings(BaseSettings):
    """ssh-sign configuration settings.

    Precedence: CLI flag > environment variable > .env file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SSHSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    keeper_config_path: Path | None = Field(
        default=None,
        description="Keeper Secrets Manager config file (defaults to ~/.keeper/ssh/config.json)",
    )

    key_passphrase: SecretStr | None = Field(
        default=None,
        description="Passphrase for encrypted private key files",
    )

    hash_algorithm: str = Field(
        default="sha512",
        description="Digest used for the signed payload (sha256 or sha512)",
    )

    allowed_signers_strict: bool = Field(
        default=True,
        description="Fail on malformed allowed signers lines instead of skipping them",
    )

    verify_signed_data: bool = Field(
        default=True,
        description="Also verify signature bytes against the payload during `verify`",
    )

    log_level: LogLevel = Field(
        default="WARNING",
        description="Log level for diagnostics written to stderr",
    )

    @field_validator("hash_algorithm")
    @classmethod
    def _check_hash_algorithm(cls, value: str) -> str:
        value = value.lower()
        if value not in SUPPORTED_HASH_ALGORITHMS:
            raise ValueError(
                f"unsupported hash algorithm {value!r}; "
                f"choose from {', '.join(SUPPORTED_HASH_ALGORITHMS)}"
            )
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def get_keeper_config_path(self, home: Path | None = None) -> Path | None:
        """Return the Keeper config file to use, or None when none exists."""
        if self.keeper_config_path is not None:
            path = self.keeper_config_path.expanduser()
            return path if path.exists() else None

        for candidate in default_keeper_config_candidates(home):
            if candidate.exists():
                return candidate
        return None

    def get_key_passphrase(self) -> str | None:
        """Plaintext passphrase for encrypted key files, if configured."""
        if self.key_passphrase is None:
            return None
        return self.key_passphrase.get_secret_value()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance (useful for testing)."""
    global _settings
    _settings = settings
