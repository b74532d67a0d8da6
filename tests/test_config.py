import pytest
from pydantic import ValidationError

from sshsign.config import Settings, default_keeper_config_candidates


def test_settings_read_prefixed_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SSHSIGN_HASH_ALGORITHM", "SHA256")
    monkeypatch.setenv("SSHSIGN_ALLOWED_SIGNERS_STRICT", "false")
    monkeypatch.setenv("SSHSIGN_KEY_PASSPHRASE", "hunter2")
    monkeypatch.setenv("SSHSIGN_LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.hash_algorithm == "sha256"
    assert settings.allowed_signers_strict is False
    assert settings.get_key_passphrase() == "hunter2"
    assert settings.log_level == "DEBUG"
    assert "hunter2" not in repr(settings)


def test_settings_reject_unsupported_hash(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationError):
        Settings(hash_algorithm="md5")


def test_keeper_config_prefers_ssh_specific_file(tmp_path):
    ssh_config, shared_config = default_keeper_config_candidates(tmp_path)
    settings = Settings()

    assert settings.get_keeper_config_path(home=tmp_path) is None

    shared_config.parent.mkdir(parents=True)
    shared_config.write_text("{}")
    assert settings.get_keeper_config_path(home=tmp_path) == shared_config

    ssh_config.parent.mkdir(parents=True)
    ssh_config.write_text("{}")
    assert settings.get_keeper_config_path(home=tmp_path) == ssh_config


def test_explicit_keeper_config_path(tmp_path):
    explicit = tmp_path / "ksm.json"
    settings = Settings(keeper_config_path=explicit)

    assert settings.get_keeper_config_path(home=tmp_path) is None
    explicit.write_text("{}")
    assert settings.get_keeper_config_path(home=tmp_path) == explicit
