"""Tests for chunkup configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from chunkup.core.client import DEFAULT_BASE_URL
from chunkup.core.config import Config, Credentials, Profile, resolve_credentials
from chunkup.core.exceptions import ConfigurationError, ProfileNotFoundError


# =============================================================================
# Profile Tests
# =============================================================================


class TestProfile:
    """Tests for Profile dataclass."""

    def test_defaults(self) -> None:
        profile = Profile()
        assert profile.url == DEFAULT_BASE_URL
        assert profile.username is None
        assert profile.token is None
        assert profile.verify_ssl is True
        assert profile.timeout == 30
        assert profile.workers == 8

    def test_to_dict_omits_unset_credentials(self) -> None:
        data = Profile(url="https://transfer.example.com").to_dict()
        assert "username" not in data
        assert "token" not in data
        assert data["url"] == "https://transfer.example.com"

    def test_from_dict(self) -> None:
        profile = Profile.from_dict(
            {"url": "https://transfer.example.com", "username": "alice", "workers": 2}
        )
        assert profile.username == "alice"
        assert profile.workers == 2
        assert profile.timeout == 30


# =============================================================================
# Config Tests
# =============================================================================


class TestConfig:
    """Tests for Config loading and lookup."""

    def test_load_from_file(self, temp_dir: Path, sample_config_yaml: str) -> None:
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)

        config = Config.load(path)

        assert config.default_profile == "test"
        assert set(config.profiles) == {"test", "production"}
        test = config.get_profile()
        assert test.url == "https://transfer-test.example.com"
        assert test.username == "alice"
        assert test.verify_ssl is False
        assert test.workers == 4

    def test_load_missing_file(self, temp_dir: Path) -> None:
        config = Config.load(temp_dir / "missing.yaml")
        assert config.profiles == {}
        assert config.get_profile().url == DEFAULT_BASE_URL

    def test_load_malformed_file(self, temp_dir: Path) -> None:
        path = temp_dir / "config.yaml"
        path.write_text("profiles: [unclosed")

        with pytest.raises(ConfigurationError):
            Config.load(path)

    def test_env_overrides(
        self, temp_dir: Path, sample_config_yaml: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)
        monkeypatch.setenv("CHUNKUP_URL", "https://env.example.com")
        monkeypatch.setenv("CHUNKUP_TIMEOUT", "90")
        monkeypatch.setenv("CHUNKUP_PROFILE", "default")

        config = Config.load(path)

        assert config.default_profile == "default"
        profile = config.get_profile()
        assert profile.url == "https://env.example.com"
        assert profile.timeout == 90

    def test_env_timeout_must_be_integer(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CHUNKUP_URL", "https://env.example.com")
        monkeypatch.setenv("CHUNKUP_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError):
            Config.load(temp_dir / "missing.yaml")

    def test_unknown_profile(self) -> None:
        with pytest.raises(ProfileNotFoundError):
            Config().get_profile("staging")

    def test_save_and_reload(self, temp_dir: Path) -> None:
        path = temp_dir / "nested" / "config.yaml"
        config = Config()
        config.add_profile("work", url="https://transfer.example.com", username="bob", workers=3)
        config.default_profile = "work"

        config.save(path)
        loaded = Config.load(path)

        assert loaded.default_profile == "work"
        assert loaded.has_profile("work")
        assert loaded.get_profile().username == "bob"
        assert loaded.get_profile().workers == 3


# =============================================================================
# Credentials Tests
# =============================================================================


class TestResolveCredentials:
    """Tests for credential precedence."""

    def test_explicit_beats_env_and_profile(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHUNKUP_USER", "env-user")
        monkeypatch.setenv("CHUNKUP_TOKEN", "env-token")
        profile = Profile(username="profile-user", token="profile-token")

        creds = resolve_credentials(profile, username="flag-user", token="flag-token")

        assert creds == Credentials("flag-user", "flag-token")

    def test_env_beats_profile(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHUNKUP_TOKEN", "env-token")
        profile = Profile(username="profile-user", token="profile-token")

        creds = resolve_credentials(profile)

        assert creds == Credentials("profile-user", "env-token")

    def test_missing_token(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_credentials(Profile(username="alice"))
        assert exc_info.value.field == "token"

    def test_repr_masks_token(self) -> None:
        assert "s3cret" not in repr(Credentials("alice", "s3cret"))
