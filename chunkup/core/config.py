"""Configuration management for chunkup.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from chunkup.core.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from chunkup.core.exceptions import ConfigurationError, ProfileNotFoundError
from chunkup.uploaders.constants import DEFAULT_MAX_IN_FLIGHT

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "chunkup"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "CHUNKUP_URL"
ENV_USER = "CHUNKUP_USER"
ENV_TOKEN = "CHUNKUP_TOKEN"
ENV_PROFILE = "CHUNKUP_PROFILE"
ENV_VERIFY_SSL = "CHUNKUP_VERIFY_SSL"
ENV_TIMEOUT = "CHUNKUP_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for an upload endpoint."""

    url: str = DEFAULT_BASE_URL
    username: Optional[str] = None
    token: Optional[str] = None
    verify_ssl: bool = True
    timeout: int = DEFAULT_TIMEOUT
    workers: int = DEFAULT_MAX_IN_FLIGHT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (unset credentials omitted)."""
        data: dict[str, Any] = {"url": self.url}
        if self.username:
            data["username"] = self.username
        if self.token:
            data["token"] = self.token
        data.update(
            {
                "verify_ssl": self.verify_ssl,
                "timeout": self.timeout,
                "workers": self.workers,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", DEFAULT_BASE_URL),
            username=data.get("username"),
            token=data.get("token"),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            workers=data.get("workers", DEFAULT_MAX_IN_FLIGHT),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

            config.default_profile = data.get("default_profile", "default")
            for name, pdata in (data.get("profiles") or {}).items():
                config.profiles[name] = Profile.from_dict(pdata or {})

        # Environment variable overrides
        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            try:
                timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT)))
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be an integer", field="timeout"
                ) from e

            base = config.profiles.get("default", Profile())
            config.profiles["default"] = Profile(
                url=url,
                username=base.username,
                token=base.token,
                verify_ssl=verify_ssl,
                timeout=timeout,
                workers=base.workers,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        An unconfigured default profile resolves to built-in defaults so the
        tool works from flags and environment alone.

        Raises:
            ProfileNotFoundError: If a named profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            if name == "default":
                return Profile()
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        username: Optional[str] = None,
        token: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_TIMEOUT,
        workers: int = DEFAULT_MAX_IN_FLIGHT,
    ) -> Profile:
        """Add or update a profile."""
        profile = Profile(
            url=url,
            username=username,
            token=token,
            verify_ssl=verify_ssl,
            timeout=timeout,
            workers=workers,
        )
        self.profiles[name] = profile
        return profile


# =============================================================================
# Credentials
# =============================================================================


@dataclass(frozen=True)
class Credentials:
    """Basic-auth credentials for the upload API."""

    username: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, token='***')"


def resolve_credentials(
    profile: Optional[Profile] = None,
    *,
    username: Optional[str] = None,
    token: Optional[str] = None,
) -> Credentials:
    """Resolve credentials from explicit values, environment, then profile.

    Args:
        profile: Profile to fall back to.
        username: Explicit username (e.g. from a CLI flag).
        token: Explicit token (e.g. from a CLI flag).

    Returns:
        Resolved credentials.

    Raises:
        ConfigurationError: If the username or token cannot be resolved.
    """
    user = username or os.getenv(ENV_USER) or (profile.username if profile else None)
    secret = token or os.getenv(ENV_TOKEN) or (profile.token if profile else None)

    if not user or not secret:
        missing = "user" if not user else "token"
        raise ConfigurationError(
            f"Missing {missing}. Provide --user/--token, set {ENV_USER}/{ENV_TOKEN}, "
            "or store them in a config profile.",
            field=missing,
        )
    return Credentials(username=user, token=secret)
