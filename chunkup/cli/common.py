"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from chunkup.core.client import TransportClient
from chunkup.core.config import Config, resolve_credentials
from chunkup.core.exceptions import (
    AuthenticationError,
    ChunkupError,
    ConfigurationError,
    ConnectionError,
    ProfileNotFoundError,
)
from chunkup.core.logging import setup_logging
from chunkup.core.output import print_error

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    CONFIG_ERROR = 4


def exit_code_for(error: Exception) -> int:
    """Map an exception to a process exit code."""
    if isinstance(error, AuthenticationError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, ConnectionError):
        return ExitCode.NETWORK_ERROR
    if isinstance(error, ConfigurationError):
        return ExitCode.CONFIG_ERROR
    return ExitCode.GENERAL_ERROR


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.profile_name: Optional[str] = None
        self.quiet: bool = False
        self.verbose: bool = False

    def get_client(
        self,
        *,
        url: Optional[str] = None,
        username: Optional[str] = None,
        token: Optional[str] = None,
    ) -> TransportClient:
        """Build an authenticated transport from flags, environment, and profile.

        Raises:
            ConfigurationError: If no credentials or profile can be resolved.
        """
        if self.config is None:
            self.config = Config.load()

        try:
            profile = self.config.get_profile(self.profile_name)
        except ProfileNotFoundError as e:
            raise ConfigurationError(
                f"Profile '{e.profile}' not found. Run 'chunkup config init' to create one."
            ) from e

        credentials = resolve_credentials(profile, username=username, token=token)

        return TransportClient(
            base_url=url or profile.url,
            username=credentials.username,
            token=credentials.token,
            timeout=profile.timeout,
            verify_ssl=profile.verify_ssl,
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="CHUNKUP_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Only print errors",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable debug logging",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)
        ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Print library errors and exit with the matching code."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except ChunkupError as e:
            print_error(str(e))
            sys.exit(exit_code_for(e))
        except click.ClickException:
            raise
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore
