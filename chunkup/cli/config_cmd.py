"""Config commands for chunkup."""

from __future__ import annotations

from typing import Optional

import click

from chunkup.core.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from chunkup.core.config import CONFIG_FILE, Config
from chunkup.core.exceptions import ChunkupError
from chunkup.core.output import print_error, print_json, print_key_value, print_success
from chunkup.core.validation import validate_server_url, validate_timeout, validate_workers
from chunkup.uploaders.constants import DEFAULT_MAX_IN_FLIGHT


@click.group()
def config() -> None:
    """Manage chunkup configuration."""
    pass


@config.command("init")
@click.option("--url", default=DEFAULT_BASE_URL, show_default=True, help="Base API URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--user", "username", default=None, help="Username to store in the profile")
@click.option("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
@click.option("--workers", type=int, default=DEFAULT_MAX_IN_FLIGHT, help="Chunks in flight")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def config_init(
    url: str,
    profile: str,
    username: Optional[str],
    timeout: int,
    workers: int,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Tokens are not stored by this command; pass --token or set
    CHUNKUP_TOKEN when uploading.

    Example:
        chunkup config init --url https://transfer.example.com --user alice
    """
    try:
        url = validate_server_url(url)
        validate_workers(workers)
        validate_timeout(timeout)
        cfg = Config.load() if CONFIG_FILE.exists() else Config()
    except ChunkupError as e:
        print_error(str(e))
        raise SystemExit(1)

    if cfg.has_profile(profile) and not force:
        print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
        raise SystemExit(1)

    cfg.add_profile(
        name=profile,
        url=url,
        username=username,
        timeout=timeout,
        workers=workers,
    )

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "username": username or "-",
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration (tokens are masked)."""
    try:
        cfg = Config.load()
    except ChunkupError as e:
        print_error(str(e))
        raise SystemExit(1)

    if not cfg.profiles:
        print_error("No configuration found. Run 'chunkup config init' first.")
        raise SystemExit(1)

    profiles = {}
    for name, p in cfg.profiles.items():
        data = p.to_dict()
        if "token" in data:
            data["token"] = "***"
        profiles[name] = data

    if output == "json":
        print_json(
            {
                "config_file": str(CONFIG_FILE),
                "default_profile": cfg.default_profile,
                "profiles": profiles,
            }
        )
        return

    print_key_value(
        {"config_file": str(CONFIG_FILE), "default_profile": cfg.default_profile},
        title="Configuration",
    )
    for name, data in profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo()
        click.echo(f"Profile: {name}{marker}")
        print_key_value(data)
