"""Main CLI entry point for chunkup."""

from __future__ import annotations

import click

from chunkup import __version__
from chunkup.cli.config_cmd import config
from chunkup.cli.upload import upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="chunkup")
def cli() -> None:
    """chunkup - Chunked, deduplicated uploads of large files.

    Splits a file into content-addressed chunks, skips chunks the server
    already has, uploads the rest in parallel, and commits the file.

    Get started:

      chunkup config init --user alice     # Create config file

      chunkup upload PROJ-123 ./big.tar     # Upload a file

    Use --help on any command for more information.
    """
    pass


cli.add_command(config)
cli.add_command(upload)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
