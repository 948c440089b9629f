"""Upload command for chunkup."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from chunkup.cli.common import Context, global_options, handle_errors
from chunkup.core.config import Config
from chunkup.core.output import create_progress, print_key_value, print_success
from chunkup.core.validation import validate_workers
from chunkup.models.progress import OperationPhase, UploadProgress
from chunkup.uploaders.constants import MB


@click.command("upload")
@click.argument("resource_key")
@click.argument(
    "file_path",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option("--url", default=None, help="Base API URL (overrides profile)")
@click.option("--user", "username", default=None, help="Username (overrides env and profile)")
@click.option("--token", default=None, help="Auth token (overrides env and profile)")
@click.option("--workers", type=int, default=None, help="Chunks in flight at once (default: 8)")
@click.option(
    "--chunk-size-mb",
    type=click.IntRange(min=1),
    default=None,
    help="Force a chunk size in MB instead of the size-based tier",
)
@global_options
@handle_errors
def upload(
    ctx: Context,
    resource_key: str,
    file_path: Path,
    url: Optional[str],
    username: Optional[str],
    token: Optional[str],
    workers: Optional[int],
    chunk_size_mb: Optional[int],
) -> None:
    """Upload FILE_PATH to RESOURCE_KEY in content-addressed chunks.

    Chunks the server already holds are skipped, so re-running a failed
    upload only sends what is missing.

    Example:
        chunkup upload PROJ-123 ./dump.tar.gz
    """
    from chunkup.services.uploads import UploadService

    config = ctx.config or Config.load()
    profile = config.get_profile(ctx.profile_name)
    workers = validate_workers(workers if workers is not None else profile.workers)
    chunk_size = chunk_size_mb * MB if chunk_size_mb is not None else None

    with ctx.get_client(url=url, username=username, token=token) as client:
        service = UploadService(client)

        if ctx.quiet:
            summary = service.upload_file(
                file_path, resource_key, chunk_size=chunk_size, workers=workers
            )
        else:
            with create_progress() as progress:
                task = progress.add_task("Uploading", total=None)

                def on_progress(p: UploadProgress) -> None:
                    if p.phase == OperationPhase.PREPARING:
                        progress.update(task, total=p.total)
                    elif p.phase == OperationPhase.UPLOADING:
                        progress.update(task, completed=p.current)
                    elif p.phase == OperationPhase.FINALIZING:
                        progress.update(task, description="Finalizing")

                summary = service.upload_file(
                    file_path,
                    resource_key,
                    chunk_size=chunk_size,
                    workers=workers,
                    progress_callback=on_progress,
                )

    if not ctx.quiet:
        print_success(f"Successfully uploaded {file_path} to {resource_key}")
        print_key_value(summary.to_dict())
