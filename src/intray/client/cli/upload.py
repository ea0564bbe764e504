"""Upload and ping commands for intray CLI.

Commands:
- upload: Upload files to an intray server
- ping: Check that the server answers
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Any

import click

from intray.client.cli.config import load_config
from intray.core.config import ServerConfig
from intray.core.types import InvalidConfig


def resolve_server_config(
    server: str | None,
    timeout: float | None,
    stored: dict[str, Any],
) -> ServerConfig:
    """Build a ServerConfig from CLI options, falling back to the config file.

    Raises:
        click.UsageError: If no server URL is known or a value is invalid.
    """
    server_url = server or stored.get("server_url")
    if not server_url:
        raise click.UsageError(
            "No server configured. Pass --server or run 'intray config set server_url URL'."
        )
    try:
        return ServerConfig(
            server_url=server_url,
            timeout=timeout if timeout is not None else float(stored.get("timeout", 30.0)),
        )
    except (InvalidConfig, TypeError, ValueError) as e:
        raise click.UsageError(f"Invalid server configuration: {e}") from e


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--server", "-s", help="Server URL (defaults to the configured one).")
@click.option("--chunk-size", type=int, help="Chunk size in bytes.")
@click.option("--workers", "worker_count", type=int, help="Number of concurrent uploads.")
@click.option("--retries", "chunk_retry_limit", type=int, help="Attempts per chunk.")
@click.option(
    "--oneshot-threshold",
    type=int,
    help="Send files up to this size in a single request (0 disables).",
)
@click.option("--timeout", type=float, help="Request timeout in seconds.")
@click.option("--no-progress", is_flag=True, help="Only print final results.")
def upload(
    files: tuple[Path, ...],
    server: str | None,
    chunk_size: int | None,
    worker_count: int | None,
    chunk_retry_limit: int | None,
    oneshot_threshold: int | None,
    timeout: float | None,
    no_progress: bool,
) -> None:
    """Upload FILES to the server.

    Files are queued in the given order and uploaded concurrently,
    each one chunk by chunk.
    """
    from intray.client.api import IntrayClient
    from intray.client.upload import UploadCallbacks, UploadEngine, UploadError
    from intray.core.config import UploadConfig

    stored = load_config()
    server_config = resolve_server_config(server, timeout, stored)

    overrides = {
        "chunk_size": chunk_size,
        "worker_count": worker_count,
        "chunk_retry_limit": chunk_retry_limit,
        "oneshot_threshold": oneshot_threshold,
    }
    try:
        upload_config = UploadConfig.from_dict(
            {**stored, **{k: v for k, v in overrides.items() if v is not None}}
        )
    except (InvalidConfig, TypeError) as e:
        raise click.UsageError(str(e)) from e

    # Callbacks run on worker threads
    output_lock = threading.Lock()
    names: dict[int, str] = {}
    failures: dict[int, UploadError] = {}
    done: list[int] = []

    def on_progress(task_id: int, fraction: float) -> None:
        if no_progress:
            return
        with output_lock:
            click.echo(f"  [{task_id}] {names.get(task_id, '?')}: {fraction:.1%}")

    def on_done(task_id: int, elapsed_ms: float) -> None:
        with output_lock:
            done.append(task_id)
            click.echo(f"  ✓ {names.get(task_id, '?')} ({elapsed_ms / 1000:.2f}s)")

    def on_failed(task_id: int, error: UploadError) -> None:
        with output_lock:
            failures[task_id] = error
            click.echo(f"  ✗ {names.get(task_id, '?')}")

    callbacks = UploadCallbacks(on_progress=on_progress, on_done=on_done, on_failed=on_failed)

    click.echo(f"Uploading {len(files)} file(s) to {server_config.server_url}...")

    with IntrayClient(server_config) as client:
        engine = UploadEngine(client, upload_config, callbacks)
        with output_lock:
            for path in files:
                task = engine.submit(path)
                names[task.id] = task.file.name

        engine.start()
        try:
            engine.wait()
        except KeyboardInterrupt:
            click.echo("\nStopping after the current uploads...")
        finally:
            engine.stop()

    if failures:
        click.echo(click.style("\nErrors:", fg="red"))
        for task_id, error in sorted(failures.items()):
            click.echo(f"  ✗ {names[task_id]}: {error}")

    click.echo(f"\n{len(done)} uploaded, {len(failures)} failed.")
    if failures or len(done) != len(files):
        sys.exit(1)


@click.command()
@click.option("--server", "-s", help="Server URL (defaults to the configured one).")
@click.option("--timeout", type=float, help="Request timeout in seconds.")
def ping(server: str | None, timeout: float | None) -> None:
    """Check that the server answers."""
    from intray.client.api import IntrayClient

    server_config = resolve_server_config(server, timeout, load_config())

    with IntrayClient(server_config) as client:
        if client.health_check():
            click.echo(f"Server {server_config.server_url} is up.")
            return

    click.echo(f"Error: server {server_config.server_url} is unreachable.", err=True)
    sys.exit(1)
