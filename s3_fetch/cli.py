# cli.py
from __future__ import annotations

import logging
from typing import Optional

import typer

from .config import FetchConfig, load_config
from .download import download_tree
from .errors import S3FetchError, setup_logging
from .progress import NullProgress, TqdmProgress

app = typer.Typer(add_completion=False, help="Download a bucket (or one folder of it) to a local directory")

log = logging.getLogger("s3_fetch.cli")


@app.command()
def fetch(
    access_key_id: str = typer.Option(..., "--accessKeyId", "-a", help="S3 accessKeyId"),
    secret_access_key: str = typer.Option(..., "--secretAccessKey", "-s", help="S3 secretAccessKey"),
    bucket: str = typer.Option(..., "--bucket", "-b", help="S3 bucket"),
    folder: Optional[str] = typer.Option(None, "--folder", "-f", help="S3 folder (default: bucket root)"),
    to: Optional[str] = typer.Option(None, "--to", "-d", help="Local destination directory (default: .)"),
    endpoint_url: Optional[str] = typer.Option(None, "--endpoint-url", help="S3-compatible endpoint URL"),
    region: Optional[str] = typer.Option(None, "--region", help="AWS region (e.g. us-east-1)"),
    max_workers: Optional[int] = typer.Option(
        None, "--max-workers", min=1, help="Concurrent downloads (1 = strictly sequential)"
    ),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1, max=1000, help="Keys per listing request"),
    progress: Optional[bool] = typer.Option(None, "--progress/--no-progress", help="Show progress bar"),
    dry_run: Optional[bool] = typer.Option(None, "--dry-run/--no-dry-run", help="List only; do not download"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
):
    """
    Recursively list the bucket, then download every object, keeping the folder structure.
    """
    setup_logging(level=logging.DEBUG if verbose else logging.INFO)

    try:
        settings = FetchConfig.from_sources(
            {
                "access_key_id": access_key_id,
                "secret_access_key": secret_access_key,
                "bucket": bucket,
                "folder": folder,
                "dst": to,
                "endpoint_url": endpoint_url,
                "region": region,
                "max_workers": max_workers,
                "page_size": page_size,
                "progress": progress,
                "dry_run": dry_run,
            },
            load_config(config),
        )
        s3 = settings.client()
        count = download_tree(
            s3,
            settings.bucket,
            prefix=settings.folder,
            dst_root=settings.dst,
            progress=TqdmProgress() if settings.progress else NullProgress(),
            max_workers=settings.max_workers,
            page_size=settings.page_size,
            chunk_size=settings.chunk_size,
            dry_run=settings.dry_run,
        )
    except S3FetchError as e:
        log.error("Aborted: %s", e)
        raise typer.Exit(code=1)

    if settings.dry_run:
        typer.echo(f"Planned {count} file(s) (dry-run)")
        return
    typer.echo(f"Downloaded {count} file(s)")
