from __future__ import annotations
import logging
from typing import Iterator, List, Optional, Sequence
from pathlib import Path
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from botocore.exceptions import BotoCoreError, ClientError

from .core import list_entries
from .errors import LocalWriteError, RemoteReadError
from .models import DownloadTarget, ObjectEntry
from .progress import NullProgress, ProgressReporter
from .utils import ensure_dir, human_bytes

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


def _make_dir(path: Path) -> None:
    try:
        ensure_dir(path)
    except OSError as e:
        raise LocalWriteError(f"Cannot create directory {path}: {e}") from e


def _read_chunks(body, key: str, chunk_size: int) -> Iterator[bytes]:
    try:
        for chunk in body.iter_chunks(chunk_size):
            if chunk:
                yield chunk
    except (BotoCoreError, ClientError, OSError) as e:
        raise RemoteReadError(f"Reading {key} failed: {e}") from e


def download_object(
    s3_client,
    bucket: str,
    target: DownloadTarget,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Stream one object into `target.local_path` and return the bytes written.

    Parent directories are created on demand. A partially written file is
    left in place when the transfer fails.
    """
    _make_dir(target.local_path.parent)
    try:
        resp = s3_client.get_object(Bucket=bucket, Key=target.key)
    except (BotoCoreError, ClientError) as e:
        raise RemoteReadError(f"get_object {target.key} failed: {e}") from e

    body = resp["Body"]
    written = 0
    try:
        with open(target.local_path, "wb") as fh:
            for chunk in _read_chunks(body, target.key, chunk_size):
                fh.write(chunk)
                written += len(chunk)
    except OSError as e:
        raise LocalWriteError(f"Writing {target.local_path} failed: {e}") from e
    finally:
        body.close()

    log.debug("Downloaded %s -> %s (%s)", target.key, target.local_path, human_bytes(written))
    return written


def _materialize_sequential(s3_client, bucket, entries, dst_root, progress, chunk_size) -> int:
    done = 0
    for entry in entries:
        target = DownloadTarget.for_entry(entry, dst_root)
        if entry.is_folder_marker:
            _make_dir(target.local_path)
        else:
            download_object(s3_client, bucket, target, chunk_size=chunk_size)
        done += 1
        progress.increment()
    return done


def _materialize_concurrent(s3_client, bucket, entries, dst_root, progress, chunk_size, max_workers) -> int:
    done = 0
    futures: List[Future] = []
    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        try:
            for entry in entries:
                target = DownloadTarget.for_entry(entry, dst_root)
                if entry.is_folder_marker:
                    _make_dir(target.local_path)
                    done += 1
                    progress.increment()
                    continue
                futures.append(ex.submit(download_object, s3_client, bucket, target, chunk_size))
            for f in as_completed(futures):
                f.result()
                done += 1
                progress.increment()
        except BaseException:
            for f in futures:
                f.cancel()
            raise
    return done


def materialize(
    s3_client,
    bucket: str,
    entries: Sequence[ObjectEntry],
    dst_root: str | Path,
    progress: Optional[ProgressReporter] = None,
    max_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """
    Write every entry under `dst_root` in listing order and return the count.

    Folder markers become directories; other entries are streamed to files.
    With max_workers > 1 file downloads run on a bounded thread pool; the
    resulting tree is the same. The first failure aborts the run.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    progress = progress or NullProgress()
    progress.start(len(entries))
    try:
        if max_workers == 1:
            return _materialize_sequential(s3_client, bucket, entries, dst_root, progress, chunk_size)
        return _materialize_concurrent(s3_client, bucket, entries, dst_root, progress, chunk_size, max_workers)
    finally:
        progress.stop()


def download_tree(
    s3_client,
    bucket: str,
    prefix: str = "",
    dst_root: str | Path = ".",
    progress: Optional[ProgressReporter] = None,
    max_workers: int = 1,
    page_size: Optional[int] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    dry_run: bool = False,
) -> int:
    """
    List `prefix` completely, then download it under `dst_root`.

    Returns the number of entries processed (or planned, with dry_run).
    """
    entries = list_entries(s3_client, bucket, prefix=prefix, page_size=page_size)
    if dry_run:
        for entry in entries:
            log.info("Would write %s", DownloadTarget.for_entry(entry, dst_root).local_path)
        return len(entries)

    _make_dir(Path(dst_root))
    count = materialize(
        s3_client,
        bucket,
        entries,
        dst_root,
        progress=progress,
        max_workers=max_workers,
        chunk_size=chunk_size,
    )
    log.info("Materialized %d entries from s3://%s/%s into %s", count, bucket, prefix, dst_root)
    return count
