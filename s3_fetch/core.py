from __future__ import annotations
import logging
from typing import Dict, Any, List, Optional, Set, Tuple
import boto3
from botocore.config import Config

from .errors import RemoteListingError, log_and_reraise
from .models import DELIMITER, ListingPage, ObjectEntry

log = logging.getLogger(__name__)


def get_s3_client(
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
    region_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    retries_max_attempts: int = 8,
    retries_mode: str = "standard",
    connect_timeout: int = 10,
    read_timeout: int = 60,
):
    """
    Create a boto3 S3 client from explicit credentials, with retries and timeouts applied.
    """
    cfg = Config(
        retries={"max_attempts": retries_max_attempts, "mode": retries_mode},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )
    session = boto3.Session(
        aws_access_key_id=aws_access_key_id,
        aws_secret_access_key=aws_secret_access_key,
        region_name=region_name,
    )
    return session.client("s3", config=cfg, endpoint_url=endpoint_url)


@log_and_reraise(RemoteListingError)
def list_page(
    s3_client,
    bucket: str,
    prefix: str = "",
    continuation_token: Optional[str] = None,
    delimiter: str = DELIMITER,
    page_size: Optional[int] = None,
) -> ListingPage:
    """
    Fetch one delimiter-scoped page of `prefix`.
    """
    params: Dict[str, Any] = {"Bucket": bucket, "Prefix": prefix, "Delimiter": delimiter}
    if continuation_token:
        params["ContinuationToken"] = continuation_token
    if page_size:
        params["MaxKeys"] = page_size
    log.debug("list_objects_v2 bucket=%s prefix=%r token=%s", bucket, prefix, continuation_token)
    resp = s3_client.list_objects_v2(**params)
    contents = [ObjectEntry.from_s3(obj) for obj in resp.get("Contents", []) or [] if obj.get("Key")]
    prefixes = [cp["Prefix"] for cp in resp.get("CommonPrefixes", []) or [] if cp.get("Prefix")]
    token = resp.get("NextContinuationToken") if resp.get("IsTruncated", True) else None
    return ListingPage(prefix=prefix, contents=contents, common_prefixes=prefixes, continuation_token=token or None)


def list_entries(
    s3_client,
    bucket: str,
    prefix: str = "",
    delimiter: str = DELIMITER,
    page_size: Optional[int] = None,
) -> List[ObjectEntry]:
    """
    Return every object under `prefix`, expanding common prefixes depth-first.

    Order matches a recursive walk: the contents of a page, then each of its
    common prefixes fully expanded, then the next page of the same prefix.
    A stack of pending (prefix, continuation_token) frames replaces recursion.
    """
    entries: List[ObjectEntry] = []
    seen: Set[str] = set()
    pending: List[Tuple[str, Optional[str]]] = [(prefix, None)]
    pages = 0

    while pending:
        current, token = pending.pop()
        page = list_page(
            s3_client,
            bucket,
            prefix=current,
            continuation_token=token,
            delimiter=delimiter,
            page_size=page_size,
        )
        pages += 1
        for entry in page.contents:
            if entry.key in seen:
                continue
            seen.add(entry.key)
            entries.append(entry)

        # resume this prefix only after its children are done
        if page.has_more:
            pending.append((current, page.continuation_token))
        for child in reversed(page.common_prefixes):
            if len(child) <= len(current) or not child.startswith(current):
                log.warning("Skipping common prefix %r reported under %r", child, current)
                continue
            pending.append((child, None))

    log.info("Listed %d entries under s3://%s/%s (%d requests)", len(entries), bucket, prefix, pages)
    return entries
