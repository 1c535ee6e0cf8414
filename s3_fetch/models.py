"""Data models for bucket listings and download targets."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Optional

from .errors import LocalWriteError

DELIMITER = "/"


@dataclass(frozen=True)
class ObjectEntry:
    """One object (file or folder marker) found under the requested prefix."""

    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None

    @property
    def is_folder_marker(self) -> bool:
        return self.key.endswith(DELIMITER)

    @classmethod
    def from_s3(cls, obj: Dict[str, Any]) -> "ObjectEntry":
        return cls(key=obj["Key"], size=obj.get("Size"), last_modified=obj.get("LastModified"))


@dataclass
class ListingPage:
    """A single `list_objects_v2` response for one prefix."""

    prefix: str
    contents: List[ObjectEntry] = field(default_factory=list)
    common_prefixes: List[str] = field(default_factory=list)
    continuation_token: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.continuation_token is not None


@dataclass(frozen=True)
class DownloadTarget:
    key: str
    local_path: Path

    @classmethod
    def for_entry(cls, entry: ObjectEntry, dst_root: str | Path) -> "DownloadTarget":
        """Map an entry key onto `dst_root`, refusing keys that escape it."""
        rel = PurePosixPath(entry.key)
        if rel.is_absolute() or ".." in rel.parts:
            raise LocalWriteError(f"Refusing to write outside destination: {entry.key!r}")
        return cls(key=entry.key, local_path=Path(dst_root).joinpath(*rel.parts))
