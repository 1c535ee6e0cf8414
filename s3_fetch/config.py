"""Run configuration resolved from CLI flags and an optional YAML file."""
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from botocore.exceptions import BotoCoreError

from .core import get_s3_client
from .errors import ConfigError
from .utils import read_yaml

DEFAULT_CONFIG = "config/config.yaml"


def _check_int(name: str, value: Any, low: int, high: Optional[int] = None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ConfigError(f"{name} must be {bound}, got {value}")


@dataclass
class FetchConfig:
    """Everything one download run needs; passed explicitly, never global."""

    access_key_id: str
    secret_access_key: str
    bucket: str
    folder: str = ""
    dst: str = "."
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    max_workers: int = 1
    page_size: Optional[int] = None
    chunk_size: int = 1024 * 1024
    dry_run: bool = False
    progress: bool = True
    retries_max_attempts: int = 8
    retries_mode: str = "standard"
    connect_timeout: int = 10
    read_timeout: int = 60

    def __post_init__(self):
        _check_int("max_workers", self.max_workers, 1)
        if self.page_size is not None:
            _check_int("page_size", self.page_size, 1, 1000)
        _check_int("chunk_size", self.chunk_size, 1)
        _check_int("retries_max_attempts", self.retries_max_attempts, 0)
        _check_int("connect_timeout", self.connect_timeout, 1)
        _check_int("read_timeout", self.read_timeout, 1)
        if not self.bucket:
            raise ConfigError("bucket must not be empty")

    @classmethod
    def from_sources(cls, cli_values: Dict[str, Any], cfg: Optional[Dict[str, Any]] = None) -> "FetchConfig":
        """
        Resolve each field with priority: CLI value -> YAML -> default.

        YAML keys are read from the `fetch:` section, client tuning from `aws:`.
        CLI values that are None count as unset. Raises ConfigError on
        out-of-range or mistyped values.
        """
        cfg = cfg or {}
        merged: Dict[str, Any] = {}
        merged.update(cfg.get("aws") or {})
        merged.update(cfg.get("fetch") or {})
        merged.update({k: v for k, v in cli_values.items() if v is not None})
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in merged.items() if k in known})

    def client(self):
        try:
            return get_s3_client(
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                retries_max_attempts=self.retries_max_attempts,
                retries_mode=self.retries_mode,
                connect_timeout=self.connect_timeout,
                read_timeout=self.read_timeout,
            )
        except (ValueError, BotoCoreError) as e:
            raise ConfigError(f"Cannot create S3 client: {e}") from e


def load_config(config_path: Optional[str | Path]) -> Dict[str, Any]:
    """
    Load YAML config if present, otherwise return {}.
    Never crash on missing/empty config.
    """
    path = config_path or DEFAULT_CONFIG
    try:
        cfg = read_yaml(path)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not cfg:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return cfg
