"""Progress reporting used while materializing a listing."""
from __future__ import annotations
from typing import Optional

from tqdm import tqdm


class ProgressReporter:
    """Interface: `start` and `stop` once per run, `increment` once per entry."""

    def start(self, total: int) -> None:
        pass

    def increment(self) -> None:
        pass

    def stop(self) -> None:
        pass


class NullProgress(ProgressReporter):
    """Reports nothing."""


class TqdmProgress(ProgressReporter):
    def __init__(self, desc: str = "Download", unit: str = "obj", **tqdm_kwargs):
        self._desc = desc
        self._unit = unit
        self._kwargs = tqdm_kwargs
        self._bar: Optional[tqdm] = None

    def start(self, total: int) -> None:
        self._bar = tqdm(total=total, desc=self._desc, unit=self._unit, **self._kwargs)

    def increment(self) -> None:
        if self._bar is not None:
            self._bar.update(1)

    def stop(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
