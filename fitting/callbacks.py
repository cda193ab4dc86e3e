"""Grid-search callback interfaces."""

from __future__ import annotations

from typing import Protocol


class RowCallback(Protocol):
    def __call__(self, row: int, metrics: dict) -> None:
        ...
