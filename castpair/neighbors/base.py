"""Neighbor-table interfaces."""

from __future__ import annotations

from typing import Protocol


class NeighborTable(Protocol):
    name: str

    def lookup(self, ip: str, *, timeout_s: float) -> str:
        """Return the raw neighbor-table output for *ip*."""
