"""ARP-table lookups through the platform ``arp`` command."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence

from castpair.core.errors import NeighborLaunchError, NeighborLookupError, NeighborTimeoutError
from castpair.neighbors.base import NeighborTable

LOGGER = logging.getLogger(__name__)

_WINDOWS_PREFIXES = ("win", "cygwin", "msys")
_LINUX_PREFIXES = ("linux", "aix")
_BSD_PREFIXES = ("darwin", "freebsd", "openbsd", "netbsd", "dragonfly")


class ArpCommandTable:
    """Runs ``<argv> <ip>`` with stderr folded into stdout."""

    def __init__(self, name: str, argv: Sequence[str]) -> None:
        self.name = name
        self.argv = tuple(argv)

    def command(self, ip: str) -> list[str]:
        return [*self.argv, ip]

    def lookup(self, ip: str, *, timeout_s: float) -> str:
        cmd = self.command(ip)
        LOGGER.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=timeout_s,
            )
        except subprocess.TimeoutExpired as exc:
            # subprocess.run kills the child before re-raising.
            raise NeighborTimeoutError(f"'{' '.join(cmd)}' timed out after {timeout_s:g}s") from exc
        except OSError as exc:
            raise NeighborLaunchError(f"Could not run '{' '.join(cmd)}': {exc}") from exc
        except subprocess.SubprocessError as exc:
            raise NeighborLookupError(f"'{' '.join(cmd)}' failed: {exc}") from exc

        if result.returncode != 0:
            LOGGER.debug("%s exited with %s", cmd[0], result.returncode)
        return result.stdout or ""


def windows_table() -> ArpCommandTable:
    return ArpCommandTable("windows", ["arp", "-a"])


def linux_table() -> ArpCommandTable:
    return ArpCommandTable("linux", ["arp", "-n"])


def bsd_table() -> ArpCommandTable:
    return ArpCommandTable("bsd", ["arp", "-n"])


def select_neighbor_table(platform_id: str | None = None) -> NeighborTable | None:
    """Pick the lookup strategy for *platform_id* (defaults to ``sys.platform``).

    Returns ``None`` for platforms without a known ``arp`` syntax.
    """
    platform_id = (sys.platform if platform_id is None else platform_id).lower()
    if platform_id.startswith(_WINDOWS_PREFIXES):
        return windows_table()
    if platform_id.startswith(_LINUX_PREFIXES):
        return linux_table()
    if platform_id.startswith(_BSD_PREFIXES):
        return bsd_table()
    LOGGER.warning("No neighbor-table lookup available for platform '%s'", platform_id)
    return None
