"""Client IP to MAC resolution through the local neighbor table."""

from __future__ import annotations

import ipaddress
import logging

from castpair.core.errors import NeighborLaunchError, NeighborLookupError, NeighborTimeoutError
from castpair.core.mac import find_mac
from castpair.core.model import ResolveFailure, ResolveResult
from castpair.neighbors.base import NeighborTable

LOGGER = logging.getLogger(__name__)


def normalize_ip(raw: str) -> str | None:
    """Return *raw* as a plain IP string, or ``None`` when it is not one.

    IPv4-mapped IPv6 addresses (``::ffff:a.b.c.d``) are unwrapped because the
    ARP table only knows the IPv4 form.
    """
    try:
        address = ipaddress.ip_address(raw.strip())
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return str(address.ipv4_mapped)
    return str(address)


class AddressResolver:
    def __init__(self, neighbor_table: NeighborTable | None, *, timeout_s: float = 3.0) -> None:
        self.neighbor_table = neighbor_table
        self.timeout_s = timeout_s

    def resolve(self, ip: str) -> ResolveResult:
        if self.neighbor_table is None:
            return ResolveResult(
                ip=ip,
                failure=ResolveFailure.UNSUPPORTED_PLATFORM,
                detail="MAC lookup is not supported on this platform",
            )

        target = normalize_ip(ip or "")
        if target is None:
            LOGGER.info("Refusing to look up malformed address %r", ip)
            return ResolveResult(ip=ip, failure=ResolveFailure.NO_MATCH, detail="not an IP address")

        try:
            output = self.neighbor_table.lookup(target, timeout_s=self.timeout_s)
        except NeighborTimeoutError as exc:
            LOGGER.warning("%s", exc)
            return ResolveResult(ip=ip, failure=ResolveFailure.TIMEOUT, detail=str(exc))
        except NeighborLaunchError as exc:
            LOGGER.warning("%s", exc)
            return ResolveResult(ip=ip, failure=ResolveFailure.LAUNCH_FAILED, detail=str(exc))
        except NeighborLookupError as exc:
            LOGGER.warning("%s", exc)
            return ResolveResult(ip=ip, failure=ResolveFailure.EXECUTION_ERROR, detail=str(exc))

        mac = find_mac(output)
        if mac is None:
            LOGGER.info("No neighbor entry for %s", target)
            return ResolveResult(ip=ip, failure=ResolveFailure.NO_MATCH, detail="no neighbor-table entry")

        LOGGER.debug("Resolved %s to %s", target, mac)
        return ResolveResult(ip=ip, mac=mac)
