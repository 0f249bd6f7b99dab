"""MAC address matching and comparison helpers."""

from __future__ import annotations

import re

from castpair.core.errors import InvalidMacError

# Separators are not required to be uniform inside one match; ``arp`` output
# on some platforms is already inconsistent.
MAC_TOKEN_RE = re.compile(r"(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}")


def find_mac(text: str) -> str | None:
    """Return the first MAC-shaped token in *text*, or ``None``."""
    match = MAC_TOKEN_RE.search(text)
    return match.group(0) if match else None


def is_valid_mac(value: str) -> bool:
    return bool(MAC_TOKEN_RE.fullmatch(value.strip()))


def require_mac(value: str | None, *, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidMacError(f"{field} must not be empty")
    stripped = value.strip()
    if not is_valid_mac(stripped):
        raise InvalidMacError(f"{field} '{value}' is not a valid MAC address")
    return stripped


def mac_key(value: str) -> str:
    return value.strip().lower().replace("-", ":")

