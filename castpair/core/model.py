"""Core data models used across resolver, coordinators, flow, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from castpair.core.errors import InvalidModeError
from castpair.core.mac import mac_key, require_mac


@dataclass(frozen=True)
class Pairing:
    client_mac: str
    device_mac: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "client_mac", require_mac(self.client_mac, field="client_mac"))
        object.__setattr__(self, "device_mac", require_mac(self.device_mac, field="device_mac"))

    @property
    def key(self) -> tuple[str, str]:
        return mac_key(self.client_mac), mac_key(self.device_mac)

    def same_as(self, other: Pairing) -> bool:
        return self.key == other.key

    def to_dict(self) -> dict[str, str]:
        return {"client_mac": self.client_mac, "device_mac": self.device_mac}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pairing:
        return cls(client_mac=data["client_mac"], device_mac=data["device_mac"])


class ForwardingMode(Enum):
    AUTO = "Auto"
    USERSPACE = "Userspace"
    XDP = "Xdp"
    UNKNOWN = "Unknown"

    @classmethod
    def writable(cls) -> tuple[ForwardingMode, ...]:
        return (cls.AUTO, cls.USERSPACE, cls.XDP)

    @classmethod
    def parse(cls, value: str) -> ForwardingMode:
        """Look up a mode by its wire value, ignoring case.

        Raises :class:`InvalidModeError` for anything outside the enumeration.
        """
        lowered = value.strip().lower()
        for mode in cls:
            if mode.value.lower() == lowered:
                return mode
        allowed = ", ".join(m.value for m in cls.writable())
        raise InvalidModeError(f"Unknown forwarding mode '{value}'. Allowed: {allowed}")


@dataclass(frozen=True)
class Device:
    id: int
    name: str
    mac_address: str | None = None


class ResolveFailure(Enum):
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    LAUNCH_FAILED = "launch_failed"
    TIMEOUT = "timeout"
    NO_MATCH = "no_match"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True)
class ResolveResult:
    ip: str
    mac: str | None = None
    failure: ResolveFailure | None = None
    detail: str | None = None

    @property
    def found(self) -> bool:
        return self.mac is not None


class RemoteErrorKind(Enum):
    UNREACHABLE = "unreachable"
    REJECTED = "rejected"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class CallResult:
    ok: bool
    error: RemoteErrorKind | None = None
    detail: str | None = None
    already_applied: bool = False

    @classmethod
    def success(cls, *, already_applied: bool = False) -> CallResult:
        return cls(ok=True, already_applied=already_applied)

    @classmethod
    def failure(cls, error: RemoteErrorKind, detail: str) -> CallResult:
        return cls(ok=False, error=error, detail=detail)


class FlowState(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FlowFailure(Enum):
    INVALID_ID = "invalid_id"
    NOT_FOUND = "not_found"
    UNRESOLVED_CLIENT = "unresolved_client"
    REMOTE_ERROR = "remote_error"


@dataclass(frozen=True)
class PairingOutcome:
    state: FlowState
    message: str
    failure: FlowFailure | None = None
    device: Device | None = None
    client_ip: str | None = None
    client_mac: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is FlowState.SUCCEEDED
