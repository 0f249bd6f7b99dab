"""Stable public API for building tooling on top of castpair.

This module is the supported integration surface for the CLI, the web front
end and third-party callers.
"""

from __future__ import annotations

from requests import Session

from castpair.core.catalogue import RoomCatalogue, StaticRoomCatalogue, load_room_catalogue
from castpair.core.config import Settings, load_settings
from castpair.core.errors import (
    CastpairError,
    CatalogueError,
    ConfigError,
    InvalidMacError,
    InvalidModeError,
    InvalidRoomIdError,
    MalformedResponseError,
    RemoteError,
    RemoteRejectedError,
    RemoteUnreachableError,
    RoomNotFoundError,
)
from castpair.core.flow import PairingFlow
from castpair.core.mode import ModeCoordinator
from castpair.core.model import (
    CallResult,
    Device,
    FlowFailure,
    FlowState,
    ForwardingMode,
    Pairing,
    PairingOutcome,
    ResolveFailure,
    ResolveResult,
)
from castpair.core.pairings import PairingCoordinator
from castpair.core.qr import render_qr_png
from castpair.core.remote import ControlPlaneClient
from castpair.core.resolver import AddressResolver
from castpair.neighbors.arp import select_neighbor_table
from castpair.neighbors.base import NeighborTable

__all__ = [
    "CastpairError",
    "CatalogueError",
    "ConfigError",
    "InvalidMacError",
    "InvalidModeError",
    "InvalidRoomIdError",
    "MalformedResponseError",
    "RemoteError",
    "RemoteRejectedError",
    "RemoteUnreachableError",
    "RoomNotFoundError",
    "CallResult",
    "Device",
    "FlowFailure",
    "FlowState",
    "ForwardingMode",
    "Pairing",
    "PairingOutcome",
    "ResolveFailure",
    "ResolveResult",
    "Settings",
    "load_settings",
    "Client",
]

_AUTO = object()


class Client:
    """Public client wiring settings into the resolver, coordinators and flow.

    Collaborators can be injected for tests or embedding; anything omitted is
    built from *settings*.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        catalogue: RoomCatalogue | None = None,
        neighbor_table: NeighborTable | None | object = _AUTO,
        session: Session | None = None,
    ) -> None:
        self.settings = settings or Settings()
        if catalogue is None:
            if self.settings.rooms_file is not None:
                catalogue = load_room_catalogue(self.settings.rooms_file)
            else:
                catalogue = StaticRoomCatalogue()
        if neighbor_table is _AUTO:
            neighbor_table = select_neighbor_table()

        self.catalogue = catalogue
        self.resolver = AddressResolver(neighbor_table, timeout_s=self.settings.resolver_timeout_s)  # type: ignore[arg-type]
        remote = ControlPlaneClient(self.settings, session=session)
        self.pairings = PairingCoordinator(remote)
        self.modes = ModeCoordinator(remote)
        self.flow = PairingFlow(
            self.catalogue,
            self.resolver,
            self.pairings,
            pairing_secret=self.settings.pairing_secret,
        )

    def resolve(self, ip: str) -> ResolveResult:
        return self.resolver.resolve(ip)

    def list_pairings(self) -> list[Pairing]:
        return self.pairings.list()

    def add_pairing(self, client_mac: str, device_mac: str) -> CallResult:
        return self.pairings.add(Pairing(client_mac=client_mac, device_mac=device_mac))

    def remove_pairing(self, client_mac: str, device_mac: str) -> CallResult:
        return self.pairings.remove(Pairing(client_mac=client_mac, device_mac=device_mac))

    def get_mode(self) -> ForwardingMode:
        return self.modes.get_mode()

    def set_mode(self, mode: ForwardingMode | str) -> CallResult:
        return self.modes.set_mode(mode)

    def list_rooms(self) -> list[Device]:
        return self.catalogue.all()

    def pair_room(self, room_id: str | int, client_ip: str, signature: str | None = None) -> PairingOutcome:
        return self.flow.run(room_id, client_ip, signature)

    def pairing_url(self, room_id: str | int, origin: str | None = None) -> str:
        origin = self.settings.public_origin or origin
        if not origin:
            raise ConfigError("No public origin configured; pass one or set CASTPAIR_PUBLIC_ORIGIN")
        return self.flow.link_for(room_id, origin)

    def pairing_qr_png(self, room_id: str | int, origin: str | None = None) -> bytes:
        return render_qr_png(self.pairing_url(room_id, origin))
