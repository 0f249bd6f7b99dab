"""QR pairing flow: room lookup, client resolution, pairing registration."""

from __future__ import annotations

import logging

from castpair.core.catalogue import RoomCatalogue
from castpair.core.errors import InvalidMacError, InvalidRoomIdError, RoomNotFoundError
from castpair.core.model import Device, FlowFailure, FlowState, Pairing, PairingOutcome
from castpair.core.pairings import PairingCoordinator
from castpair.core.qr import pairing_url, signature_valid
from castpair.core.resolver import AddressResolver

LOGGER = logging.getLogger(__name__)


def parse_room_id(raw: str | int) -> int:
    if isinstance(raw, int):
        room_id = raw
    else:
        text = raw.strip()
        if not text.isascii() or not text.isdigit():
            raise InvalidRoomIdError("Invalid Room ID")
        room_id = int(text)
    if room_id < 1:
        raise InvalidRoomIdError("Invalid Room ID")
    return room_id


def _failed(failure: FlowFailure, message: str, **kwargs) -> PairingOutcome:
    return PairingOutcome(state=FlowState.FAILED, failure=failure, message=message, **kwargs)


class PairingFlow:
    def __init__(
        self,
        catalogue: RoomCatalogue,
        resolver: AddressResolver,
        pairings: PairingCoordinator,
        *,
        pairing_secret: str | None = None,
    ) -> None:
        self.catalogue = catalogue
        self.resolver = resolver
        self.pairings = pairings
        self.pairing_secret = pairing_secret

    def pairable_room(self, raw_room_id: str | int) -> Device:
        """Return the room for *raw_room_id* if it has a device MAC configured."""
        room_id = parse_room_id(raw_room_id)
        device = self.catalogue.get(room_id)
        if device is None or not device.mac_address:
            raise RoomNotFoundError("Room not found or no device MAC configured")
        return device

    def link_for(self, raw_room_id: str | int, origin: str) -> str:
        device = self.pairable_room(raw_room_id)
        return pairing_url(origin, device.id, self.pairing_secret)

    def run(self, raw_room_id: str | int, client_ip: str, signature: str | None = None) -> PairingOutcome:
        try:
            device = self.pairable_room(raw_room_id)
        except InvalidRoomIdError as exc:
            return _failed(FlowFailure.INVALID_ID, str(exc), client_ip=client_ip)
        except RoomNotFoundError as exc:
            LOGGER.info("Pairing requested for unusable room %r", raw_room_id)
            return _failed(FlowFailure.NOT_FOUND, str(exc), client_ip=client_ip)

        if not signature_valid(self.pairing_secret, device.id, signature):
            LOGGER.info("Rejected unsigned or mis-signed link for room %s from %s", device.id, client_ip)
            return _failed(FlowFailure.INVALID_ID, "Invalid pairing link", device=device, client_ip=client_ip)

        resolved = self.resolver.resolve(client_ip)
        if not resolved.found:
            LOGGER.info("Could not resolve %s (%s)", client_ip, resolved.failure.value if resolved.failure else "")
            return _failed(
                FlowFailure.UNRESOLVED_CLIENT,
                f"Could not determine client MAC address from IP: {client_ip}. "
                "This can happen if the device is on a different network subnet.",
                device=device,
                client_ip=client_ip,
            )

        try:
            pairing = Pairing(client_mac=resolved.mac, device_mac=device.mac_address)
        except InvalidMacError as exc:
            return _failed(FlowFailure.NOT_FOUND, str(exc), device=device, client_ip=client_ip)

        result = self.pairings.add(pairing)
        if not result.ok:
            return _failed(
                FlowFailure.REMOTE_ERROR,
                f"The pairing could not be registered with the forwarding service ({result.error.value}).",
                device=device,
                client_ip=client_ip,
                client_mac=pairing.client_mac,
            )

        return PairingOutcome(
            state=FlowState.SUCCEEDED,
            message=f"Your device ({pairing.client_mac}) has been paired with {device.name}.",
            device=device,
            client_ip=client_ip,
            client_mac=pairing.client_mac,
        )
