"""Read-only room catalogue."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from castpair.core.documents import read_yaml, validate_document
from castpair.core.errors import CatalogueError, InvalidMacError
from castpair.core.mac import require_mac
from castpair.core.model import Device

LOGGER = logging.getLogger(__name__)


class RoomCatalogue(Protocol):
    def get(self, room_id: int) -> Device | None:
        """Return the room with *room_id*, or ``None``."""

    def all(self) -> list[Device]:
        """Return every room ordered by id."""


class StaticRoomCatalogue:
    def __init__(self, devices: Iterable[Device] = ()) -> None:
        self._devices: dict[int, Device] = {}
        for device in devices:
            if device.id in self._devices:
                raise CatalogueError(f"Duplicate room id {device.id}")
            self._devices[device.id] = device

    def get(self, room_id: int) -> Device | None:
        return self._devices.get(room_id)

    def all(self) -> list[Device]:
        return [self._devices[k] for k in sorted(self._devices)]


def _build_device(entry: dict, source: Path) -> Device:
    mac = entry.get("device_mac")
    if mac is not None and not str(mac).strip():
        mac = None
    if mac is not None:
        try:
            mac = require_mac(mac, field=f"rooms[{entry['id']}].device_mac")
        except InvalidMacError as exc:
            raise CatalogueError(f"{source}: {exc}") from exc
    return Device(id=entry["id"], name=entry["name"], mac_address=mac)


def load_room_catalogue(path: Path) -> StaticRoomCatalogue:
    doc = read_yaml(path, error_cls=CatalogueError)
    validate_document(doc, "rooms.schema.json", path, error_cls=CatalogueError)
    catalogue = StaticRoomCatalogue(_build_device(entry, path) for entry in doc["rooms"])
    LOGGER.info("Loaded %d room(s) from %s", len(catalogue.all()), path)
    return catalogue
