"""Pairing registration against the control plane."""

from __future__ import annotations

import logging

from castpair.core.documents import schema_errors
from castpair.core.errors import InvalidMacError, MalformedResponseError, RemoteError, RemoteRejectedError
from castpair.core.model import CallResult, Pairing
from castpair.core.remote import ControlPlaneClient, failure_result

LOGGER = logging.getLogger(__name__)

_PAIRINGS_PATH = "/pairings"


class PairingCoordinator:
    """Adds, removes and lists pairings. No state is kept locally."""

    def __init__(self, client: ControlPlaneClient) -> None:
        self.client = client

    def add(self, pairing: Pairing) -> CallResult:
        try:
            self.client.send_json("POST", _PAIRINGS_PATH, pairing.to_dict())
        except RemoteRejectedError as exc:
            if exc.status_code == 409 or self._contains(pairing):
                LOGGER.info("Pairing %s -> %s already registered", pairing.client_mac, pairing.device_mac)
                return CallResult.success(already_applied=True)
            LOGGER.warning("Adding pairing failed: %s", exc)
            return failure_result(exc)
        except RemoteError as exc:
            LOGGER.warning("Adding pairing failed: %s", exc)
            return failure_result(exc)
        LOGGER.info("Paired %s -> %s", pairing.client_mac, pairing.device_mac)
        return CallResult.success()

    def remove(self, pairing: Pairing) -> CallResult:
        try:
            self.client.send_json("DELETE", _PAIRINGS_PATH, pairing.to_dict())
        except RemoteRejectedError as exc:
            if exc.status_code in (404, 410) or self._absent(pairing):
                LOGGER.info("Pairing %s -> %s was not registered", pairing.client_mac, pairing.device_mac)
                return CallResult.success(already_applied=True)
            LOGGER.warning("Removing pairing failed: %s", exc)
            return failure_result(exc)
        except RemoteError as exc:
            LOGGER.warning("Removing pairing failed: %s", exc)
            return failure_result(exc)
        LOGGER.info("Unpaired %s -> %s", pairing.client_mac, pairing.device_mac)
        return CallResult.success()

    def list(self) -> list[Pairing]:
        try:
            return self._fetch()
        except RemoteError as exc:
            LOGGER.warning("Could not list pairings: %s", exc)
            return []

    def _fetch(self) -> list[Pairing]:
        doc = self.client.get_json(_PAIRINGS_PATH)
        problem = schema_errors(doc, "pairings.schema.json")
        if problem:
            raise MalformedResponseError(f"Pairing list does not validate: {problem}")
        try:
            return [Pairing.from_dict(item) for item in doc]
        except InvalidMacError as exc:
            raise MalformedResponseError(f"Pairing list contains an invalid MAC: {exc}") from exc

    def _contains(self, pairing: Pairing) -> bool:
        try:
            current = self._fetch()
        except RemoteError:
            return False
        return any(p.same_as(pairing) for p in current)

    def _absent(self, pairing: Pairing) -> bool:
        try:
            current = self._fetch()
        except RemoteError:
            return False
        return not any(p.same_as(pairing) for p in current)
