"""Forwarding-mode reads and writes against the control plane."""

from __future__ import annotations

import logging

from castpair.core.documents import schema_errors
from castpair.core.errors import InvalidModeError, RemoteError
from castpair.core.model import CallResult, ForwardingMode
from castpair.core.remote import ControlPlaneClient, failure_result

LOGGER = logging.getLogger(__name__)

_MODE_PATH = "/mode"


def writable_mode(mode: ForwardingMode | str) -> ForwardingMode:
    """Coerce *mode* to a mode that may be sent to the control plane."""
    if isinstance(mode, str):
        mode = ForwardingMode.parse(mode)
    if mode not in ForwardingMode.writable():
        allowed = ", ".join(m.value for m in ForwardingMode.writable())
        raise InvalidModeError(f"Mode '{mode.value}' cannot be set. Allowed: {allowed}")
    return mode


class ModeCoordinator:
    def __init__(self, client: ControlPlaneClient) -> None:
        self.client = client

    def get_mode(self) -> ForwardingMode:
        try:
            doc = self.client.get_json(_MODE_PATH)
        except RemoteError as exc:
            LOGGER.warning("Could not read forwarding mode: %s", exc)
            return ForwardingMode.UNKNOWN

        problem = schema_errors(doc, "mode.schema.json")
        if problem:
            LOGGER.warning("Mode status does not validate: %s", problem)
            return ForwardingMode.UNKNOWN
        try:
            return ForwardingMode.parse(doc["mode"])
        except InvalidModeError:
            LOGGER.warning("Control plane reported unrecognised mode %r", doc["mode"])
            return ForwardingMode.UNKNOWN

    def set_mode(self, mode: ForwardingMode | str) -> CallResult:
        mode = writable_mode(mode)
        try:
            self.client.send_json("POST", _MODE_PATH, {"mode": mode.value})
        except RemoteError as exc:
            LOGGER.warning("Setting mode failed: %s", exc)
            return failure_result(exc)
        LOGGER.info("Forwarding mode set to %s", mode.value)
        return CallResult.success()
