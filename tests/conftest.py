from __future__ import annotations

import json as jsonlib
from typing import Any

import pytest

from castpair.core.config import Settings
from castpair.core.model import Device


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else jsonlib.dumps(body))

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeControlPlane:
    """In-memory stand-in for the control plane's ``requests.Session``."""

    def __init__(self) -> None:
        self.pairings: list[dict[str, str]] = []
        self.mode = "Auto"
        self.calls: list[tuple[str, str, Any]] = []
        self.failure: type[Exception] | None = None
        self.duplicate_status = 409
        self.missing_status = 404
        self.pairings_body: Any = None
        self.mode_body: Any = None
        self.status_override: dict[tuple[str, str], int] = {}

    def request(self, method: str, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        path = "/" + url.split("/api/", 1)[1]
        self.calls.append((method, path, json))
        if self.failure is not None:
            raise self.failure(f"simulated {self.failure.__name__}")
        override = self.status_override.get((method, path))
        if override is not None:
            return FakeResponse(override, text="rejected")

        if path == "/pairings":
            if method == "GET":
                return FakeResponse(200, self.pairings if self.pairings_body is None else self.pairings_body)
            if method == "POST":
                if json in self.pairings:
                    return FakeResponse(self.duplicate_status, text="duplicate pairing")
                self.pairings.append(json)
                return FakeResponse(201, text="")
            if method == "DELETE":
                if json not in self.pairings:
                    return FakeResponse(self.missing_status, text="no such pairing")
                self.pairings.remove(json)
                return FakeResponse(204, text="")
        if path == "/mode":
            if method == "GET":
                return FakeResponse(200, {"mode": self.mode} if self.mode_body is None else self.mode_body)
            if method == "POST":
                self.mode = json["mode"]
                return FakeResponse(200, text="")
        return FakeResponse(404, text="not found")


class FakeNeighborTable:
    name = "fake"

    def __init__(self, outputs: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self.outputs = outputs or {}
        self.error = error
        self.calls: list[tuple[str, float]] = []

    def lookup(self, ip: str, *, timeout_s: float) -> str:
        self.calls.append((ip, timeout_s))
        if self.error is not None:
            raise self.error
        return self.outputs.get(ip, f"? ({ip}) at <incomplete> on eth0\n")


def linux_arp_line(ip: str, mac: str) -> str:
    return (
        "Address                  HWtype  HWaddress           Flags Mask            Iface\n"
        f"{ip:<24} ether   {mac}   C                     eth0\n"
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(control_plane_url="http://control.test:3000")


@pytest.fixture
def control_plane() -> FakeControlPlane:
    return FakeControlPlane()


@pytest.fixture
def rooms() -> list[Device]:
    return [
        Device(id=1, name="Living Room", mac_address="AA:BB:CC:DD:EE:FF"),
        Device(id=2, name="Kitchen", mac_address=None),
    ]

