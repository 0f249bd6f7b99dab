from __future__ import annotations

from dataclasses import replace

import pytest
import requests

from castpair.api import Client
from castpair.core.catalogue import StaticRoomCatalogue
from castpair.core.config import Settings
from castpair.core.qr import sign_room
from castpair.web import create_app
from conftest import FakeControlPlane, FakeNeighborTable, linux_arp_line

CLIENT_IP = "192.168.1.23"


@pytest.fixture
def table() -> FakeNeighborTable:
    return FakeNeighborTable({CLIENT_IP: linux_arp_line(CLIENT_IP, "11:22:33:44:55:66")})


def _client(settings: Settings, control_plane: FakeControlPlane, rooms, table: FakeNeighborTable) -> Client:
    return Client(
        settings,
        catalogue=StaticRoomCatalogue(rooms),
        neighbor_table=table,
        session=control_plane,  # type: ignore[arg-type]
    )


def test_pair_room_success(settings, control_plane, rooms, table) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))

    response = app.test_client().get("/pair-room/1", environ_base={"REMOTE_ADDR": CLIENT_IP})

    assert response.status_code == 200
    assert b"Pairing Successful!" in response.data
    assert b"11:22:33:44:55:66" in response.data
    assert control_plane.pairings == [{"client_mac": "11:22:33:44:55:66", "device_mac": "AA:BB:CC:DD:EE:FF"}]


@pytest.mark.parametrize(
    ("path", "status"),
    [("/pair-room/abc", 400), ("/pair-room/2", 404), ("/pair-room/42", 404)],
)
def test_pair_room_client_errors(settings, control_plane, rooms, table, path: str, status: int) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))
    response = app.test_client().get(path, environ_base={"REMOTE_ADDR": CLIENT_IP})
    assert response.status_code == status
    assert table.calls == []


def test_pair_room_unresolved_client(settings, control_plane, rooms, table) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))

    response = app.test_client().get("/pair-room/1", environ_base={"REMOTE_ADDR": "10.9.9.9"})

    assert response.status_code == 500
    assert b"different network subnet" in response.data


def test_pair_room_remote_failure(settings, control_plane, rooms, table) -> None:
    control_plane.failure = requests.ConnectionError
    app = create_app(_client(settings, control_plane, rooms, table))

    response = app.test_client().get("/pair-room/1", environ_base={"REMOTE_ADDR": CLIENT_IP})

    assert response.status_code == 500
    assert b"forwarding service" in response.data


def test_forwarded_for_ignored_without_trusted_proxy(settings, control_plane, rooms, table) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))

    app.test_client().get(
        "/pair-room/1",
        headers={"X-Forwarded-For": CLIENT_IP},
        environ_base={"REMOTE_ADDR": "10.0.0.1"},
    )

    assert table.calls[0][0] == "10.0.0.1"


def test_forwarded_for_honoured_behind_trusted_proxy(settings, control_plane, rooms, table) -> None:
    settings = replace(settings, trusted_proxies=1)
    app = create_app(_client(settings, control_plane, rooms, table))

    response = app.test_client().get(
        "/pair-room/1",
        headers={"X-Forwarded-For": CLIENT_IP},
        environ_base={"REMOTE_ADDR": "10.0.0.1"},
    )

    assert response.status_code == 200
    assert table.calls[0][0] == CLIENT_IP


def test_signed_link_required_when_secret_set(settings, control_plane, rooms, table) -> None:
    settings = replace(settings, pairing_secret="s3cret")
    test_client = create_app(_client(settings, control_plane, rooms, table)).test_client()

    unsigned = test_client.get("/pair-room/1", environ_base={"REMOTE_ADDR": CLIENT_IP})
    signed = test_client.get(
        f"/pair-room/1?sig={sign_room('s3cret', 1)}",
        environ_base={"REMOTE_ADDR": CLIENT_IP},
    )

    assert unsigned.status_code == 400
    assert signed.status_code == 200


def test_qr_code_png(settings, control_plane, rooms, table) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))

    response = app.test_client().get("/qr-code/1")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert response.data.startswith(b"\x89PNG")


@pytest.mark.parametrize(("path", "status"), [("/qr-code/x", 400), ("/qr-code/2", 404), ("/qr-code/9", 404)])
def test_qr_code_errors(settings, control_plane, rooms, table, path: str, status: int) -> None:
    app = create_app(_client(settings, control_plane, rooms, table))
    assert app.test_client().get(path).status_code == status


def test_qr_code_uses_forwarded_origin(settings, control_plane, rooms, table, monkeypatch) -> None:
    settings = replace(settings, trusted_proxies=1)
    client = _client(settings, control_plane, rooms, table)
    seen: list[str] = []
    original = client.pairing_url

    def spy(room_id, origin=None):
        url = original(room_id, origin)
        seen.append(url)
        return url

    monkeypatch.setattr(client, "pairing_url", spy)
    app = create_app(client)

    response = app.test_client().get(
        "/qr-code/1",
        headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "cast.example", "X-Forwarded-Port": "443"},
    )

    assert response.status_code == 200
    assert seen == ["https://cast.example/pair-room/1"]


def test_health_reports_mode(settings, control_plane, rooms, table) -> None:
    control_plane.mode = "Xdp"
    app = create_app(_client(settings, control_plane, rooms, table))
    assert app.test_client().get("/health").get_json() == {"status": "ok", "mode": "Xdp"}

    control_plane.failure = requests.ConnectionError
    assert app.test_client().get("/health").get_json() == {"status": "ok", "mode": "Unknown"}
