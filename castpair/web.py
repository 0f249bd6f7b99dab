"""Flask front end: pairing links, QR images and a health probe."""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, render_template_string, request
from werkzeug.middleware.proxy_fix import ProxyFix

from castpair.api import Client
from castpair.core.errors import CastpairError, InvalidRoomIdError, RoomNotFoundError
from castpair.core.model import FlowFailure
from castpair.core.qr import origin_from_host_header

LOGGER = logging.getLogger(__name__)

_RESULT_PAGE = """<!doctype html>
<html>
  <head><title>{{ title }}</title></head>
  <body>
    <h1>{{ title }}</h1>
    <p>{{ message }}</p>
  </body>
</html>
"""

_FAILURE_STATUS = {
    FlowFailure.INVALID_ID: 400,
    FlowFailure.NOT_FOUND: 404,
    FlowFailure.UNRESOLVED_CLIENT: 500,
    FlowFailure.REMOTE_ERROR: 500,
}


def _request_origin() -> str:
    return origin_from_host_header(request.scheme, request.host)


def create_app(client: Client) -> Flask:
    app = Flask(__name__)
    hops = client.settings.trusted_proxies
    if hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_port=hops)  # type: ignore[method-assign]

    @app.get("/pair-room/<room_id>")
    def pair_room(room_id: str):
        client_ip = request.remote_addr or ""
        outcome = client.pair_room(room_id, client_ip, request.args.get("sig"))
        if outcome.succeeded:
            LOGGER.info("Room %s paired with %s (%s)", room_id, outcome.client_mac, client_ip)
            return render_template_string(_RESULT_PAGE, title="Pairing Successful!", message=outcome.message)

        status = _FAILURE_STATUS[outcome.failure] if outcome.failure else 500
        return render_template_string(_RESULT_PAGE, title="Pairing Failed", message=outcome.message), status

    @app.get("/qr-code/<room_id>")
    def qr_code(room_id: str):
        try:
            png = client.pairing_qr_png(room_id, _request_origin())
        except InvalidRoomIdError as exc:
            return Response(str(exc), status=400, mimetype="text/plain")
        except RoomNotFoundError as exc:
            return Response(str(exc), status=404, mimetype="text/plain")
        return Response(png, mimetype="image/png")

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "mode": client.get_mode().value})

    @app.errorhandler(CastpairError)
    def castpair_error(exc: CastpairError):
        LOGGER.error("Request failed: %s", exc)
        return Response(f"Error: {exc}", status=500, mimetype="text/plain")

    return app


def serve(client: Client) -> None:
    app = create_app(client)
    LOGGER.info("Serving on %s:%d", client.settings.host, client.settings.port)
    app.run(host=client.settings.host, port=client.settings.port, threaded=True)
