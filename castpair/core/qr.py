"""Pairing links and their QR-code images."""

from __future__ import annotations

import hashlib
import hmac
import io
from urllib.parse import urlencode, urlsplit

import qrcode

_DEFAULT_PORTS = {"http": 80, "https": 443}


def format_origin(scheme: str, host: str, port: int | None = None) -> str:
    """Build ``scheme://host[:port]``, dropping the port when it is the scheme default."""
    scheme = scheme.lower()
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def origin_from_host_header(scheme: str, host_header: str) -> str:
    parts = urlsplit(f"//{host_header}")
    host = parts.hostname or host_header
    return format_origin(scheme, host, parts.port)


def sign_room(secret: str, room_id: int) -> str:
    return hmac.new(secret.encode("utf-8"), str(room_id).encode("ascii"), hashlib.sha256).hexdigest()


def signature_valid(secret: str | None, room_id: int, signature: str | None) -> bool:
    if not secret:
        return True
    if not signature:
        return False
    return hmac.compare_digest(sign_room(secret, room_id), signature)


def pairing_url(origin: str, room_id: int, secret: str | None = None) -> str:
    url = f"{origin.rstrip('/')}/pair-room/{room_id}"
    if secret:
        url = f"{url}?{urlencode({'sig': sign_room(secret, room_id)})}"
    return url


def render_qr_png(data: str, *, box_size: int = 10, border: int = 4) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    return buffered.getvalue()
