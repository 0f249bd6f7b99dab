"""Typer CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import typer

from castpair.api import Client
from castpair.core.config import load_settings
from castpair.core.errors import CastpairError
from castpair.core.logging import configure_logging
from castpair.core.model import CallResult, ForwardingMode

app = typer.Typer(help="Pair casting rooms with client devices via the forwarding control plane")
pairings_app = typer.Typer(help="Inspect and edit control-plane pairings")
mode_app = typer.Typer(help="Read or change the forwarding mode")
app.add_typer(pairings_app, name="pairings")
app.add_typer(mode_app, name="mode")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="YAML settings file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"config": config}


def _build_client(ctx: typer.Context) -> Client:
    settings = load_settings((ctx.obj or {}).get("config"))
    return Client(settings)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _report(result: CallResult, done: str) -> None:
    if not result.ok:
        raise _fail(result.detail or "control plane request failed")
    suffix = " (already applied)" if result.already_applied else ""
    typer.echo(f"{done}{suffix}")


@app.command("serve")
def serve(ctx: typer.Context) -> None:
    """Run the pairing web front end."""
    from castpair.web import serve as run_server

    try:
        run_server(_build_client(ctx))
    except CastpairError as exc:
        raise _fail(str(exc)) from None


@app.command("resolve")
def resolve(ctx: typer.Context, ip: str) -> None:
    """Look up the MAC address of IP in the local neighbor table."""
    try:
        result = _build_client(ctx).resolve(ip)
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    if not result.found:
        reason = result.failure.value if result.failure else "unknown"
        raise _fail(f"No MAC address found for {ip} ({reason}: {result.detail})")
    typer.echo(f"{ip} -> {result.mac}")


@app.command("rooms")
def list_rooms(ctx: typer.Context) -> None:
    """List catalogue rooms and their device MACs."""
    try:
        client = _build_client(ctx)
        rooms = client.list_rooms()
        if not rooms:
            typer.echo("No rooms configured")
            return
        for room in rooms:
            typer.echo(f"{room.id}: {room.name} [{room.mac_address or 'no device MAC'}]")
    except CastpairError as exc:
        raise _fail(str(exc)) from None


@app.command("qr")
def qr(
    ctx: typer.Context,
    room_id: str,
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the QR PNG here"),
    origin: str | None = typer.Option(None, "--origin", help="Externally reachable origin, e.g. http://10.0.0.5:8080"),
) -> None:
    """Print the pairing URL for ROOM_ID and optionally write its QR code."""
    try:
        client = _build_client(ctx)
        url = client.pairing_url(room_id, origin)
        if output is not None:
            output.write_bytes(client.pairing_qr_png(room_id, origin))
            typer.echo(f"Wrote {output}")
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    except OSError as exc:
        raise _fail(f"Could not write {output}: {exc}") from None
    typer.echo(url)


@pairings_app.command("list")
def list_pairings(ctx: typer.Context) -> None:
    """List pairings known to the control plane."""
    try:
        pairings = _build_client(ctx).list_pairings()
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    if not pairings:
        typer.echo("No pairings found. Ensure the control plane is running and reachable.")
        return
    for pairing in pairings:
        typer.echo(f"{pairing.client_mac} -> {pairing.device_mac}")


@pairings_app.command("add")
def add_pairing(ctx: typer.Context, client_mac: str, device_mac: str) -> None:
    """Pair CLIENT_MAC with DEVICE_MAC."""
    try:
        result = _build_client(ctx).add_pairing(client_mac, device_mac)
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    _report(result, f"Paired {client_mac} -> {device_mac}")


@pairings_app.command("remove")
def remove_pairing(ctx: typer.Context, client_mac: str, device_mac: str) -> None:
    """Remove the pairing of CLIENT_MAC with DEVICE_MAC."""
    try:
        result = _build_client(ctx).remove_pairing(client_mac, device_mac)
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    _report(result, f"Removed {client_mac} -> {device_mac}")


@mode_app.command("get")
def get_mode(ctx: typer.Context) -> None:
    """Show the current forwarding mode."""
    try:
        mode = _build_client(ctx).get_mode()
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    typer.echo(f"Current mode: {mode.value}")


@mode_app.command("set")
def set_mode(
    ctx: typer.Context,
    mode: str = typer.Argument(..., help=", ".join(m.value for m in ForwardingMode.writable())),
) -> None:
    """Change the forwarding mode."""
    try:
        result = _build_client(ctx).set_mode(mode)
    except CastpairError as exc:
        raise _fail(str(exc)) from None
    _report(result, f"Mode set to {ForwardingMode.parse(mode).value}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
