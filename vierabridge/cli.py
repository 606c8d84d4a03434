"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer

from vierabridge.core.config_loader import load_config
from vierabridge.core.errors import VieraBridgeError
from vierabridge.core.outcome import Failure
from vierabridge.core.storage import CacheStore
from vierabridge.core.validation import validate
from vierabridge.transports.probe import tcp_liveness_probe

app = typer.Typer(help="Panasonic Viera TV bridge: configuration and accessory cache tools")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )


@app.command("check")
def check_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Validate every TV declared in the configuration."""
    try:
        loaded = load_config(config)
    except VieraBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if not loaded.devices:
        typer.echo(f"No TVs declared in {loaded.path}")
        return

    rejected = 0
    for device in loaded.devices:
        outcome = validate(device)
        if isinstance(outcome, Failure):
            rejected += 1
            typer.echo(outcome.message, err=True)
        else:
            typer.echo(f"OK {device.ip_address}")
    if rejected:
        raise typer.Exit(code=1)


@app.command("cache")
def list_cache(
    cache: Path | None = typer.Option(None, "--cache", help="Path to the accessory cache"),
) -> None:
    """List TVs known to the accessory cache."""
    store = CacheStore.open(cache)
    if not len(store):
        typer.echo(f"No cached TVs in {store.path}")
        return

    for serial, entry in store.entries():
        if entry.data is None:
            typer.echo(f"{serial}: <empty>")
            continue
        specs = entry.data.specs
        encryption = "encrypted" if specs.requires_encryption else "plain"
        apps = len(entry.apps) if entry.apps is not None else 0
        typer.echo(
            f"{serial}: {entry.data.ip_address} {specs.friendly_name} "
            f"({specs.model_name}, {encryption}, {apps} apps)"
        )


@app.command("forget")
def forget_device(
    serial: str,
    cache: Path | None = typer.Option(None, "--cache", help="Path to the accessory cache"),
) -> None:
    """Drop a TV from the accessory cache so its next setup starts from scratch."""
    try:
        store = CacheStore.open(cache)
        if not store.forget(serial):
            typer.echo(f"Error: '{serial}' is not in {store.path}", err=True)
            raise typer.Exit(code=1)
    except VieraBridgeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"Forgot {serial}")


@app.command("probe")
def probe_device(
    ip_address: str,
    timeout: float = typer.Option(2.0, "--timeout", help="Connect timeout in seconds"),
) -> None:
    """Check whether a TV answers on its control port."""
    reachable = asyncio.run(tcp_liveness_probe(ip_address, timeout_s=timeout))
    if not reachable:
        typer.echo(f"{ip_address} is unreachable")
        raise typer.Exit(code=1)
    typer.echo(f"{ip_address} is reachable")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
