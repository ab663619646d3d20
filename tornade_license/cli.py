"""
Command-line interface for Tornade licensing.
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from tornade_license.common.config import Config
from tornade_license.common.exceptions import ConfigurationError
from tornade_license.server import start_server
from tornade_license.server.activation_ledger import ActivationLedger, normalize_key
from tornade_license.server.key_issuer import KeyIssuer
from tornade_license.server.persistence import InMemoryActivationStore


def _load_config() -> Config:
    try:
        return Config()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def cli() -> None:
    """Tornade licensing CLI"""


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind server to (default: from TORNADE_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind server to (default: from TORNADE_SERVER_PORT env or 8000)",
)
@click.option(
    "--store-path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON file holding activation records",
)
def serve(host: str | None, port: int | None, store_path: Path | None) -> None:
    """Start the license server"""
    # Set environment variables before building the config
    if host is not None:
        os.environ["TORNADE_SERVER_HOST"] = host
    if port is not None:
        os.environ["TORNADE_SERVER_PORT"] = str(port)

    start_server(_load_config(), store_path=store_path)


@cli.command()
@click.option("--count", default=1, show_default=True, type=click.IntRange(min=1))
def issue(count: int) -> None:
    """Generate new license keys"""
    issuer = KeyIssuer(_load_config())
    for _ in range(count):
        click.echo(issuer.generate())


def _offline_ledger() -> ActivationLedger:
    return ActivationLedger(_load_config(), InMemoryActivationStore())


@cli.command()
@click.argument("key")
def check(key: str) -> None:
    """Check the format and checksum of a license key"""
    if _offline_ledger().validate_format(key):
        click.echo("valid")
    else:
        click.echo("invalid")
        raise SystemExit(1)


@cli.command()
@click.argument("key")
@click.argument("device_id")
def token(key: str, device_id: str) -> None:
    """Print the activation token of a key on a device"""
    ledger = _offline_ledger()
    if not ledger.validate_format(key):
        raise click.ClickException("invalid license key")
    click.echo(ledger.compute_token(normalize_key(key), device_id))


if __name__ == "__main__":
    cli()
