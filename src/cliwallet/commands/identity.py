"""
Identity commands - create and inspect the signing key.
"""

from __future__ import annotations

from pathlib import Path

import click

from ..errors import WalletError
from ..keys.account import from_secret, generate as generate_account, save_private_key
from ._common import fail, get_config


@click.command()
@click.option(
    "--output", "-o",
    default=".env",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to save the private key to",
)
def generate(output: Path) -> None:
    """Generate a new Ethereum private key and address."""
    try:
        account = generate_account()
    except WalletError as exc:
        fail(exc)

    click.echo()
    click.secho("New account generated:", fg="green", bold=True)
    click.echo(click.style("  Address:     ", dim=True) + account.address)
    click.echo(click.style("  Private Key: ", dim=True) + account.private_key_hex)
    click.echo()
    click.secho(
        "  Keep your private key safe: anyone holding it controls your funds.",
        fg="yellow",
    )

    path = save_private_key(account.private_key_hex, output)
    click.echo()
    click.echo(f"Private key written to: {path.resolve()}")


@click.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the address of the configured private key."""
    try:
        config = get_config(ctx)
        account = from_secret(config.require_private_key())
    except WalletError as exc:
        fail(exc)
    click.echo(f"Address: {account.address}")
