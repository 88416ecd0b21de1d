"""
Balance commands - native and ERC-20 balance queries.
"""

from __future__ import annotations

import click

from ..chain.token import Erc20Token
from ..chain.units import format_ether
from ..errors import WalletError
from ..keys.account import checksum_address
from ._common import fail, get_config, open_client


@click.command()
@click.argument("address")
@click.pass_context
def balance(ctx: click.Context, address: str) -> None:
    """Check the ETH balance of ADDRESS."""
    try:
        address = checksum_address(address)
        config = get_config(ctx)
        with open_client(config) as client:
            wei = client.get_balance(address)
    except WalletError as exc:
        fail(exc)

    click.echo()
    click.echo(
        click.style("Balance: ", dim=True)
        + click.style(f"{format_ether(wei)} ETH", fg="bright_white", bold=True)
    )


@click.command("erc20-balance")
@click.option("--token", "-t", "token_address", required=True,
              help="ERC-20 token contract address")
@click.option("--address", "-a", "owner", required=True,
              help="Address to check the balance of")
@click.pass_context
def erc20_balance(ctx: click.Context, token_address: str, owner: str) -> None:
    """Check the ERC-20 token balance of an address."""
    try:
        token_address = checksum_address(token_address)
        owner = checksum_address(owner)
        config = get_config(ctx)
        with open_client(config) as client:
            result = Erc20Token(client, token_address).balance_with_decimals(owner)
    except WalletError as exc:
        fail(exc)

    click.echo()
    click.echo(
        click.style("ERC-20 balance: ", dim=True)
        + click.style(result.human, fg="bright_white", bold=True)
        + click.style(f"  (decimals: {result.decimals})", dim=True)
    )
