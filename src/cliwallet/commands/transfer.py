"""
Transfer commands - build, sign and broadcast EIP-1559 transactions.

The sender EOA signs and pays gas.  Fees come from configuration
(MAX_PRIORITY_FEE_GWEI / MAX_FEE_GWEI or the --max-*-fee options); they
are not derived from current network conditions.
"""

from __future__ import annotations

from typing import Callable, Optional

import click

from ..chain.builder import TransactionBuilder, TransferResult
from ..chain.signer import LocalSigner
from ..chain.units import format_gwei
from ..config import WalletConfig
from ..errors import WalletError
from ..keys.account import from_secret
from ._common import fail, get_config, open_client


def _fee_options(func: Callable) -> Callable:
    func = click.option(
        "--wait", is_flag=True, help="Wait for the transaction receipt"
    )(func)
    func = click.option(
        "--max-priority-fee", default=None, help="Max priority fee in gwei (default: 2)"
    )(func)
    func = click.option(
        "--max-fee", default=None, help="Max fee per gas in gwei (default: 20)"
    )(func)
    return func


def _execute(
    ctx: click.Context,
    max_fee: Optional[str],
    max_priority_fee: Optional[str],
    wait: bool,
    run: Callable[[TransactionBuilder], TransferResult],
) -> None:
    try:
        config: WalletConfig = get_config(
            ctx, max_priority_fee_gwei=max_priority_fee, max_fee_gwei=max_fee
        )
        account = from_secret(config.require_private_key())
        config.require_rpc_url()
    except WalletError as exc:
        fail(exc)

    click.echo(click.style("  Sender:  ", dim=True) + account.address)
    click.echo(
        click.style("  Fees:    ", dim=True)
        + f"{format_gwei(config.fees.max_priority_fee_per_gas)} gwei priority, "
        + f"{format_gwei(config.fees.max_fee_per_gas)} gwei max"
    )
    click.echo()

    with open_client(config) as client:
        builder = TransactionBuilder(
            client=client,
            signer=LocalSigner(account),
            chain_id=config.chain_id,
            fees=config.fees,
        )
        try:
            result = run(builder)
        except WalletError as exc:
            stage = builder.stage.value if builder.stage else "start"
            click.secho(f"  Failed after stage: {stage}", fg="red", err=True)
            fail(exc)

        click.secho("Transaction sent!", fg="green", bold=True)
        click.echo(click.style("  Nonce:   ", dim=True) + str(result.request.nonce))
        click.echo(click.style("  Gas:     ", dim=True) + str(result.request.gas_limit))
        click.echo(click.style("  TX:      ", dim=True) + result.tx_hash)
        click.echo(click.style("  Explorer:", dim=True) + " " + config.tx_url(result.tx_hash))

        if wait:
            click.echo()
            click.echo("  Waiting for receipt...")
            try:
                receipt = client.wait_for_receipt(result.tx_hash)
            except WalletError as exc:
                fail(exc)
            if int(receipt.get("status") or "0x0", 16) == 1:
                click.secho("  Confirmed.", fg="green")
            else:
                click.secho("  Transaction reverted.", fg="red", err=True)
                ctx.exit(1)


@click.command()
@click.option("--token", "-t", "token_address", required=True,
              help="ERC-20 token contract address")
@click.option("--to", "-r", "recipient", required=True, help="Recipient address")
@click.option("--amount", "-a", required=True,
              help="Amount of tokens to send (e.g. 10.5)")
@_fee_options
@click.pass_context
def transfer(
    ctx: click.Context,
    token_address: str,
    recipient: str,
    amount: str,
    max_fee: Optional[str],
    max_priority_fee: Optional[str],
    wait: bool,
) -> None:
    """Transfer ERC-20 tokens using an EIP-1559 transaction."""
    click.echo("=== ERC-20 Transfer ===")
    click.echo(click.style("  Token:   ", dim=True) + token_address)
    click.echo(click.style("  To:      ", dim=True) + recipient)
    click.echo(click.style("  Amount:  ", dim=True) + amount)
    _execute(
        ctx, max_fee, max_priority_fee, wait,
        lambda builder: builder.transfer_token(token_address, recipient, amount),
    )


@click.command()
@click.option("--to", "-r", "recipient", required=True, help="Recipient address")
@click.option("--amount", "-a", required=True, help="Amount of ETH to send (e.g. 0.01)")
@_fee_options
@click.pass_context
def send(
    ctx: click.Context,
    recipient: str,
    amount: str,
    max_fee: Optional[str],
    max_priority_fee: Optional[str],
    wait: bool,
) -> None:
    """Send native ETH using an EIP-1559 transaction."""
    click.echo("=== ETH Transfer ===")
    click.echo(click.style("  To:      ", dim=True) + recipient)
    click.echo(click.style("  Amount:  ", dim=True) + f"{amount} ETH")
    _execute(
        ctx, max_fee, max_priority_fee, wait,
        lambda builder: builder.transfer_native(recipient, amount),
    )
