"""
cli-wallet CLI

Command-line Ethereum account tool: key generation, balance queries and
EIP-1559 transfers against a JSON-RPC node (Sepolia by default).

Commands:
  generate       - Generate a new private key and address
  whoami         - Show the configured wallet address
  balance        - Check the ETH balance of an address
  erc20-balance  - Check the ERC-20 token balance of an address
  transfer       - Transfer ERC-20 tokens (EIP-1559)
  send           - Send native ETH (EIP-1559)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=__version__, prog_name="cli-wallet")
@click.option(
    "--env-file",
    default=".env",
    show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Dotenv file with PRIVATE_KEY / ALCHEMY_SEPOLIA_URL",
)
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint (overrides ALCHEMY_SEPOLIA_URL)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, env_file: Path, rpc_url: Optional[str], verbose: bool) -> None:
    """A CLI Ethereum wallet."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["rpc_url"] = rpc_url


# ============ Commands ============

from .commands.identity import generate, whoami
from .commands.balance import balance, erc20_balance
from .commands.transfer import send, transfer

cli.add_command(generate)
cli.add_command(whoami)
cli.add_command(balance)
cli.add_command(erc20_balance)
cli.add_command(transfer)
cli.add_command(send)


# ============ Entry Points ============


def main() -> None:
    """cli-wallet entry point."""
    # Ensure UTF-8 output on Windows
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: non-tty
    cli()


if __name__ == "__main__":
    main()
