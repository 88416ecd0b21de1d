"""Helpers shared by the command modules."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from ..chain.rpc import ChainClient
from ..config import WalletConfig, load_config
from ..errors import WalletError


def get_config(ctx: click.Context, **overrides) -> WalletConfig:
    """Load configuration using the group-level --env-file / --rpc-url."""
    obj = ctx.find_root().obj or {}
    return load_config(
        env_file=obj.get("env_file"),
        rpc_url=obj.get("rpc_url"),
        **overrides,
    )


def open_client(config: WalletConfig) -> ChainClient:
    return ChainClient(config.require_rpc_url(), timeout=config.timeout)


def fail(exc: WalletError) -> NoReturn:
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    sys.exit(exc.exit_code)
