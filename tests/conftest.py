"""Shared fixtures: isolated environment and a scripted JSON-RPC node."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Union
from unittest.mock import patch

import httpx
import pytest

WALLET_ENV_VARS = {
    "PRIVATE_KEY",
    "ALCHEMY_SEPOLIA_URL",
    "RPC_URL",
    "CHAIN_ID",
    "EXPLORER_URL",
    "MAX_PRIORITY_FEE_GWEI",
    "MAX_FEE_GWEI",
    "RPC_TIMEOUT",
}

# Private key 1 and its well-known address
KEY_ONE = "0x" + "00" * 31 + "01"
KEY_ONE_ADDRESS = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

TOKEN = "0x" + "11" * 20
RECIPIENT = "0x" + "22" * 20


def word(value: int) -> str:
    """Hex-encode an int as one 32-byte ABI word."""
    return "0x" + value.to_bytes(32, "big").hex()


@dataclass(frozen=True)
class RpcFailure:
    code: int
    message: str
    data: Any = None


Outcome = Union[Any, RpcFailure, Callable[[list], Any]]


class ScriptedNode:
    """
    httpx MockTransport handler answering JSON-RPC by method name.

    ``results`` maps method -> value, RpcFailure, or callable(params).
    Every request is recorded in ``calls`` as (method, params).
    """

    def __init__(self, results: dict[str, Outcome]) -> None:
        self.results = results
        self.calls: list[tuple[str, list]] = []

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append((method, params))

        outcome = self.results[method]
        if callable(outcome):
            outcome = outcome(params)
        if isinstance(outcome, RpcFailure):
            error = {"code": outcome.code, "message": outcome.message}
            if outcome.data is not None:
                error["data"] = outcome.data
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": outcome})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def erc20_call(balance: int = 0, decimals: int = 18) -> Callable[[list], str]:
    """eth_call responder dispatching on the ERC-20 selector."""
    def respond(params: list) -> str:
        selector = params[0]["data"][:10]
        if selector == "0x313ce567":
            return word(decimals)
        if selector == "0x70a08231":
            return word(balance)
        raise AssertionError(f"unexpected selector {selector}")
    return respond


@pytest.fixture(autouse=True)
def clean_env():
    """Strip wallet settings from the environment (restored afterwards)."""
    env = {k: v for k, v in os.environ.items() if k not in WALLET_ENV_VARS}
    with patch.dict(os.environ, env, clear=True):
        yield
