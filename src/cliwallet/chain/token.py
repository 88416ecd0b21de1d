"""
ERC-20 read helpers built on the declarative ERC20 function table.
"""

from __future__ import annotations

from dataclasses import dataclass

from .abi import ERC20
from .rpc import ChainClient, read_parallel
from .units import to_human_units


@dataclass(frozen=True)
class TokenBalance:
    raw: int
    decimals: int

    @property
    def human(self) -> str:
        return to_human_units(self.raw, self.decimals)


class Erc20Token:
    """Read-only view of an ERC-20 contract."""

    def __init__(self, client: ChainClient, address: str) -> None:
        self.client = client
        self.address = address

    def _read(self, name: str, *args) -> tuple:
        func = ERC20[name]
        raw = self.client.call(self.address, func.encode_call(args).to_bytes())
        return func.decode_output(raw)

    def decimals(self) -> int:
        return self._read("decimals")[0]

    def balance_of(self, owner: str) -> int:
        return self._read("balanceOf", owner)[0]

    def balance_with_decimals(self, owner: str) -> TokenBalance:
        """Fetch balanceOf and decimals concurrently."""
        results = read_parallel(
            {
                "balanceOf": lambda: self.balance_of(owner),
                "decimals": self.decimals,
            }
        )
        return TokenBalance(raw=results["balanceOf"], decimals=results["decimals"])
