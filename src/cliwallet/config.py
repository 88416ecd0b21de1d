"""
Runtime configuration.

Values come from, in order of precedence: explicit arguments (CLI
options), the process environment, then a dotenv file (``.env`` in the
working directory by default).  Missing endpoint/key settings are reported
as ConfigurationError before any network call is attempted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .chain.rpc import DEFAULT_TIMEOUT
from .chain.tx import FeeConfig
from .chain.units import parse_gwei
from .errors import ConfigurationError, InputError

DEFAULT_ENV_FILE = Path(".env")
DEFAULT_CHAIN_ID = 11155111  # Sepolia
DEFAULT_EXPLORER_URL = "https://sepolia.etherscan.io"
DEFAULT_MAX_PRIORITY_FEE_GWEI = "2"
DEFAULT_MAX_FEE_GWEI = "20"


@dataclass(frozen=True)
class WalletConfig:
    """
    Settings for one CLI invocation.

    Attributes:
        rpc_url: JSON-RPC endpoint (None if not configured)
        private_key: Sender key (None if not configured)
        chain_id: EIP-155 chain id
        explorer_url: Block explorer base URL for tx links
        fees: Static EIP-1559 fee parameters
        timeout: Per-request RPC timeout in seconds
    """
    rpc_url: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)
    chain_id: int = DEFAULT_CHAIN_ID
    explorer_url: str = DEFAULT_EXPLORER_URL
    fees: FeeConfig = field(default_factory=FeeConfig)
    timeout: float = DEFAULT_TIMEOUT

    def require_rpc_url(self) -> str:
        if not self.rpc_url:
            raise ConfigurationError(
                "RPC endpoint not configured. Set ALCHEMY_SEPOLIA_URL in .env "
                "or pass --rpc-url."
            )
        return self.rpc_url

    def require_private_key(self) -> str:
        if not self.private_key:
            raise ConfigurationError(
                "PRIVATE_KEY not configured. Run 'cli-wallet generate' or set "
                "PRIVATE_KEY in .env."
            )
        return self.private_key

    def tx_url(self, tx_hash: str) -> str:
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _gwei(name: str, value: str) -> int:
    try:
        return parse_gwei(value)
    except InputError as exc:
        raise ConfigurationError(f"{name}: {exc}") from exc


def load_config(
    env_file: Union[str, Path, None] = DEFAULT_ENV_FILE,
    rpc_url: Optional[str] = None,
    private_key: Optional[str] = None,
    max_priority_fee_gwei: Optional[str] = None,
    max_fee_gwei: Optional[str] = None,
) -> WalletConfig:
    """
    Build a WalletConfig from arguments, environment and dotenv file.

    Values already present in the environment are not overridden by the
    dotenv file.

    Raises:
        ConfigurationError: Malformed numeric settings or fee values
    """
    if env_file is not None and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    priority = max_priority_fee_gwei or os.environ.get(
        "MAX_PRIORITY_FEE_GWEI", DEFAULT_MAX_PRIORITY_FEE_GWEI
    )
    max_fee = max_fee_gwei or os.environ.get("MAX_FEE_GWEI", DEFAULT_MAX_FEE_GWEI)
    try:
        fees = FeeConfig(
            max_priority_fee_per_gas=_gwei("max priority fee", priority),
            max_fee_per_gas=_gwei("max fee", max_fee),
        )
    except InputError as exc:
        raise ConfigurationError(str(exc)) from exc

    return WalletConfig(
        rpc_url=rpc_url or os.environ.get("ALCHEMY_SEPOLIA_URL") or os.environ.get("RPC_URL"),
        private_key=private_key or os.environ.get("PRIVATE_KEY"),
        chain_id=_env_int("CHAIN_ID", DEFAULT_CHAIN_ID),
        explorer_url=os.environ.get("EXPLORER_URL", DEFAULT_EXPLORER_URL),
        fees=fees,
        timeout=_env_float("RPC_TIMEOUT", DEFAULT_TIMEOUT),
    )
