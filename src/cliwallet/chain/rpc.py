"""
JSON-RPC client for an Ethereum-compatible node.

Lightweight alternative to web3.py: uses httpx for HTTP and parses the
handful of result shapes we need by hand.  Each public method is exactly
one request/response exchange; nothing is cached and nothing is retried.
"""

from __future__ import annotations

import itertools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

import httpx

from ..errors import ParallelCallError, ParseError, RpcError, TransportError, WalletError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0


def _parse_quantity(method: str, value: Any) -> int:
    if not isinstance(value, str) or not value.startswith("0x") or len(value) < 3:
        raise ParseError(f"{method}: expected hex quantity, got {value!r}", method=method)
    try:
        return int(value, 16)
    except ValueError:
        raise ParseError(f"{method}: expected hex quantity, got {value!r}", method=method) from None


def _parse_data(method: str, value: Any) -> bytes:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise ParseError(f"{method}: expected hex data, got {value!r}", method=method)
    try:
        return bytes.fromhex(value[2:])
    except ValueError:
        raise ParseError(f"{method}: expected hex data, got {value!r}", method=method) from None


def _to_hex_data(data: Union[bytes, str]) -> str:
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    return data if data.startswith("0x") else "0x" + data


class ChainClient:
    """
    Blocking JSON-RPC client over a single httpx connection pool.

    Args:
        rpc_url: HTTP(S) endpoint
        timeout: Per-request timeout in seconds
        deadline: Absolute ``time.monotonic()`` value after which no further
            request is sent and in-flight ones are cut short
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        deadline: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.deadline = deadline
        self._ids = itertools.count(1)
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ChainClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request_timeout(self, method: str) -> float:
        if self.deadline is None:
            return self.timeout
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError(f"{method}: deadline exceeded", method=method)
        return min(self.timeout, remaining)

    def _rpc_call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            The ``result`` field of the response (may be None)

        Raises:
            TransportError: Network failure, timeout, or non-2xx without
                a JSON-RPC error body
            RpcError: The node returned an ``error`` object
            ParseError: The body is not a JSON-RPC response
        """
        timeout = self._request_timeout(method)
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("rpc -> %s id=%s", method, payload["id"])

        try:
            response = self._client.post(self.rpc_url, json=payload, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method}: request timed out", method=method) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method}: {exc}", method=method) from exc

        try:
            data = response.json()
        except ValueError:
            if response.is_error:
                raise TransportError(
                    f"{method}: HTTP {response.status_code}", method=method
                ) from None
            raise ParseError(f"{method}: response is not JSON", method=method) from None

        if not isinstance(data, dict):
            if response.is_error:
                raise TransportError(f"{method}: HTTP {response.status_code}", method=method)
            raise ParseError(f"{method}: response is not a JSON object", method=method)

        error = data.get("error")
        if error is not None:
            if not isinstance(error, dict):
                raise ParseError(f"{method}: malformed error object {error!r}", method=method)
            code = error.get("code")
            raise RpcError(
                code=code if isinstance(code, int) else -1,
                message=str(error.get("message", "")),
                data=error.get("data"),
                method=method,
            )

        if response.is_error:
            raise TransportError(f"{method}: HTTP {response.status_code}", method=method)
        if "result" not in data:
            raise ParseError(f"{method}: response has no result", method=method)

        logger.debug("rpc <- %s id=%s", method, payload["id"])
        return data["result"]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_balance(self, address: str, block: str = "latest") -> int:
        """Native balance in wei."""
        method = "eth_getBalance"
        return _parse_quantity(method, self._rpc_call(method, [address, block]))

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """Nonce for the next transaction (``pending`` includes mempool txs)."""
        method = "eth_getTransactionCount"
        return _parse_quantity(method, self._rpc_call(method, [address, block]))

    def estimate_gas(self, params: dict) -> int:
        method = "eth_estimateGas"
        return _parse_quantity(method, self._rpc_call(method, [params]))

    def call(self, contract: str, data: Union[bytes, str], block: str = "latest") -> bytes:
        """Read-only contract call (eth_call); returns raw return data."""
        method = "eth_call"
        result = self._rpc_call(
            method, [{"to": contract, "data": _to_hex_data(data)}, block]
        )
        return _parse_data(method, result)

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        method = "eth_getTransactionReceipt"
        result = self._rpc_call(method, [tx_hash])
        if result is not None and not isinstance(result, dict):
            raise ParseError(f"{method}: expected object, got {result!r}", method=method)
        return result

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def send_raw_transaction(self, raw: Union[bytes, str]) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        method = "eth_sendRawTransaction"
        result = self._rpc_call(method, [_to_hex_data(raw)])
        if not isinstance(result, str) or not result.startswith("0x") or len(result) != 66:
            raise ParseError(f"{method}: expected tx hash, got {result!r}", method=method)
        return result

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Poll until a transaction receipt is available.

        Raises:
            TransportError: If no receipt appears within ``timeout`` seconds
        """
        start = time.monotonic()
        while time.monotonic() - start < timeout:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            time.sleep(poll_interval)

        raise TransportError(
            f"Transaction {tx_hash} not confirmed within {timeout}s",
            method="eth_getTransactionReceipt",
        )


def read_parallel(calls: Mapping[str, Callable[[], T]]) -> dict[str, T]:
    """
    Run independent read calls concurrently and combine their results.

    All calls are awaited.  If any fails, a single ParallelCallError is
    raised whose ``failures`` names each failed call.

    Args:
        calls: name -> zero-argument callable

    Returns:
        name -> result, only when every call succeeded
    """
    if not calls:
        return {}

    results: dict[str, T] = {}
    failures: dict[str, WalletError] = {}
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = {name: pool.submit(fn) for name, fn in calls.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except WalletError as exc:
                failures[name] = exc

    if failures:
        raise ParallelCallError(failures)
    return results
