"""
Error taxonomy for cli-wallet.

Every error carries an ``exit_code`` so the CLI can terminate with a
distinct non-zero status.  Local input problems (``InputError``) are kept
apart from remote/network problems (``ChainError``) so callers can tell
"fix your arguments" from "the node or the network said no".
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class WalletError(RuntimeError):
    exit_code: int = 1


class ConfigurationError(WalletError):
    exit_code = 2


class InputError(WalletError, ValueError):
    exit_code = 3


class FormatError(InputError):
    pass


class PrecisionError(InputError):
    pass


class TypeMismatchError(InputError):
    pass


class InvalidKeyError(InputError):
    pass


class InvalidTransactionError(InputError):
    pass


class EntropyError(WalletError):
    exit_code = 4


class ChainError(WalletError):
    """Base for failures of a remote call.

    Attributes:
        method: JSON-RPC method that failed (None when not tied to one call)
    """

    exit_code = 5

    def __init__(self, message: str, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class TransportError(ChainError):
    pass


class RpcError(ChainError):
    """The node answered with a structured JSON-RPC error object."""

    def __init__(
        self,
        code: int,
        message: str,
        data: Any = None,
        method: Optional[str] = None,
    ) -> None:
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}RPC error {code}: {message}", method=method)
        self.code = code
        self.rpc_message = message
        self.data = data


class WouldRevertError(RpcError):
    pass


class ParseError(ChainError):
    pass


class DecodeError(ParseError):
    pass


class ParallelCallError(ChainError):
    """One or more of a group of concurrent reads failed.

    Attributes:
        failures: call name -> error raised by that call
    """

    def __init__(self, failures: Mapping[str, WalletError]) -> None:
        details = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"{len(failures)} call(s) failed: {details}")
        self.failures = dict(failures)
