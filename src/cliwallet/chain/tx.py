"""
EIP-1559 (type 2) transaction model and wire encoding.

    signing payload = 0x02 || rlp([chain_id, nonce, max_priority_fee_per_gas,
                                   max_fee_per_gas, gas_limit, to, value, data,
                                   access_list])
    raw transaction = 0x02 || rlp([... , access_list, y_parity, r, s])

Signing itself is delegated to a ``Signer``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import rlp
from eth_hash.auto import keccak
from eth_utils import to_canonical_address, to_checksum_address

from ..errors import InvalidTransactionError
from ..keys.account import is_valid_address
from .signer import Signature, Signer
from .units import UINT256_MAX, format_gwei, parse_gwei

TX_TYPE_EIP1559 = 0x02
UINT64_MAX = 2**64 - 1

DEFAULT_MAX_PRIORITY_FEE_PER_GAS = parse_gwei("2")
DEFAULT_MAX_FEE_PER_GAS = parse_gwei("20")


def _check_uint(name: str, value: int, upper: int = UINT256_MAX) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTransactionError(f"{name} must be an integer, got {value!r}")
    if not 0 <= value <= upper:
        raise InvalidTransactionError(f"{name} out of range: {value}")


def _check_fees(max_priority_fee_per_gas: int, max_fee_per_gas: int) -> None:
    _check_uint("max_priority_fee_per_gas", max_priority_fee_per_gas)
    _check_uint("max_fee_per_gas", max_fee_per_gas)
    if max_fee_per_gas < max_priority_fee_per_gas:
        raise InvalidTransactionError(
            f"max_fee_per_gas ({format_gwei(max_fee_per_gas)} gwei) is below "
            f"max_priority_fee_per_gas ({format_gwei(max_priority_fee_per_gas)} gwei)"
        )


@dataclass(frozen=True)
class FeeConfig:
    """
    Fee-market parameters.

    Values are static configuration, not read from a fee oracle; callers
    that need market-tracking fees must supply them.
    """
    max_priority_fee_per_gas: int = DEFAULT_MAX_PRIORITY_FEE_PER_GAS
    max_fee_per_gas: int = DEFAULT_MAX_FEE_PER_GAS

    def __post_init__(self) -> None:
        _check_fees(self.max_priority_fee_per_gas, self.max_fee_per_gas)


@dataclass(frozen=True)
class AccessListEntry:
    address: str
    storage_keys: tuple[bytes, ...] = ()


@dataclass(frozen=True)
class TransactionRequest:
    """Unsigned type-2 transaction.  Validated on construction."""
    to: str
    data: bytes
    value: int
    chain_id: int
    nonce: int
    gas_limit: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    access_list: tuple[AccessListEntry, ...] = field(default=())

    def __post_init__(self) -> None:
        if not isinstance(self.to, str) or not is_valid_address(self.to):
            raise InvalidTransactionError(f"invalid recipient address: {self.to!r}")
        if not isinstance(self.data, bytes):
            raise InvalidTransactionError("data must be bytes")
        _check_uint("value", self.value)
        _check_uint("chain_id", self.chain_id)
        _check_uint("nonce", self.nonce, UINT64_MAX)
        _check_uint("gas_limit", self.gas_limit, UINT64_MAX)
        _check_fees(self.max_priority_fee_per_gas, self.max_fee_per_gas)
        for entry in self.access_list:
            if not is_valid_address(entry.address):
                raise InvalidTransactionError(f"invalid access list address: {entry.address!r}")
            if any(len(key) != 32 for key in entry.storage_keys):
                raise InvalidTransactionError("access list storage keys must be 32 bytes")
        object.__setattr__(self, "to", to_checksum_address(self.to))

    def _fields(self) -> list:
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            to_canonical_address(self.to),
            self.value,
            self.data,
            [
                [to_canonical_address(entry.address), list(entry.storage_keys)]
                for entry in self.access_list
            ],
        ]

    def signing_payload(self) -> bytes:
        return bytes([TX_TYPE_EIP1559]) + rlp.encode(self._fields())

    def signing_hash(self) -> bytes:
        return keccak(self.signing_payload())


@dataclass(frozen=True)
class SignedTransaction:
    request: TransactionRequest
    signature: Signature

    @property
    def raw(self) -> bytes:
        sig = self.signature
        fields = self.request._fields() + [sig.y_parity, sig.r, sig.s]
        return bytes([TX_TYPE_EIP1559]) + rlp.encode(fields)

    @property
    def raw_hex(self) -> str:
        return "0x" + self.raw.hex()

    @property
    def hash(self) -> str:
        return "0x" + keccak(self.raw).hex()


def sign_transaction(request: TransactionRequest, signer: Signer) -> SignedTransaction:
    """Hash the signing payload and attach the signer's signature."""
    signature = signer.sign_hash(request.signing_hash())
    if signature.y_parity not in (0, 1):
        raise InvalidTransactionError(f"signer returned y_parity {signature.y_parity}")
    return SignedTransaction(request=request, signature=signature)

