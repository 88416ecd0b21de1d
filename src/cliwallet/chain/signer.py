"""
Signing boundary for transaction hashes.

The transaction builder only sees the ``Signer`` protocol, so tests can
plug in a deterministic stub instead of real key material.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..keys.account import Account


@dataclass(frozen=True)
class Signature:
    """Recoverable secp256k1 signature (EIP-2718 typed-tx form)."""
    y_parity: int
    r: int
    s: int


class Signer(Protocol):
    address: str

    def sign_hash(self, digest: bytes) -> Signature:
        ...


class LocalSigner:
    """Signs with an in-process private key via eth-account (RFC 6979 nonces)."""

    def __init__(self, account: Account) -> None:
        self.address = account.address
        self._local = account.local_account()

    def sign_hash(self, digest: bytes) -> Signature:
        if len(digest) != 32:
            raise ValueError(f"digest must be 32 bytes, got {len(digest)}")
        signed = self._local.unsafe_sign_hash(digest)
        v = signed.v
        return Signature(y_parity=v - 27 if v >= 27 else v, r=signed.r, s=signed.s)
