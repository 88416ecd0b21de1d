"""
ECDSA / secp256k1 key management.

An ``Account`` is a 32-byte secret scalar plus the EIP-55 address derived
from it.  Accounts are process-local; persisting the key is an explicit
step (``save_private_key``) taken by the ``generate`` command.

Dependencies: eth-account for public-key / address derivation,
eth-utils for address checksumming.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Union

from eth_account import Account as _EthAccount
from eth_account.signers.local import LocalAccount
from eth_utils import is_address, is_checksum_address, remove_0x_prefix, to_checksum_address

from ..errors import EntropyError, FormatError, InvalidKeyError

# secp256k1 group order
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

KEY_SIZE = 32

# Bounded so a broken entropy source cannot spin forever
_MAX_DRAWS = 16

Secret = Union[str, bytes, int]


@dataclass(frozen=True)
class Account:
    """
    A signing identity.

    Attributes:
        private_key: 32-byte secret scalar (excluded from repr)
        address: 0x-prefixed EIP-55 checksummed address
    """
    private_key: bytes = field(repr=False)
    address: str

    @property
    def private_key_hex(self) -> str:
        return "0x" + self.private_key.hex()

    def local_account(self) -> LocalAccount:
        return _EthAccount.from_key(self.private_key)


def _secret_to_bytes(secret: Secret) -> bytes:
    if isinstance(secret, bool):
        raise InvalidKeyError("private key must not be a bool")
    if isinstance(secret, int):
        if not 0 < secret < SECP256K1_N:
            raise InvalidKeyError("private key scalar out of range")
        return secret.to_bytes(KEY_SIZE, "big")
    if isinstance(secret, str):
        text = secret.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != KEY_SIZE * 2:
            raise InvalidKeyError(
                f"private key must be {KEY_SIZE * 2} hex characters, got {len(text)}"
            )
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            raise InvalidKeyError("private key is not valid hex") from None
    elif isinstance(secret, (bytes, bytearray)):
        raw = bytes(secret)
        if len(raw) != KEY_SIZE:
            raise InvalidKeyError(
                f"private key must be {KEY_SIZE} bytes, got {len(raw)}"
            )
    else:
        raise InvalidKeyError(f"unsupported private key type: {type(secret).__name__}")

    scalar = int.from_bytes(raw, "big")
    if not 0 < scalar < SECP256K1_N:
        raise InvalidKeyError("private key scalar out of range")
    return raw


def derive_address(secret: Secret) -> str:
    """
    Derive the Ethereum address for a private key.

    Pure and deterministic: the same secret always yields the same address.

    Returns:
        0x-prefixed checksummed address
    """
    return _EthAccount.from_key(_secret_to_bytes(secret)).address


def from_secret(secret: Secret) -> Account:
    """
    Import an existing private key.

    Args:
        secret: Hex string (with or without 0x), 32 raw bytes, or an int

    Raises:
        InvalidKeyError: Wrong length, not hex, zero, or >= curve order
    """
    raw = _secret_to_bytes(secret)
    return Account(private_key=raw, address=_EthAccount.from_key(raw).address)


def generate(randbytes: Callable[[int], bytes] = secrets.token_bytes) -> Account:
    """
    Generate a new keypair from a cryptographically secure source.

    Raises:
        EntropyError: The random source is unavailable or misbehaves
    """
    for _ in range(_MAX_DRAWS):
        try:
            raw = randbytes(KEY_SIZE)
        except (NotImplementedError, OSError) as exc:
            raise EntropyError(f"no secure random source available: {exc}") from exc
        if len(raw) != KEY_SIZE:
            raise EntropyError(f"random source returned {len(raw)} bytes, expected {KEY_SIZE}")
        if 0 < int.from_bytes(raw, "big") < SECP256K1_N:
            return from_secret(raw)
    raise EntropyError("random source did not produce a valid secp256k1 scalar")


def is_valid_address(value: str) -> bool:
    """
    True for a 20-byte hex address whose EIP-55 checksum, if present, is right.

    All-lowercase and all-uppercase bodies carry no checksum and are
    accepted as-is.
    """
    if not isinstance(value, str) or not is_address(value):
        return False
    body = remove_0x_prefix(value)
    if body == body.lower() or body == body.upper():
        return True
    return is_checksum_address(value)


def checksum_address(value: str) -> str:
    """
    Validate a user-supplied address and return its checksummed form.

    Raises:
        FormatError: Not a 20-byte hex address, or a bad mixed-case checksum
    """
    if not isinstance(value, str) or not is_valid_address(value.strip()):
        raise FormatError(f"invalid address: {value!r}")
    return to_checksum_address(value.strip())


def save_private_key(private_key: str, env_path: Path) -> Path:
    """
    Write PRIVATE_KEY into a dotenv file.

    Any previous PRIVATE_KEY line is replaced; every other line, comments
    included, is kept as-is.

    Returns:
        Path to the written file
    """
    env_path = Path(env_path)
    env_path.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    if env_path.exists():
        lines = [
            line
            for line in env_path.read_text(encoding="utf-8").splitlines()
            if not line.startswith("PRIVATE_KEY=")
        ]
    lines.append(f"PRIVATE_KEY={private_key}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path
