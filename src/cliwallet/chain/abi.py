"""
ABI encoding for a small, declarative function table.

Functions are described by JSON ABI entries (the same shape solc/Foundry
emit).  The encoding algorithm is generic: selector = first 4 bytes of
Keccak-256 over the canonical signature, arguments = eth-abi head/tail
encoding.  Supporting another function means adding an entry to a table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError
from eth_abi.exceptions import ParseError as AbiParseError
from eth_abi.grammar import parse as parse_type
from eth_hash.auto import keccak

from ..errors import DecodeError, TypeMismatchError
from ..keys.account import is_valid_address

WORD_SIZE = 32

# ---------------------------------------------------------------------------
# Minimal ERC-20 ABI (transfer, balanceOf, decimals, symbol)
# ---------------------------------------------------------------------------
ERC20_ABI: list[dict] = [
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "success", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "symbol",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
]


def function_selector(signature: str) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(signature.encode("utf-8"))[:4]


def _check_types(types: Iterable[str]) -> tuple[str, ...]:
    checked = tuple(types)
    for abi_type in checked:
        try:
            parse_type(abi_type).validate()
        except (AbiParseError, ABITypeError) as exc:
            raise TypeMismatchError(f"Unsupported ABI type {abi_type!r}: {exc}") from exc
    return checked


def parse_signature(signature: str) -> tuple[str, tuple[str, ...]]:
    """
    Split ``"transfer(address,uint256)"`` into its name and argument types.

    Only flat (non-tuple) argument lists are supported.
    """
    text = signature.replace(" ", "")
    if "(" not in text or not text.endswith(")"):
        raise TypeMismatchError(f"Malformed function signature: {signature!r}")
    name, _, rest = text.partition("(")
    inner = rest[:-1]
    if not name or "(" in inner or ")" in inner:
        raise TypeMismatchError(f"Malformed function signature: {signature!r}")
    types = tuple(t for t in inner.split(",")) if inner else ()
    return name, _check_types(types)


@dataclass(frozen=True)
class CallData:
    """Encoded function call: 4-byte selector followed by 32-byte words."""
    selector: bytes
    encoded_args: bytes

    @property
    def words(self) -> list[bytes]:
        return [
            self.encoded_args[i:i + WORD_SIZE]
            for i in range(0, len(self.encoded_args), WORD_SIZE)
        ]

    def to_bytes(self) -> bytes:
        return self.selector + self.encoded_args

    def hex(self) -> str:
        return "0x" + self.to_bytes().hex()


def encode_arguments(types: Sequence[str], args: Sequence[Any]) -> bytes:
    if len(args) != len(types):
        raise TypeMismatchError(
            f"expected {len(types)} argument(s) for ({','.join(types)}), got {len(args)}"
        )
    if not types:
        return b""
    for abi_type, arg in zip(types, args):
        if abi_type == "address" and isinstance(arg, str) and not is_valid_address(arg):
            raise TypeMismatchError(f"invalid address argument: {arg!r}")
    try:
        return encode(list(types), list(args))
    except EncodingError as exc:
        raise TypeMismatchError(f"argument does not match ({','.join(types)}): {exc}") from exc


def decode_return(types: Sequence[str], raw: bytes) -> tuple:
    """
    Decode return data of a read-only call.

    Raises:
        DecodeError: Wrong word count for the declared types, or data that
            eth-abi rejects (e.g. non-zero padding for uint8)
    """
    types = _check_types(types)
    parsed = [parse_type(t) for t in types]
    head_size = WORD_SIZE * len(types)

    if len(raw) % WORD_SIZE:
        raise DecodeError(f"return data is {len(raw)} bytes, not word-aligned")
    if not any(p.is_dynamic for p in parsed):
        if len(raw) != head_size:
            raise DecodeError(
                f"expected {len(types)} word(s) for ({','.join(types)}), "
                f"got {len(raw) // WORD_SIZE}"
            )
    elif len(raw) < head_size:
        raise DecodeError(
            f"return data too short for ({','.join(types)}): {len(raw)} bytes"
        )

    try:
        return tuple(decode(list(types), raw))
    except DecodingError as exc:
        raise DecodeError(f"cannot decode ({','.join(types)}): {exc}") from exc


@dataclass(frozen=True)
class FunctionSpec:
    """One contract function, driven entirely by its declared types."""
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()
    state_mutability: str = "nonpayable"

    @classmethod
    def from_abi_entry(cls, entry: dict) -> "FunctionSpec":
        if entry.get("type") != "function":
            raise TypeMismatchError(f"Not a function ABI entry: {entry.get('name')!r}")
        return cls(
            name=entry["name"],
            inputs=_check_types(inp["type"] for inp in entry.get("inputs", [])),
            outputs=_check_types(out["type"] for out in entry.get("outputs", [])),
            state_mutability=entry.get("stateMutability", "nonpayable"),
        )

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_selector(self.signature)

    def encode_call(self, args: Sequence[Any] = ()) -> CallData:
        return CallData(
            selector=self.selector,
            encoded_args=encode_arguments(self.inputs, args),
        )

    def decode_output(self, raw: bytes) -> tuple:
        return decode_return(self.outputs, raw)


def function_table(abi: list[dict]) -> dict[str, FunctionSpec]:
    """Build a name -> FunctionSpec table from a JSON ABI."""
    return {
        entry["name"]: FunctionSpec.from_abi_entry(entry)
        for entry in abi
        if entry.get("type") == "function"
    }


ERC20 = function_table(ERC20_ABI)


def encode_call(signature: str, args: Sequence[Any] = ()) -> CallData:
    """
    ABI-encode a call from its canonical signature.

    Args:
        signature: e.g. "transfer(address,uint256)"
        args: Values matching the declared types

    Raises:
        TypeMismatchError: Wrong arity, or a value that does not fit its type
    """
    name, types = parse_signature(signature)
    return FunctionSpec(name=name, inputs=types).encode_call(args)
