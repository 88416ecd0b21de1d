"""
Unit conversion between human decimal strings and integer base units.

All arithmetic is done on Python ints parsed straight from the decimal
string.  Floats are never involved, so amounts above 2**53 stay exact.
"""

from __future__ import annotations

import re

from ..errors import FormatError, PrecisionError

ETHER_DECIMALS = 18
GWEI_DECIMALS = 9
MAX_DECIMALS = 255

UINT256_MAX = 2**256 - 1
# decimal digits in UINT256_MAX
_MAX_INT_DIGITS = len(str(UINT256_MAX))

_DECIMAL_RE = re.compile(r"^(?P<int>\d*)(?:\.(?P<frac>\d*))?$", re.ASCII)


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise FormatError(f"decimals must be an integer, got {decimals!r}")
    if not 0 <= decimals <= MAX_DECIMALS:
        raise FormatError(f"decimals must be in 0..{MAX_DECIMALS}, got {decimals}")


def _split(amount: str) -> tuple[str, str]:
    """Split a decimal string into (integer digits, fractional digits)."""
    if not isinstance(amount, str):
        raise FormatError(f"amount must be a decimal string, got {type(amount).__name__}")
    text = amount.strip()
    if text.startswith("-"):
        raise FormatError(f"amount must not be negative: {amount!r}")
    match = _DECIMAL_RE.match(text)
    if match is None:
        raise FormatError(f"not a decimal number: {amount!r}")
    int_part = match.group("int")
    frac_part = match.group("frac") or ""
    if not int_part and not frac_part:
        raise FormatError(f"not a decimal number: {amount!r}")
    return int_part, frac_part


def check_amount_format(amount: str) -> None:
    """Raise FormatError unless ``amount`` is a non-negative decimal string."""
    _split(amount)


def normalize_amount(amount: str) -> str:
    """Canonical form: no leading zeros, no trailing fractional zeros."""
    int_part, frac_part = _split(amount)
    int_part = int_part.lstrip("0") or "0"
    frac_part = frac_part.rstrip("0")
    return f"{int_part}.{frac_part}" if frac_part else int_part


def to_base_units(amount: str, decimals: int) -> int:
    """
    Scale a human decimal amount by ``10**decimals``.

    Args:
        amount: Non-negative decimal string (e.g. "10.5")
        decimals: Token precision, 0..255

    Returns:
        Amount in integer base units

    Raises:
        FormatError: Non-numeric, negative or malformed input, or a value
            that does not fit in uint256
        PrecisionError: More significant fractional digits than ``decimals``
    """
    _check_decimals(decimals)
    int_part, frac_part = _split(amount)
    significant = frac_part.rstrip("0")
    if len(significant) > decimals:
        raise PrecisionError(
            f"{amount!r} has {len(significant)} fractional digits; "
            f"at most {decimals} allowed"
        )
    int_digits = int_part.lstrip("0")
    if len(int_digits) > _MAX_INT_DIGITS:
        raise FormatError(f"amount exceeds uint256: {amount!r}")
    padded = significant.ljust(decimals, "0")
    base = int(int_digits or "0") * 10**decimals + int(padded or "0")
    if base > UINT256_MAX:
        raise FormatError(f"amount exceeds uint256: {amount!r}")
    return base


def to_human_units(base: int, decimals: int) -> str:
    """Inverse of :func:`to_base_units`, returned in normalized form."""
    _check_decimals(decimals)
    if isinstance(base, bool) or not isinstance(base, int):
        raise FormatError(f"base amount must be an integer, got {base!r}")
    if base < 0:
        raise FormatError(f"base amount must not be negative: {base}")
    whole, frac = divmod(base, 10**decimals)
    if decimals == 0 or frac == 0:
        return str(whole)
    frac_text = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{frac_text}"


def parse_ether(amount: str) -> int:
    return to_base_units(amount, ETHER_DECIMALS)


def format_ether(wei: int) -> str:
    return to_human_units(wei, ETHER_DECIMALS)


def parse_gwei(amount: str) -> int:
    return to_base_units(amount, GWEI_DECIMALS)


def format_gwei(wei: int) -> str:
    return to_human_units(wei, GWEI_DECIMALS)
