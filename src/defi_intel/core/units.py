"""Exact conversions between raw on-chain integers and human-readable amounts."""

from decimal import Decimal


def format_token_amount(raw: str | int, decimals: int) -> str:
    """
    Format a raw smallest-unit amount as a decimal string.

    Works on the digit string directly so arbitrarily large balances keep
    full precision. Trailing fractional zeros are stripped.

    Parameters
    ----------
    raw : str | int
        Integer amount in the token's smallest unit (may be negative)
    decimals : int
        Token decimal precision

    Returns
    -------
    str
        Human-readable amount (e.g. '1.5' for raw '1500000' with 6 decimals)

    Examples
    --------
    >>> format_token_amount("1500000", 6)
    '1.5'
    >>> format_token_amount("42", 18)
    '0.000000000000000042'

    """
    raw = str(raw)
    if decimals < 0:
        msg = f"decimals must be non-negative, got {decimals}"
        raise ValueError(msg)

    negative = raw.startswith("-")
    digits = raw[1:] if negative else raw
    if not digits.isdigit():
        msg = f"Raw amount must be an integer string, got {raw!r}"
        raise ValueError(msg)

    if decimals == 0:
        return raw

    padded = digits.rjust(decimals + 1, "0")
    int_part = padded[:-decimals]
    frac_part = padded[-decimals:].rstrip("0")

    formatted = f"{int_part}.{frac_part}" if frac_part else int_part
    return f"-{formatted}" if negative else formatted


def parse_token_amount(amount: str, decimals: int) -> str:
    """
    Convert a human-readable amount to a raw smallest-unit integer string.

    Fractional digits beyond ``decimals`` are truncated.

    Parameters
    ----------
    amount : str
        Decimal amount (e.g. '1.5')
    decimals : int
        Token decimal precision

    Returns
    -------
    str
        Raw integer string without leading zeros ('0' for zero)

    """
    negative = amount.startswith("-")
    body = amount[1:] if negative else amount
    int_part, _, frac_part = body.partition(".")
    if not (int_part or frac_part) or not (int_part + frac_part).isdigit():
        msg = f"Not a decimal amount: {amount!r}"
        raise ValueError(msg)

    padded_frac = frac_part.ljust(decimals, "0")[:decimals]
    raw = (int_part + padded_frac).lstrip("0") or "0"
    return f"-{raw}" if negative and raw != "0" else raw


def to_decimal(raw: str | int, decimals: int) -> Decimal:
    """Return the raw amount as an exact Decimal in whole-token units."""
    return Decimal(format_token_amount(raw, decimals))


def format_usd(value: Decimal) -> str:
    """Format a USD value with two decimals (e.g. '$120.00')."""
    return f"${value:.2f}"


def format_percent(value: Decimal) -> str:
    """Format a percentage with two decimals (e.g. '3.95%')."""
    return f"{value:.2f}%"


def truncate_address(address: str) -> str:
    """Shorten an address for display: 0x1234...abcd."""
    if len(address) <= 12:
        return address
    return f"{address[:6]}...{address[-4:]}"
