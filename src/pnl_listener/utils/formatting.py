"""Fixed-point formatting of signed margin deltas."""

from __future__ import annotations


def format_units(value: int, decimals: int) -> str:
    """Format a non-negative integer scaled by 10**decimals with exactly `decimals` digits.

    format_units(12345678, 6) -> "12.345678"; format_units(5, 0) -> "5".
    """
    if value < 0:
        raise ValueError("value must be non-negative")
    if decimals < 0:
        raise ValueError("decimals must be non-negative")
    if decimals == 0:
        return str(value)
    whole, frac = divmod(value, 10**decimals)
    return f"{whole}.{frac:0{decimals}d}"


def format_signed_delta(close: int, open_: int, decimals: int = 6) -> str:
    """Return (close - open_) / 10**decimals as a signed decimal string.

    Exact integer arithmetic, so uint256 inputs are fine. A "-" prefix is added
    only when close < open_; equal inputs give "0.000000" for decimals=6.

    Raises:
        ValueError: If either magnitude or decimals is negative.
    """
    if close < 0 or open_ < 0:
        raise ValueError("margins must be non-negative")
    if close >= open_:
        return format_units(close - open_, decimals)
    return "-" + format_units(open_ - close, decimals)
