# -*- coding: utf-8 -*-
"""Utility modules."""

from pnl_listener.utils.dedupe import event_identity
from pnl_listener.utils.formatting import format_signed_delta, format_units
from pnl_listener.utils.validation import (
    is_hex_address,
    mask_address,
    normalize_address,
)

__all__ = [
    "event_identity",
    "format_signed_delta",
    "format_units",
    "is_hex_address",
    "mask_address",
    "normalize_address",
]
