# src/dcreport/logic/derivation.py

from __future__ import annotations

import math
from typing import Tuple

DEFAULT_DC_RATE = 0.3

REMARK_DISCOUNTED = "LESS BY DR"
REMARK_DEFAULT = "C/O nan"


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    e.g. 2.5 -> 3, -2.5 -> -2 (the builtin round() would give 2 and -2)
    """
    return int(math.floor(value + 0.5))


def compute_dc_amount(total_fee: float, discount: float, dc_rate: float = DEFAULT_DC_RATE) -> int:
    """DC = gross * rate - discount, rounded, never below zero."""
    amount = round_half_up(total_fee * dc_rate - discount)
    return max(amount, 0)


def compute_remark(discount: float) -> str:
    return REMARK_DISCOUNTED if discount > 0 else REMARK_DEFAULT


def compute_derived(
    total_fee: float,
    discount: float,
    dc_rate: float = DEFAULT_DC_RATE,
) -> Tuple[int, str]:
    """
    Derived fields of a case: (dc_amount, remark).

    e.g.
        compute_derived(1000, 100) -> (200, "LESS BY DR")
        compute_derived(1000, 0)   -> (300, "C/O nan")
        compute_derived(100, 100)  -> (0, "LESS BY DR")
    """
    return compute_dc_amount(total_fee, discount, dc_rate), compute_remark(discount)
