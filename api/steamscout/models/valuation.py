"""Library valuation result."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(slots=True)
class ValuationResult:
    """Sum of current regional prices across an owned library.

    ``counted + missed == owned`` always holds.
    """
    value: Decimal
    currency_code: str
    currency: str
    region: str
    counted: int
    missed: int
    owned: int
