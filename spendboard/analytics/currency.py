from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Units of each currency per 1 USD.
DEFAULT_USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.93,
    "GBP": 0.79,
    "JPY": 151.77,
    "AUD": 1.53,
    "CAD": 1.37,
    "CNY": 7.26,
    "INR": 83.42,
    "TWD": 32.27,
    "SGD": 1.35,
    "VND": 25305.0,
    "IDR": 16158.0,
    "THB": 36.17,
    "MYR": 4.72,
}


class RateTable:
    """
    Immutable table of exchange rates. ``rate(a, b)`` answers how many units of
    ``b`` one unit of ``a`` buys, using a direct entry or the inverse of the
    opposite entry.
    """

    def __init__(self, rates: Mapping[Tuple[str, str], float], base: str = "USD") -> None:
        self._rates: Dict[Tuple[str, str], float] = {}
        for (source, target), value in rates.items():
            if value and value > 0:
                self._rates[(source.upper(), target.upper())] = float(value)
        self.base = base.upper()

    @classmethod
    def from_nested(cls, nested: Mapping[str, Mapping[str, float]], base: str = "USD") -> "RateTable":
        flat = {
            (source, target): value
            for source, row in nested.items()
            for target, value in row.items()
        }
        return cls(flat, base=base)

    @classmethod
    def default(cls) -> "RateTable":
        return cls.from_nested({"USD": DEFAULT_USD_RATES}, base="USD")

    def rate(self, source: str, target: str) -> Optional[float]:
        direct = self._rates.get((source, target))
        if direct is not None:
            return direct
        inverse = self._rates.get((target, source))
        if inverse is not None:
            return 1.0 / inverse
        return None

    def items(self) -> Iterable[Tuple[Tuple[str, str], float]]:
        return sorted(self._rates.items())


class CurrencyConverter:
    """Arithmetic-only conversion over a ``RateTable``.

    Missing rate paths degrade to a 1:1 conversion. Each missing pair is logged
    once per converter and kept in ``degraded_pairs`` so callers can surface it.
    """

    def __init__(self, table: Optional[RateTable] = None) -> None:
        self.table = table or RateTable.default()
        self._degraded: Set[Tuple[str, str]] = set()

    @property
    def degraded_pairs(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(sorted(self._degraded))

    def rate(self, source: str, target: str) -> Optional[float]:
        source = source.upper()
        target = target.upper()
        if source == target:
            return 1.0

        direct = self.table.rate(source, target)
        if direct is not None:
            return direct

        base = self.table.base
        if base in (source, target):
            return None
        to_base = self.table.rate(source, base)
        from_base = self.table.rate(base, target)
        if to_base is None or from_base is None:
            return None
        return to_base * from_base

    def convert(self, amount: float, source: str, target: str) -> float:
        if source.upper() == target.upper():
            return amount

        rate = self.rate(source, target)
        if rate is None:
            pair = (source.upper(), target.upper())
            if pair not in self._degraded:
                self._degraded.add(pair)
                logger.warning(f"No exchange rate for {pair[0]}->{pair[1]}, using 1:1")
            return amount
        return amount * rate
