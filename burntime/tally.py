"""
Burn-Time Prediction - Resource Tally

A mapping from propellant kind to a scalar quantity (tons, or tons/second).
Absent kinds count as zero.
"""

import math
from typing import Dict, Iterator, KeysView


class Tally:
    """Accumulates quantities per propellant kind."""

    def __init__(self, values: Dict[str, float] = None):
        self._values: Dict[str, float] = {}
        if values:
            for kind, amount in values.items():
                self.add(kind, amount)

    def zero(self) -> None:
        """Set every tracked quantity to zero, keeping the keys."""
        for kind in self._values:
            self._values[kind] = 0.0

    def add(self, kind: str, amount: float) -> None:
        """Add `amount` to `kind`, creating the key if needed."""
        amount = float(amount)
        if not math.isfinite(amount):
            raise ValueError(f"Tally amount for {kind!r} must be finite, got {amount}")
        if amount < 0.0:
            raise ValueError(f"Tally amount for {kind!r} must be non-negative, got {amount}")
        self._values[kind] = self._values.get(kind, 0.0) + amount

    def has(self, kind: str) -> bool:
        """True if `kind` is present in a strictly positive amount."""
        return self._values.get(kind, 0.0) > 0.0

    def sum(self) -> float:
        """Total across all kinds."""
        return float(sum(self._values.values()))

    def keys(self) -> KeysView:
        return self._values.keys()

    def items(self):
        return self._values.items()

    def __getitem__(self, kind: str) -> float:
        return self._values[kind]

    def __contains__(self, kind: str) -> bool:
        return kind in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v:.6g}" for k, v in self._values.items())
        return f"Tally({inner})"
