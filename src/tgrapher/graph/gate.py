"""Value-range gates on table columns.

A DataGate holds one or more closed [low, high] ranges for a single column; a
value passes the gate if it falls inside any of them. A GateSet combines gates
on different columns: a row is kept when any enabled gate accepts it.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

import numpy as np
import pandas as pd

from tgrapher.utils.logging import get_logger

logger = get_logger(__name__)

# Separator used when printing the ranges of a gate.
UNION_SYMBOL = " U "


def format_bound(value: float) -> str:
    """Format a range bound the way the console summary prints numbers."""
    return f"{value:g}"


class DataGate:
    """Union of closed value ranges on one column.

    Attributes:
        name: Column the gate reads.
        ranges: List of (low, high) tuples, in the order they were added.
        enabled: False until the gate is bound to a table that has the column.
    """

    def __init__(self, name: str, ranges: Optional[Iterable[tuple[float, float]]] = None) -> None:
        self.name = name
        self.ranges: list[tuple[float, float]] = []
        self.enabled = False
        for low, high in ranges or ():
            self.add(low, high)

    def __repr__(self) -> str:
        return f"DataGate(name={self.name!r}, ranges={self.ranges!r}, enabled={self.enabled})"

    def add(self, low: float, high: float) -> bool:
        """Append the range [low, high].

        Returns:
            False (and leaves the gate unchanged) if low > high.
        """
        low = float(low)
        high = float(high)
        if low > high:
            return False
        self.ranges.append((low, high))
        return True

    def contains(self, value: float) -> bool:
        """True if the gate is enabled and value lies in any of its ranges."""
        if not self.enabled:
            return False
        for low, high in self.ranges:
            if low <= value <= high:
                return True
        return False

    def mask(self, values: pd.Series | np.ndarray) -> np.ndarray:
        """Vectorised contains() over a column; NaN and non-numeric values never pass."""
        v = pd.to_numeric(pd.Series(values), errors="coerce").to_numpy(dtype=float)
        out = np.zeros(len(v), dtype=bool)
        if not self.enabled:
            return out
        for low, high in self.ranges:
            out |= (v >= low) & (v <= high)
        return out

    def describe(self) -> str:
        """Ranges as "[l1, h1] U [l2, h2]"."""
        return UNION_SYMBOL.join(
            f"[{format_bound(low)}, {format_bound(high)}]" for low, high in self.ranges
        )


class GateSet:
    """Ordered collection of DataGate objects keyed by column name."""

    def __init__(self) -> None:
        self._gates: dict[str, DataGate] = {}

    def __len__(self) -> int:
        return len(self._gates)

    def __iter__(self) -> Iterator[DataGate]:
        return iter(self._gates.values())

    def __contains__(self, name: object) -> bool:
        return name in self._gates

    def __getitem__(self, name: str) -> DataGate:
        return self._gates[name]

    @classmethod
    def from_specs(cls, specs: Iterable[tuple[str, float, float]]) -> "GateSet":
        """Build a GateSet from (name, low, high) triples, e.g. repeated --gate options."""
        gates = cls()
        for name, low, high in specs:
            gates.add(name, low, high)
        return gates

    def add(self, name: str, low: float, high: float) -> DataGate:
        """Add [low, high] to the gate on name, creating the gate on first use."""
        gate = self._gates.get(name)
        if gate is None:
            gate = DataGate(name)
            self._gates[name] = gate
        if not gate.add(low, high):
            logger.warning(
                "Ignoring range [%s, %s] for gate %r: lower limit exceeds upper limit",
                format_bound(float(low)),
                format_bound(float(high)),
                name,
            )
        return gate

    def bind(self, columns: Iterable[str]) -> None:
        """Enable gates whose column exists; disable the rest with a warning."""
        available = {str(c) for c in columns}
        for gate in self._gates.values():
            gate.enabled = gate.name in available
            if not gate.enabled:
                logger.warning("Failed to load gate column %r; gate disabled", gate.name)

    def enabled_gates(self) -> list[DataGate]:
        return [g for g in self._gates.values() if g.enabled]

    def mask(self, df: pd.DataFrame) -> np.ndarray:
        """Rows accepted by at least one enabled gate.

        With no gates every row is accepted. With gates defined but none
        enabled, no row is accepted.
        """
        n = len(df)
        if not self._gates:
            return np.ones(n, dtype=bool)
        labels = {str(c): c for c in df.columns}
        out = np.zeros(n, dtype=bool)
        for gate in self.enabled_gates():
            out |= gate.mask(df[labels[gate.name]])
        return out
