"""
Tires - Compound table and degradation model.

Provides:
- Tire compounds and their degradation coefficients
- Linear degradation penalty per lap of tire age
- Compound change and lap-age bookkeeping for a tire set
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from gridsim.errors import ConfigurationError


class TireCompound(str, Enum):
    """Available dry tire compounds."""

    SOFT = "soft"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: str) -> "TireCompound":
        """Look up a compound by name, case-insensitive.

        Args:
            value: Compound name, e.g. "Medium"

        Returns:
            Matching compound

        Raises:
            ConfigurationError: If the name is not a known compound
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            known = ", ".join(c.value for c in cls)
            raise ConfigurationError(
                f"Unknown tire compound '{value}' (expected one of: {known})"
            ) from None


@dataclass(frozen=True)
class CompoundCoefficients:
    """Degradation coefficients of one compound."""
    k0: float  # (s) offset of a fresh set
    k1: float  # (s/lap) time loss per lap of age


DEFAULT_COEFFICIENTS: Mapping[TireCompound, CompoundCoefficients] = MappingProxyType({
    TireCompound.SOFT: CompoundCoefficients(k0=0.0, k1=0.10),
    TireCompound.MEDIUM: CompoundCoefficients(k0=0.5, k1=0.06),
    TireCompound.HARD: CompoundCoefficients(k0=1.0, k1=0.035),
})


@dataclass
class TireState:
    """Tire set currently fitted to a vehicle.

    Only TireModel mutates this record.
    """
    compound: TireCompound
    age: int = 0  # completed laps on this set


class TireModel:
    """Compound-based linear degradation model.

    The penalty for a set of tires is ``k0 + k1 * age``, with the
    coefficients taken from an immutable per-compound table.

    Usage:
        model = TireModel()
        penalty = model.degradation_penalty(TireCompound.MEDIUM, age=4)
    """

    def __init__(
        self,
        coefficients: Mapping[TireCompound, CompoundCoefficients] | None = None,
    ):
        """Initialize tire model.

        Args:
            coefficients: Compound coefficient table. Uses defaults if None.
        """
        table = dict(DEFAULT_COEFFICIENTS if coefficients is None else coefficients)
        missing = [c.value for c in TireCompound if c not in table]
        if missing:
            raise ConfigurationError(
                f"Missing degradation coefficients for: {', '.join(missing)}"
            )
        self._coefficients = MappingProxyType(table)

    @property
    def coefficients(self) -> Mapping[TireCompound, CompoundCoefficients]:
        """Read-only compound coefficient table."""
        return self._coefficients

    def degradation_penalty(self, compound: TireCompound, age: int) -> float:
        """Time loss per lap caused by the tires.

        Args:
            compound: Fitted compound
            age: Completed laps on the set (non-negative)

        Returns:
            Penalty in seconds
        """
        coeffs = self._coefficients[compound]
        return coeffs.k0 + coeffs.k1 * age

    @staticmethod
    def on_compound_change(state: TireState, new_compound: TireCompound) -> None:
        """Fit a fresh set of the given compound."""
        state.compound = new_compound
        state.age = 0

    @staticmethod
    def on_lap_completed(state: TireState) -> None:
        """Age the fitted set by one lap."""
        state.age += 1
