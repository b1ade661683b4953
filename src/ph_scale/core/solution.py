"""
Solution Module
===============

The beaker contents: a selected solute diluted with water.

STATE
=====

Primitive cells (written by the owner of the solution):
- solute_property  ObservableValue[Solute]   shared with the dropper
- solute_volume    ObservableValue[float]    [L], ≥ 0
- water_volume     ObservableValue[float]    [L], ≥ 0

Derived cells (never written):
- volume  = solute_volume + water_volume
- pH      = ConcentrationMath.compute_pH(solute pH, V_s, water pH, V_w)
- color   = water color, or the solute color ramp at V_s / V

Invariant: solute_volume + water_volume ≤ max_volume. The volume cells
validate every write and raise VolumeCapacityError instead of clamping.

Selecting a different solute empties the beaker (both volumes set to 0).

DERIVED QUANTITIES
==================

Concentration, molecule and mole accessors are pure functions of the
current pH and volume; each accepts an explicit pH that overrides the
solution pH. NO_READING gives 0.

License: MIT
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional

from .chemistry import ConcentrationMath, PHValue
from .observable import NO_READING, DerivedValue, ObservableValue
from .solute import Color, SolutePHTracker, Water, WATER

logger = logging.getLogger(__name__)

# Slack for float round-off when a volume is filled up to capacity
VOLUME_TOLERANCE = 1e-9  # [L]


class VolumeCapacityError(AssertionError):
    """Solution volume would be negative or exceed the beaker capacity."""

    pass


class GraphUnits(Enum):
    """Units for concentration graphs."""

    MOLES_PER_LITER = "mol/L"
    MOLES = "mol"


class SolutionLike(ABC):
    """
    Capability interface for anything the pH meter and views can read.

    Exposes pH, color and volume as observable cells and the selected
    solute.
    """

    solute_property: ObservableValue
    volume: ObservableValue
    pH: ObservableValue
    color: ObservableValue

    @abstractmethod
    def reset(self) -> None:
        pass

    def is_empty(self) -> bool:
        return self.volume.get() == 0


class Solution(SolutionLike):
    """
    Solute diluted with water in a beaker of fixed capacity.

    Typical Use:
        solute = ObservableValue(COFFEE)
        solution = Solution(solute, 0.5, WATER, 0.5, max_volume=1.2)
        solution.pH.get()   # 5.30...
    """

    def __init__(
        self,
        solute_property: ObservableValue,
        solute_volume: float,
        water: Water,
        water_volume: float,
        max_volume: float,
        decimal_places: int = 2,
    ):
        """
        Initialize solution.

        Args:
            solute_property: Selected solute, owned by the caller
            solute_volume: Initial solute volume [L]
            water: Solvent
            water_volume: Initial water volume [L]
            max_volume: Beaker capacity [L]
            decimal_places: Meter display precision used for the water-color rule

        Raises:
            VolumeCapacityError: If the initial volumes do not fit
        """
        if max_volume <= 0:
            raise ValueError(f"max_volume must be positive, got {max_volume}")

        self.solute_property = solute_property
        self.water = water
        self.max_volume = max_volume
        self.decimal_places = decimal_places

        self.solute_volume = ObservableValue(
            solute_volume,
            name="solute_volume",
            validator=lambda v: self._check_volume(v, self._other_volume("solute")),
        )
        self.water_volume = ObservableValue(
            water_volume,
            name="water_volume",
            validator=lambda v: self._check_volume(v, self._other_volume("water")),
        )

        # pH of the selected solute, following adjustable solutes too
        self._solute_pH = SolutePHTracker(solute_property, name="solution.solute_pH")

        self.volume = DerivedValue(
            [self.solute_volume, self.water_volume],
            lambda sv, wv: sv + wv,
            name="volume",
        )

        self.pH = DerivedValue(
            [self._solute_pH.pH, self.solute_volume, self.water_volume],
            lambda solute_pH, sv, wv: ConcentrationMath.compute_pH(
                solute_pH, sv, self.water.pH, wv
            ),
            name="pH",
        )

        self.color = DerivedValue(
            [self.solute_property, self.solute_volume, self.water_volume, self.pH],
            lambda solute, sv, wv, pH: self.compute_color(solute, sv, wv, pH),
            name="color",
            use_deep_equality=True,
        )

        # A new solute starts with an empty beaker
        self.solute_property.lazy_link(self._on_solute_changed)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _other_volume(self, which: str) -> float:
        # The validator of the first cell runs before the second exists
        if which == "solute":
            cell = getattr(self, "water_volume", None)
        else:
            cell = getattr(self, "solute_volume", None)
        return 0.0 if cell is None else cell.get()

    def _check_volume(self, volume: float, other_volume: float) -> None:
        if volume < 0:
            raise VolumeCapacityError(f"Volume cannot be negative: {volume}L")
        if volume + other_volume > self.max_volume + VOLUME_TOLERANCE:
            raise VolumeCapacityError(
                f"Solution volume {volume + other_volume:.6f}L exceeds "
                f"capacity {self.max_volume}L"
            )

    def _on_solute_changed(self, solute, old_solute) -> None:
        logger.debug(
            f"Solute changed: {getattr(old_solute, 'key', old_solute)} -> {solute.key}"
        )
        self.water_volume.set(0.0)
        self.solute_volume.set(0.0)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Restore solute and volumes; pH and color follow."""
        self.solute_property.reset()
        # Empty first so neither restored volume trips the capacity check
        self.water_volume.set(0.0)
        self.solute_volume.set(0.0)
        self.solute_volume.reset()
        self.water_volume.reset()

    def dispose(self) -> None:
        """Detach from the solute selector and drop all subscribers."""
        self.solute_property.unlink(self._on_solute_changed)
        for cell in (self.color, self.pH, self.volume):
            cell.dispose()
        self._solute_pH.dispose()
        self.solute_volume.dispose()
        self.water_volume.dispose()

    # ------------------------------------------------------------------
    # Volume [L]
    # ------------------------------------------------------------------

    def is_full(self) -> bool:
        return self.volume.get() >= self.max_volume - VOLUME_TOLERANCE

    def get_free_volume(self) -> float:
        """Volume still available to fill [L]."""
        return max(0.0, self.max_volume - self.volume.get())

    def add_solute(self, delta_volume: float) -> float:
        """
        Add solute, limited to the free volume.

        Args:
            delta_volume: Requested volume [L]

        Returns:
            Volume actually added [L]
        """
        added = self._clip_to_free_volume(delta_volume, "solute")
        if added > 0:
            self.solute_volume.set(self.solute_volume.get() + added)
        return added

    def add_water(self, delta_volume: float) -> float:
        """
        Add water, limited to the free volume.

        Returns:
            Volume actually added [L]
        """
        added = self._clip_to_free_volume(delta_volume, "water")
        if added > 0:
            self.water_volume.set(self.water_volume.get() + added)
        return added

    def drain(self, delta_volume: float) -> float:
        """
        Remove solution, taking solute and water in proportion.

        Args:
            delta_volume: Requested volume [L]

        Returns:
            Volume actually removed [L]
        """
        if delta_volume < 0:
            raise ValueError(f"Drain volume cannot be negative: {delta_volume}")

        total = self.volume.get()
        if delta_volume == 0 or total == 0:
            return 0.0

        if delta_volume >= total - VOLUME_TOLERANCE:
            self.solute_volume.set(0.0)
            self.water_volume.set(0.0)
            return total

        remaining = 1.0 - delta_volume / total
        self.solute_volume.set(self.solute_volume.get() * remaining)
        self.water_volume.set(self.water_volume.get() * remaining)
        return delta_volume

    def _clip_to_free_volume(self, delta_volume: float, what: str) -> float:
        if delta_volume < 0:
            raise ValueError(f"Cannot add a negative {what} volume: {delta_volume}")
        free = self.get_free_volume()
        if delta_volume > free:
            logger.warning(
                f"Requested {delta_volume:.4f}L of {what}, only {free:.4f}L free"
            )
            return free
        return delta_volume

    # ------------------------------------------------------------------
    # Concentration [mol/L]
    # ------------------------------------------------------------------

    def _resolve_pH(self, pH: Optional[PHValue]) -> PHValue:
        return self.pH.get() if pH is None else pH

    def get_concentration_H3O(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.pH_to_concentration_H3O(self._resolve_pH(pH))

    def get_concentration_OH(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.pH_to_concentration_OH(self._resolve_pH(pH))

    def get_concentration_H2O(self) -> float:
        return ConcentrationMath.concentration_H2O(self.volume.get())

    def set_concentration_H3O(self, concentration: float) -> None:
        """
        Set [H₃O⁺] by back-solving the pH of the active solute.

        Raises:
            ValueError: If the solute pH is fixed or the result is off-scale
        """
        self._set_solute_pH(ConcentrationMath.concentration_H3O_to_pH(concentration))

    def set_concentration_OH(self, concentration: float) -> None:
        """Set [OH⁻] by back-solving the pH of the active solute."""
        self._set_solute_pH(ConcentrationMath.concentration_OH_to_pH(concentration))

    # ------------------------------------------------------------------
    # Number of molecules
    # ------------------------------------------------------------------

    def get_molecules_H3O(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.compute_molecules(
            self.get_concentration_H3O(pH), self.volume.get()
        )

    def get_molecules_OH(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.compute_molecules(
            self.get_concentration_OH(pH), self.volume.get()
        )

    def get_molecules_H2O(self) -> float:
        return ConcentrationMath.compute_molecules(
            self.get_concentration_H2O(), self.volume.get()
        )

    # ------------------------------------------------------------------
    # Moles
    # ------------------------------------------------------------------

    def get_moles_H3O(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.compute_moles(
            self.volume.get(), self.get_concentration_H3O(pH)
        )

    def get_moles_OH(self, pH: Optional[PHValue] = None) -> float:
        return ConcentrationMath.compute_moles(
            self.volume.get(), self.get_concentration_OH(pH)
        )

    def get_moles_H2O(self) -> float:
        return ConcentrationMath.compute_moles(
            self.volume.get(), self.get_concentration_H2O()
        )

    def set_moles_H3O(self, moles: float) -> None:
        """
        Set moles of H₃O⁺ by back-solving the pH of the active solute.

        Raises:
            ValueError: If the solution is empty, moles is not positive, or
                the active solute has a fixed pH
        """
        self._set_solute_pH(ConcentrationMath.moles_H3O_to_pH(moles, self.volume.get()))

    def set_moles_OH(self, moles: float) -> None:
        """Set moles of OH⁻ by back-solving the pH of the active solute."""
        self._set_solute_pH(ConcentrationMath.moles_OH_to_pH(moles, self.volume.get()))

    def _set_solute_pH(self, pH: float) -> None:
        solute = self.solute_property.get()
        if not solute.is_adjustable:
            raise ValueError(f"Solute '{solute.key}' has a fixed pH")
        solute.set_pH(pH)

    # ------------------------------------------------------------------
    # Graph readout
    # ------------------------------------------------------------------

    def quantities(
        self, units: GraphUnits = GraphUnits.MOLES_PER_LITER
    ) -> Dict[str, float]:
        """
        H₃O⁺, OH⁻ and H₂O amounts for concentration graphs.

        Args:
            units: MOLES_PER_LITER for concentration, MOLES for quantity

        Returns:
            Dictionary with 'H3O', 'OH', 'H2O'
        """
        if units is GraphUnits.MOLES_PER_LITER:
            return {
                "H3O": self.get_concentration_H3O(),
                "OH": self.get_concentration_OH(),
                "H2O": self.get_concentration_H2O(),
            }
        return {
            "H3O": self.get_moles_H3O(),
            "OH": self.get_moles_OH(),
            "H2O": self.get_moles_H2O(),
        }

    # ------------------------------------------------------------------
    # Color
    # ------------------------------------------------------------------

    def compute_color(
        self, solute, solute_volume: float, water_volume: float, pH: PHValue
    ) -> Color:
        """
        Color of the solution.

        Water color when the beaker is empty, holds no solute, or reads as
        water on the meter. Otherwise the solute ramp at V_s / V.
        """
        volume = solute_volume + water_volume
        if volume == 0 or solute_volume == 0 or self.is_equivalent_to_water(pH, water_volume):
            return self.water.color
        return solute.color_at(solute_volume / volume)

    def is_equivalent_to_water(
        self, pH: Optional[PHValue] = None, water_volume: Optional[float] = None
    ) -> bool:
        """
        True if the meter would display the pH of water and there is water.

        A pH of 7.001 displays as 7.00 and is treated as water.
        """
        pH = self._resolve_pH(pH)
        if water_volume is None:
            water_volume = self.water_volume.get()
        if pH is NO_READING:
            return False
        displayed = ConcentrationMath.round_pH(pH, self.decimal_places)
        return displayed == self.water.pH and water_volume > 0

    def __repr__(self) -> str:
        pH = self.pH.get()
        pH_text = "-" if pH is NO_READING else f"{pH:.3f}"
        return (
            f"Solution(solute='{self.solute_property.get().key}', "
            f"V_s={self.solute_volume.get():.3f}L, V_w={self.water_volume.get():.3f}L, "
            f"pH={pH_text})"
        )


def validate_solution() -> None:
    """
    Validation of solution behaviour.

    Tests:
    1. Empty solution has no pH and water color
    2. Changing solute empties the beaker
    3. Capacity is enforced
    4. Draining keeps the solute fraction
    5. Reset restores the initial state
    """
    from .solute import COFFEE, DRAIN_CLEANER

    solute = ObservableValue(COFFEE, name="solute")
    solution = Solution(solute, 0.5, WATER, 0.0, max_volume=1.2)

    # Test 1
    assert abs(solution.pH.get() - COFFEE.pH) < 1e-9, "Undiluted pH"
    solution.drain(1.0)
    assert solution.pH.get() is NO_READING, "Empty solution has no pH"
    assert solution.color.get() == WATER.color, "Empty solution is water colored"

    # Test 2
    solution.add_solute(0.3)
    solution.add_water(0.3)
    solute.set(DRAIN_CLEANER)
    assert solution.solute_volume.get() == 0.0 and solution.water_volume.get() == 0.0

    # Test 3
    try:
        solution.water_volume.set(2.0)
    except VolumeCapacityError:
        pass
    else:
        raise AssertionError("Overfilling should fail fast")

    # Test 4
    solution.add_solute(0.2)
    solution.add_water(0.6)
    solution.drain(0.4)
    ratio = solution.solute_volume.get() / solution.volume.get()
    assert abs(ratio - 0.25) < 1e-12, "Drain should keep the solute fraction"

    # Test 5
    solution.reset()
    assert solute.get() is COFFEE and solution.solute_volume.get() == 0.5

    print("✓ All solution validations passed")


if __name__ == "__main__":
    validate_solution()
