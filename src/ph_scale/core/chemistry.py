"""
Chemistry Module for the pH Scale Solution
==========================================

Stateless formulas relating pH, ion concentration, molecule count and moles
for a dilute aqueous solution at 25°C.

THEORETICAL FOUNDATION
=====================

1. Definition of pH and water autoionization:
   [H₃O⁺] = 10^(-pH)
   [OH⁻]  = 10^(-(pKw - pH)),  pKw = 14

2. Mixing a solute with water (volume-weighted, in linear concentration
   space of the dominant ion):

   Acidic solute (pH < 7):
   pH_mix = -log₁₀( (10^(-pH_s)·V_s + 10^(-pH_w)·V_w) / (V_s + V_w) )

   Basic or neutral solute (pH ≥ 7):
   pH_mix = 14 + log₁₀( (10^(pH_s-14)·V_s + 10^(pH_w-14)·V_w) / (V_s + V_w) )

   Concentrations span many orders of magnitude. Averaging in the dominant
   ion's space keeps the small contribution from underflowing.

3. Amounts:
   n = V · C                      [mol]
   N = C · N_A · V                [molecules]

   N_A is taken as 6.023e23 (the value used throughout the pH scale model).

4. Molarity of water in a dilute solution: [H₂O] ≈ 55 mol/L.

NUMERICAL NOTES
===============

The empty solution (V_s + V_w = 0) has no pH. compute_pH() returns the
NO_READING sentinel before any logarithm is taken, so log(0) and division
by zero cannot occur.

References:
- Stumm & Morgan "Aquatic Chemistry" (3rd ed.)
- Harris "Quantitative Chemical Analysis" (9th ed.)

License: MIT
"""

import numpy as np
from typing import Union

from .observable import NO_READING, NoReading

PHValue = Union[float, NoReading]


class ConcentrationMath:
    """
    Pure conversions between pH, concentration, molecules and moles.

    All methods are static; the class only groups the formulas and the
    constants they share.
    """

    # Physical constants
    AVOGADROS_NUMBER = 6.023e23  # [molecules/mol]
    PKW = 14.0  # -log10(Kw) at 25°C
    NEUTRAL_PH = 7.0
    H2O_CONCENTRATION = 55.0  # [mol/L] molarity of water in dilute solution

    # pH scale
    PH_MIN = 0.0
    PH_MAX = 14.0

    @staticmethod
    def pH_to_concentration_H3O(pH: PHValue) -> float:
        """
        Convert pH to hydronium concentration.

        Args:
            pH: pH value, or NO_READING

        Returns:
            [H₃O⁺] in mol/L, 0 if there is no reading

        Example:
            >>> ConcentrationMath.pH_to_concentration_H3O(3.0)
            0.001
        """
        if pH is NO_READING:
            return 0.0
        return float(np.power(10.0, -pH))

    @staticmethod
    def pH_to_concentration_OH(pH: PHValue) -> float:
        """
        Convert pH to hydroxide concentration.

        Args:
            pH: pH value, or NO_READING

        Returns:
            [OH⁻] in mol/L, 0 if there is no reading
        """
        if pH is NO_READING:
            return 0.0
        return float(np.power(10.0, -(ConcentrationMath.PKW - pH)))

    @staticmethod
    def concentration_H3O_to_pH(concentration: float) -> float:
        """
        Convert hydronium concentration to pH.

        Args:
            concentration: [H₃O⁺] in mol/L, must be positive

        Returns:
            pH value

        Raises:
            ValueError: If concentration is not positive
        """
        if not concentration > 0:
            raise ValueError(f"H3O+ concentration must be positive, got {concentration}")
        return float(-np.log10(concentration))

    @staticmethod
    def concentration_OH_to_pH(concentration: float) -> float:
        """
        Convert hydroxide concentration to pH.

        pH = pKw - pOH = 14 + log₁₀[OH⁻]

        Raises:
            ValueError: If concentration is not positive
        """
        if not concentration > 0:
            raise ValueError(f"OH- concentration must be positive, got {concentration}")
        return float(ConcentrationMath.PKW - (-np.log10(concentration)))

    @staticmethod
    def concentration_H2O(volume: float) -> float:
        """[H₂O] in mol/L: 55 if any liquid is present, else 0."""
        return 0.0 if volume == 0 else ConcentrationMath.H2O_CONCENTRATION

    @staticmethod
    def compute_molecules(concentration: float, volume: float) -> float:
        """
        Number of molecules of a species.

        Args:
            concentration: [mol/L]
            volume: [L]

        Returns:
            Molecule count
        """
        return concentration * ConcentrationMath.AVOGADROS_NUMBER * volume

    @staticmethod
    def compute_moles(volume: float, concentration: float) -> float:
        """
        Amount of a species.

        Args:
            volume: [L]
            concentration: [mol/L]

        Returns:
            Moles
        """
        return volume * concentration

    @staticmethod
    def moles_H3O_to_pH(moles: float, volume: float) -> float:
        """
        pH that puts the given moles of H₃O⁺ in the given volume.

        Raises:
            ValueError: If moles or volume is not positive
        """
        if not volume > 0:
            raise ValueError(f"Cannot back-solve pH for an empty solution (volume={volume})")
        if not moles > 0:
            raise ValueError(f"H3O+ moles must be positive, got {moles}")
        return ConcentrationMath.concentration_H3O_to_pH(moles / volume)

    @staticmethod
    def moles_OH_to_pH(moles: float, volume: float) -> float:
        """
        pH that puts the given moles of OH⁻ in the given volume.

        Raises:
            ValueError: If moles or volume is not positive
        """
        if not volume > 0:
            raise ValueError(f"Cannot back-solve pH for an empty solution (volume={volume})")
        if not moles > 0:
            raise ValueError(f"OH- moles must be positive, got {moles}")
        return ConcentrationMath.concentration_OH_to_pH(moles / volume)

    @staticmethod
    def compute_pH(
        solute_pH: float,
        solute_volume: float,
        water_pH: float,
        water_volume: float,
    ) -> PHValue:
        """
        pH of a solute diluted with water.

        The mixing is done in [H₃O⁺] space for acidic solutes and in [OH⁻]
        space otherwise (see module docstring).

        Args:
            solute_pH: pH of the stock solute
            solute_volume: Solute volume [L]
            water_pH: pH of the water
            water_volume: Water volume [L]

        Returns:
            Mixture pH, or NO_READING if the total volume is zero

        Example:
            >>> round(ConcentrationMath.compute_pH(2.0, 0.5, 7.0, 0.5), 3)
            2.301
        """
        total_volume = solute_volume + water_volume
        if total_volume == 0:
            return NO_READING

        if solute_pH < ConcentrationMath.NEUTRAL_PH:
            mixed = (
                np.power(10.0, -solute_pH) * solute_volume
                + np.power(10.0, -water_pH) * water_volume
            ) / total_volume
            return float(-np.log10(mixed))

        pKw = ConcentrationMath.PKW
        mixed = (
            np.power(10.0, solute_pH - pKw) * solute_volume
            + np.power(10.0, water_pH - pKw) * water_volume
        ) / total_volume
        return float(pKw + np.log10(mixed))

    @staticmethod
    def round_pH(pH: PHValue, decimal_places: int) -> PHValue:
        """
        Round pH the way the meter displays it.

        Uses the fixed-point string the meter shows, so the result matches
        the displayed digits exactly.
        """
        if pH is NO_READING:
            return NO_READING
        return float(f"{pH:.{decimal_places}f}")

    @staticmethod
    def is_valid_pH(pH: float) -> bool:
        """True if pH is a finite number on the 0-14 scale."""
        return bool(
            np.isfinite(pH)
            and ConcentrationMath.PH_MIN <= pH <= ConcentrationMath.PH_MAX
        )


def validate_chemistry() -> None:
    """
    Validation of chemistry formulas.

    Tests:
    1. Empty solution has no pH
    2. Undiluted solute keeps its own pH
    3. Equal-volume acid mixing matches the closed form
    4. Basic solutes mix in hydroxide space
    5. Concentration / pH round trip
    6. Molecule and mole counts
    """
    cm = ConcentrationMath

    # Test 1: empty
    assert cm.compute_pH(3.0, 0.0, 7.0, 0.0) is NO_READING, "Empty solution must have no pH"

    # Test 2: pure solute
    for pH in (1.0, 4.5, 7.0, 10.0, 13.0):
        assert abs(cm.compute_pH(pH, 0.3, 7.0, 0.0) - pH) < 1e-9, f"Undiluted pH {pH} changed"

    # Test 3: equal volumes of pH 2 and water
    expected = -np.log10((1e-2 * 0.5 + 1e-7 * 0.5) / 1.0)
    assert abs(cm.compute_pH(2.0, 0.5, 7.0, 0.5) - expected) < 1e-12, "Acid mixing mismatch"

    # Test 4: dilution moves a base toward neutral
    diluted = cm.compute_pH(12.0, 0.1, 7.0, 0.9)
    assert 7.0 < diluted < 12.0, "Diluted base should move toward 7"

    # Test 5: round trips
    for c in (1e-13, 1e-7, 1e-3, 0.5):
        assert abs(cm.pH_to_concentration_H3O(cm.concentration_H3O_to_pH(c)) - c) / c < 1e-9
        assert abs(cm.pH_to_concentration_OH(cm.concentration_OH_to_pH(c)) - c) / c < 1e-9

    # Test 6: amounts
    assert cm.compute_moles(2.0, 0.5) == 1.0, "Moles = V·C"
    assert abs(cm.compute_molecules(1.0, 1.0) - cm.AVOGADROS_NUMBER) < 1.0, "One mole"
    assert cm.pH_to_concentration_H3O(NO_READING) == 0.0, "No reading yields zero"

    print("✓ All chemistry validations passed")


if __name__ == "__main__":
    """
    Demonstration of dilution behaviour.
    """
    print("Dilution of a pH 2 solute with water")
    print("=" * 60)
    print(f"{'water (L)':<12} {'pH':<10} {'[H3O+] (mol/L)':<20}")
    print("-" * 60)

    for water_volume in np.arange(0.0, 1.01, 0.1):
        pH = ConcentrationMath.compute_pH(2.0, 0.1, 7.0, water_volume)
        c = ConcentrationMath.pH_to_concentration_H3O(pH)
        print(f"{water_volume:<12.1f} {pH:<10.3f} {c:<20.3e}")

    print()
    validate_chemistry()
