"""
Solutes, Water and Colors
=========================

Immutable chemical descriptors for the pH scale solution.

A Solute is a stock solution with a known pH and a color ramp used to tint
the solution as it is diluted with water:

    ratio = V_solute / V_total

    no midpoint:    diluted ───────────────────── full
                    0                               1

    with midpoint:  diluted ───── midpoint ───── full
                    0             0.5             1

The ramp is piecewise linear in RGBA space. Channels are rounded to integer
0-255 values, alpha stays a float in [0, 1].

An AdjustableSolute is the one kind of solute whose pH may change after
creation (the user-defined solution). Its pH lives in an ObservableValue so
the solution's pH graph follows it.

License: MIT
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from scipy.interpolate import interp1d

from .chemistry import ConcentrationMath
from .observable import ObservableValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Color:
    """
    RGBA color value object.

    Attributes:
        r, g, b: Channels [0, 255]
        a: Alpha [0, 1]
    """

    r: int
    g: int
    b: int
    a: float = 1.0

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"Color channel out of range [0, 255]: {self}")
        if not 0.0 <= self.a <= 1.0:
            raise ValueError(f"Alpha out of range [0, 1]: {self.a}")

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b, self.a], dtype=float)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "Color":
        """Build a color from float channels, rounding RGB half away from zero."""
        rgb = np.floor(np.clip(rgba[:3], 0.0, 255.0) + 0.5).astype(int)
        alpha = float(np.clip(rgba[3], 0.0, 1.0))
        return cls(int(rgb[0]), int(rgb[1]), int(rgb[2]), alpha)

    def to_css(self) -> str:
        return f"rgba({self.r},{self.g},{self.b},{self.a:g})"

    @staticmethod
    def interpolate_rgba(color1: "Color", color2: "Color", distance: float) -> "Color":
        """
        Linear interpolation between two colors.

        Args:
            color1: Color at distance 0
            color2: Color at distance 1
            distance: Position along the segment [0, 1]
        """
        if not 0.0 <= distance <= 1.0:
            raise ValueError(f"distance must be in [0, 1], got {distance}")
        c1 = color1.as_array()
        c2 = color2.as_array()
        return Color.from_array(c1 + distance * (c2 - c1))


class PHScaleColors:
    """Palette shared by the model and the meter."""

    WATER = Color(224, 255, 255)

    # pH range
    ACIDIC = Color(249, 106, 102)
    BASIC = Color(106, 126, 195)
    NEUTRAL = Color(164, 58, 149)

    # particles in ratio views
    H3O_PARTICLES = Color(204, 0, 0)
    OH_PARTICLES = Color(0, 0, 255)
    H2O_BACKGROUND = Color(20, 184, 238)


@dataclass(frozen=True)
class Water:
    """Solvent. Constant pH and color."""

    pH: float = ConcentrationMath.NEUTRAL_PH
    color: Color = PHScaleColors.WATER


WATER = Water()


@dataclass(frozen=True)
class Solute:
    """
    Stock solution descriptor.

    Attributes:
        key: Catalog key (e.g. "coffee")
        name: Display name
        pH: pH of the undiluted solute
        color: Color at full strength
        diluted_color: Color at infinite dilution
        midpoint_color: Optional color at ratio 0.5 for non-linear ramps
    """

    key: str
    name: str
    pH: float
    color: Color
    diluted_color: Color = PHScaleColors.WATER
    midpoint_color: Optional[Color] = None

    def __post_init__(self):
        if not ConcentrationMath.is_valid_pH(self.pH):
            raise ValueError(f"Solute '{self.key}' pH out of range [0, 14]: {self.pH}")

    @property
    def is_adjustable(self) -> bool:
        return False

    @property
    def pH_property(self) -> Optional[ObservableValue]:
        """Cell holding the pH, for solutes whose pH can change."""
        return None

    def color_at(self, ratio: float) -> Color:
        """
        Color of this solute diluted to the given solute fraction.

        Args:
            ratio: V_solute / V_total in [0, 1]
        """
        return color_ramp(self.diluted_color, self.color, self.midpoint_color, ratio)


def color_ramp(
    diluted_color: Color,
    full_color: Color,
    midpoint_color: Optional[Color],
    ratio: float,
) -> Color:
    """
    Evaluate a solute color ramp.

    Args:
        diluted_color: Color at ratio 0
        full_color: Color at ratio 1
        midpoint_color: Optional color at ratio 0.5
        ratio: Solute fraction [0, 1]

    Returns:
        Interpolated color
    """
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"Solute ratio must be in [0, 1], got {ratio}")

    if midpoint_color is None:
        knots = [0.0, 1.0]
        stops = [diluted_color, full_color]
    else:
        knots = [0.0, 0.5, 1.0]
        stops = [diluted_color, midpoint_color, full_color]

    ramp = interp1d(knots, np.array([c.as_array() for c in stops]), axis=0)
    return Color.from_array(ramp(ratio))


class AdjustableSolute:
    """
    Solute whose pH can be set after creation.

    Shares the Solute interface (key, name, pH, colors, color_at) but stores
    the pH in an ObservableValue owned by this object.
    """

    def __init__(
        self,
        key: str,
        name: str,
        pH: float,
        color: Color,
        diluted_color: Color = PHScaleColors.WATER,
        midpoint_color: Optional[Color] = None,
    ):
        self.key = key
        self.name = name
        self.color = color
        self.diluted_color = diluted_color
        self.midpoint_color = midpoint_color
        self._pH_property = ObservableValue(
            pH, name=f"{key}.pH", validator=_validate_solute_pH
        )

    @property
    def is_adjustable(self) -> bool:
        return True

    @property
    def pH_property(self) -> ObservableValue:
        return self._pH_property

    @property
    def pH(self) -> float:
        return self._pH_property.get()

    def set_pH(self, pH: float) -> None:
        """
        Change the solute pH.

        Raises:
            ValueError: If pH is outside [0, 14]
        """
        self._pH_property.set(pH)

    def reset(self) -> None:
        self._pH_property.reset()

    def color_at(self, ratio: float) -> Color:
        return color_ramp(self.diluted_color, self.color, self.midpoint_color, ratio)

    def __repr__(self) -> str:
        return f"AdjustableSolute(key='{self.key}', pH={self.pH:.3f})"


def _validate_solute_pH(pH: float) -> None:
    if not ConcentrationMath.is_valid_pH(pH):
        raise ValueError(f"Solute pH out of range [0, 14]: {pH}")


class SolutePHTracker:
    """
    Mirrors the pH of whichever solute is currently selected.

    Follows the selector, and for adjustable solutes also follows the
    solute's own pH cell, relinking whenever the selection changes. The
    mirror cell is written only by this tracker.
    """

    def __init__(self, solute_property: ObservableValue, name: str = "solute_pH"):
        self._solute_property = solute_property
        self._tracked: Optional[ObservableValue] = None
        self.pH = ObservableValue(solute_property.get().pH, name=name)
        solute_property.link(self._on_solute_changed)

    def _on_solute_changed(self, solute, old_solute) -> None:
        if self._tracked is not None:
            self._tracked.unlink(self._on_pH_changed)
            self._tracked = None

        if solute.pH_property is not None:
            self._tracked = solute.pH_property
            self._tracked.lazy_link(self._on_pH_changed)

        self.pH.set(solute.pH)

    def _on_pH_changed(self, pH, old_pH) -> None:
        self.pH.set(pH)

    def dispose(self) -> None:
        self._solute_property.unlink(self._on_solute_changed)
        if self._tracked is not None:
            self._tracked.unlink(self._on_pH_changed)
            self._tracked = None
        self.pH.dispose()


# Stock solutions. Colors are for rendering only; pH values are the
# reference values of the household-chemistry scale.
BATTERY_ACID = Solute(
    key="battery_acid",
    name="Battery Acid",
    pH=1.0,
    color=Color(255, 255, 0),
)
VOMIT = Solute(key="vomit", name="Vomit", pH=2.0, color=Color(255, 171, 120))
SODA = Solute(key="soda", name="Soda Pop", pH=2.5, color=Color(204, 255, 102))
ORANGE_JUICE = Solute(
    key="orange_juice",
    name="Orange Juice",
    pH=3.5,
    color=Color(255, 180, 0),
)
COFFEE = Solute(key="coffee", name="Coffee", pH=5.0, color=Color(164, 99, 7))
CHICKEN_SOUP = Solute(
    key="chicken_soup",
    name="Chicken Soup",
    pH=5.8,
    color=Color(255, 240, 104),
)
MILK = Solute(key="milk", name="Milk", pH=6.5, color=Color(250, 250, 250))
SPIT = Solute(key="spit", name="Spit", pH=7.4, color=Color(202, 240, 239))
BLOOD = Solute(
    key="blood",
    name="Blood",
    pH=7.4,
    color=Color(211, 79, 68),
    midpoint_color=Color(255, 207, 204),
)
HAND_SOAP = Solute(key="hand_soap", name="Hand Soap", pH=10.0, color=Color(224, 141, 242))
DRAIN_CLEANER = Solute(
    key="drain_cleaner",
    name="Drain Cleaner",
    pH=13.0,
    color=Color(255, 255, 0),
)

SOLUTES: Dict[str, Solute] = {
    s.key: s
    for s in (
        BATTERY_ACID,
        VOMIT,
        SODA,
        ORANGE_JUICE,
        COFFEE,
        CHICKEN_SOUP,
        MILK,
        SPIT,
        BLOOD,
        HAND_SOAP,
        DRAIN_CLEANER,
    )
}


def get_solute(key: str) -> Solute:
    """
    Look up a stock solute.

    Raises:
        KeyError: If key is not in the catalog
    """
    try:
        return SOLUTES[key]
    except KeyError:
        raise KeyError(
            f"Unknown solute '{key}'. Available: {', '.join(sorted(SOLUTES))}"
        ) from None


def list_solutes() -> List[Solute]:
    """Catalog ordered from most acidic to most basic."""
    return sorted(SOLUTES.values(), key=lambda s: s.pH)


def create_custom_solute(pH: float = ConcentrationMath.NEUTRAL_PH) -> AdjustableSolute:
    """User-defined solution with an adjustable pH."""
    return AdjustableSolute(
        key="custom",
        name="My Solution",
        pH=pH,
        color=Color(255, 255, 255, 0.0),
    )


def validate_solutes() -> None:
    """
    Validation of solute descriptors.

    Tests:
    1. Catalog pH values are on the scale
    2. Ramps hit their end points
    3. Midpoint ramps pass through the midpoint
    4. Adjustable solutes reject out-of-range pH
    """
    for solute in SOLUTES.values():
        assert ConcentrationMath.is_valid_pH(solute.pH), f"{solute.key} pH invalid"
        assert solute.color_at(0.0) == solute.diluted_color, f"{solute.key} ramp start"
        assert solute.color_at(1.0) == solute.color, f"{solute.key} ramp end"

    assert BLOOD.color_at(0.5) == BLOOD.midpoint_color, "Midpoint ramp"

    custom = create_custom_solute(4.0)
    custom.set_pH(9.0)
    assert custom.pH == 9.0, "Adjustable pH should change"
    try:
        custom.set_pH(15.0)
    except ValueError:
        pass
    else:
        raise AssertionError("pH 15 should be rejected")

    print("✓ All solute validations passed")


if __name__ == "__main__":
    print(f"{'Solute':<16} {'pH':<6} {'color':<24} {'50% color':<24}")
    print("-" * 72)
    for s in list_solutes():
        print(f"{s.name:<16} {s.pH:<6.1f} {s.color.to_css():<24} {s.color_at(0.5).to_css():<24}")
    print()
    validate_solutes()
