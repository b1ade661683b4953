"""
pH Meter
========

Reads the pH at the probe tip.

READING RULES
=============

    probe location          reading
    ---------------------   ------------------------------
    solution / drain        solution pH
    water faucet stream     water pH
    dropper stream          pH of the solute in the dropper
    nowhere                 NO_READING

The reading is a DerivedValue over the probe position, the solution pH,
the dropper's solute pH, the solute selector and every region cell. It is
re-evaluated from scratch on each change, so it never lags the geometry or
the chemistry and never blends two regions.

DISPLAY
=======

    display_text      "-" for no reading, else fixed decimal places
    indicator_color   None for no reading, else acidic / neutral / basic
    scale_position    pH / 14 along the scale, 0.5 with no reading

License: MIT
"""

import logging
from typing import List, Optional

from ..core.chemistry import ConcentrationMath, PHValue
from ..core.observable import NO_READING, DerivedValue, ObservableValue
from ..core.solute import Color, PHScaleColors, Water
from ..core.solution import SolutionLike
from .probe import MeterProbe, ProbeLocation

logger = logging.getLogger(__name__)


class PHMeter:
    """
    pH meter bound to one probe and one solution.

    Attributes:
        value: DerivedValue[float | NO_READING] measured at the probe
        location: DerivedValue[ProbeLocation] of the region that won
    """

    def __init__(
        self,
        probe: MeterProbe,
        solution: SolutionLike,
        water: Water,
        dropper_solute_pH: ObservableValue,
        decimal_places: int = 2,
    ):
        """
        Initialize meter.

        Args:
            probe: Probe whose position and regions are read
            solution: Solution in the beaker
            water: Water delivered by the water faucet
            dropper_solute_pH: pH of the solute loaded in the dropper
            decimal_places: Digits shown on the display
        """
        if decimal_places < 0:
            raise ValueError(f"decimal_places cannot be negative: {decimal_places}")

        self.probe = probe
        self.solution = solution
        self.water = water
        self.dropper_solute_pH = dropper_solute_pH
        self.decimal_places = decimal_places

        sources: List[ObservableValue] = [
            probe.position,
            solution.pH,
            dropper_solute_pH,
            solution.solute_property,
        ]
        sources.extend(probe.regions.observable_cells())

        self.location = DerivedValue(
            sources, lambda *_: self.probe.locate(), name="meter.location"
        )
        self.value = DerivedValue(
            sources, lambda *_: self.measure(), name="meter.value"
        )
        self.location.lazy_link(self._log_location)

    def measure(self) -> PHValue:
        """pH at the current probe location, evaluated now."""
        location = self.probe.locate()
        if location in (ProbeLocation.SOLUTION, ProbeLocation.DRAIN_STREAM):
            return self.solution.pH.get()
        if location is ProbeLocation.WATER_STREAM:
            return self.water.pH
        if location is ProbeLocation.DROPPER_STREAM:
            return self.dropper_solute_pH.get()
        return NO_READING

    def _log_location(self, location, old_location) -> None:
        logger.debug(f"Probe moved: {old_location.value} -> {location.value}")

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @property
    def displayed_value(self) -> PHValue:
        """Reading rounded to the display precision."""
        return ConcentrationMath.round_pH(self.value.get(), self.decimal_places)

    @property
    def display_text(self) -> str:
        pH = self.value.get()
        if pH is NO_READING:
            return "-"
        return f"{pH:.{self.decimal_places}f}"

    @property
    def indicator_visible(self) -> bool:
        return self.value.get() is not NO_READING

    @property
    def indicator_color(self) -> Optional[Color]:
        pH = self.displayed_value
        if pH is NO_READING:
            return None
        if pH < ConcentrationMath.NEUTRAL_PH:
            return PHScaleColors.ACIDIC
        if pH > ConcentrationMath.NEUTRAL_PH:
            return PHScaleColors.BASIC
        return PHScaleColors.NEUTRAL

    @property
    def scale_position(self) -> float:
        """Pointer position along the 0-14 scale, as a fraction [0, 1]."""
        pH = self.value.get()
        if pH is NO_READING:
            return 0.5
        span = ConcentrationMath.PH_MAX - ConcentrationMath.PH_MIN
        return min(1.0, max(0.0, (pH - ConcentrationMath.PH_MIN) / span))

    def dispose(self) -> None:
        self.location.dispose()
        self.value.dispose()

    def __repr__(self) -> str:
        return f"PHMeter({self.display_text}, location={self.location.get().value})"
