"""
Model Configuration
===================

Configuration dataclasses for the pH scale model. Each dataclass validates
itself; the object that consumes it calls validate() before use.

License: MIT
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class BeakerConfiguration:
    """
    Beaker capacity and initial contents.

    Attributes:
        max_volume: Beaker capacity [L]
        initial_solute_volume: Solute volume at start and after reset [L]
        initial_water_volume: Water volume at start and after reset [L]
    """

    max_volume: float = 1.2  # [L]
    initial_solute_volume: float = 0.5  # [L]
    initial_water_volume: float = 0.0  # [L]

    def validate(self) -> None:
        """Validate capacity and initial volumes."""
        if self.max_volume <= 0:
            raise ValueError(f"Beaker capacity must be positive: {self.max_volume}")
        if self.initial_solute_volume < 0 or self.initial_water_volume < 0:
            raise ValueError(
                f"Initial volumes cannot be negative: solute={self.initial_solute_volume}, "
                f"water={self.initial_water_volume}"
            )
        total = self.initial_solute_volume + self.initial_water_volume
        if total > self.max_volume:
            raise ValueError(
                f"Initial volume {total}L exceeds beaker capacity {self.max_volume}L"
            )


@dataclass
class FlowConfiguration:
    """
    Flow rates of the devices that change the solution volume.

    Attributes:
        dropper_flow_rate: Solute delivered while the dropper dispenses [L/s]
        water_faucet_max_flow_rate: Upper limit of the water faucet [L/s]
        drain_faucet_max_flow_rate: Upper limit of the drain faucet [L/s]
    """

    dropper_flow_rate: float = 0.05  # [L/s]
    water_faucet_max_flow_rate: float = 0.25  # [L/s]
    drain_faucet_max_flow_rate: float = 0.25  # [L/s]

    def validate(self) -> None:
        """Validate flow rates."""
        for label, rate in (
            ("dropper_flow_rate", self.dropper_flow_rate),
            ("water_faucet_max_flow_rate", self.water_faucet_max_flow_rate),
            ("drain_faucet_max_flow_rate", self.drain_faucet_max_flow_rate),
        ):
            if rate <= 0:
                raise ValueError(f"{label} must be positive: {rate}")


@dataclass
class MeterConfiguration:
    """
    pH meter display and probe settings.

    Attributes:
        decimal_places: Digits shown by the meter
        probe_start: Initial probe tip position (x, y) in model coordinates
        drag_bounds: Optional (min_x, min_y, max_x, max_y) the probe is kept in
    """

    decimal_places: int = 2
    probe_start: Tuple[float, float] = (0.0, 0.0)
    drag_bounds: Optional[Tuple[float, float, float, float]] = None

    def validate(self) -> None:
        """Validate display precision and drag bounds."""
        if not isinstance(self.decimal_places, int) or self.decimal_places < 0:
            raise ValueError(
                f"decimal_places must be a non-negative int: {self.decimal_places}"
            )
        if self.drag_bounds is not None:
            min_x, min_y, max_x, max_y = self.drag_bounds
            if min_x > max_x or min_y > max_y:
                raise ValueError(f"Invalid drag bounds: {self.drag_bounds}")
            x, y = self.probe_start
            if not (min_x <= x <= max_x and min_y <= y <= max_y):
                raise ValueError(
                    f"Probe start {self.probe_start} outside drag bounds {self.drag_bounds}"
                )


@dataclass
class ModelConfiguration:
    """
    Complete configuration of the pH scale model.

    Combines beaker, flow and meter settings with the initial solute.
    """

    initial_solute: str = "chicken_soup"
    beaker: BeakerConfiguration = field(default_factory=BeakerConfiguration)
    flow: FlowConfiguration = field(default_factory=FlowConfiguration)
    meter: MeterConfiguration = field(default_factory=MeterConfiguration)

    def validate(self) -> None:
        """Validate all sections."""
        if not self.initial_solute:
            raise ValueError("initial_solute must be a catalog key")
        self.beaker.validate()
        self.flow.validate()
        self.meter.validate()
