"""
Meter Probe
===========

The draggable tip of the pH meter.

The probe owns its position cell and answers which region it is in.
Region precedence (first match wins):

    1. solution body or drain-faucet stream
    2. water-faucet stream
    3. dropper stream
    4. nowhere

The solution wins over the dropper stream where they overlap because the
stream ends in the solution.

License: MIT
"""

import logging
from enum import Enum
from typing import Optional, Union

from ..core.observable import ObservableValue
from .regions import Bounds2, ProbeRegions, Vector2

logger = logging.getLogger(__name__)


class ProbeLocation(Enum):
    """Which region the probe reading comes from."""

    SOLUTION = "solution"
    DRAIN_STREAM = "drain_stream"
    WATER_STREAM = "water_stream"
    DROPPER_STREAM = "dropper_stream"
    NONE = "none"


class MeterProbe:
    """
    Probe position plus region queries.

    Attributes:
        position: ObservableValue[Vector2], written only through move_to()
            or by the owner of the probe
        regions: Regions the probe is tested against
        drag_bounds: Optional rectangle the probe is kept in
    """

    def __init__(
        self,
        position: Vector2,
        regions: ProbeRegions,
        drag_bounds: Optional[Bounds2] = None,
    ):
        if drag_bounds is not None and not drag_bounds.contains_point(position):
            raise ValueError(f"Probe start {position} outside drag bounds {drag_bounds}")

        self.regions = regions
        self.drag_bounds = drag_bounds
        self.position = ObservableValue(position, name="probe.position", use_deep_equality=True)

    def move_to(self, x: Union[float, Vector2], y: Optional[float] = None) -> Vector2:
        """
        Move the probe tip, clamped to the drag bounds.

        Args:
            x: x coordinate, or a Vector2
            y: y coordinate when x is a number

        Returns:
            Position actually taken
        """
        point = x if isinstance(x, Vector2) else Vector2(float(x), float(y))
        if self.drag_bounds is not None:
            point = self.drag_bounds.closest_point_to(point)
        self.position.set(point)
        return point

    def reset(self) -> None:
        self.position.reset()

    def is_in_solution(self) -> bool:
        return self.regions.solution.contains_point(self.position.get())

    def is_in_dropper_stream(self) -> bool:
        return self.regions.dropper_stream.contains_point(self.position.get())

    def is_in_water_stream(self) -> bool:
        return self.regions.water_stream.contains_point(self.position.get())

    def is_in_drain_stream(self) -> bool:
        return self.regions.drain_stream.contains_point(self.position.get())

    def locate(self) -> ProbeLocation:
        """Region that determines the reading, by precedence."""
        if self.is_in_solution():
            return ProbeLocation.SOLUTION
        if self.is_in_drain_stream():
            return ProbeLocation.DRAIN_STREAM
        if self.is_in_water_stream():
            return ProbeLocation.WATER_STREAM
        if self.is_in_dropper_stream():
            return ProbeLocation.DROPPER_STREAM
        return ProbeLocation.NONE

    def __repr__(self) -> str:
        return f"MeterProbe(position={self.position.get()})"
