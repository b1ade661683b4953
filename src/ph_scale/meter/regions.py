"""
Probe Regions
=============

Geometry the pH meter probe can be dipped into.

The meter does not know how regions are drawn. It only asks each region
whether it contains the probe tip:

    region.contains_point(p) -> bool

A FluidRegion is an axis-aligned box whose bounds live in an
ObservableValue, so a region can grow with the solution level or follow a
faucet. An optional `active` cell switches the region off entirely (a
faucet stream exists only while the faucet is open).

Coordinates are model units with y pointing up; the beaker floor is y = 0.

License: MIT
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from ..core.observable import ObservableValue


@dataclass(frozen=True)
class Vector2:
    """2D point in model coordinates."""

    x: float
    y: float

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def distance(self, other: "Vector2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Bounds2:
    """
    Axis-aligned rectangle, edges inclusive.

    Attributes:
        min_x, min_y: Lower-left corner
        max_x, max_y: Upper-right corner
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ValueError(f"Malformed bounds: {self}")

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Vector2:
        return Vector2((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains_point(self, point: Vector2) -> bool:
        return (
            self.min_x <= point.x <= self.max_x
            and self.min_y <= point.y <= self.max_y
        )

    def closest_point_to(self, point: Vector2) -> Vector2:
        """Clamp point into this rectangle."""
        return Vector2(
            min(max(point.x, self.min_x), self.max_x),
            min(max(point.y, self.min_y), self.max_y),
        )

    def with_max_y(self, max_y: float) -> "Bounds2":
        return Bounds2(self.min_x, self.min_y, self.max_x, max_y)


class Region(ABC):
    """Anything the probe can be inside of."""

    @abstractmethod
    def contains_point(self, point: Vector2) -> bool:
        pass


class FluidRegion(Region):
    """
    Box-shaped body of liquid: the solution, or one of the streams.

    Args:
        bounds: Current bounds; may be a DerivedValue following the model
        active: Optional switch; an inactive region contains nothing
        name: Label for logs
    """

    def __init__(
        self,
        bounds: ObservableValue,
        active: Optional[ObservableValue] = None,
        name: str = "region",
    ):
        self.bounds = bounds
        self.active = active
        self.name = name

    def contains_point(self, point: Vector2) -> bool:
        if self.active is not None and not self.active.get():
            return False
        return self.bounds.get().contains_point(point)

    def __repr__(self) -> str:
        return f"FluidRegion({self.name}, bounds={self.bounds.get()})"


@dataclass
class ProbeRegions:
    """The four regions the meter distinguishes."""

    solution: Region
    dropper_stream: Region
    water_stream: Region
    drain_stream: Region

    def __iter__(self) -> Iterator[Region]:
        return iter(
            (self.solution, self.dropper_stream, self.water_stream, self.drain_stream)
        )

    def observable_cells(self) -> Iterator[ObservableValue]:
        """Cells whose changes move or toggle any region."""
        for region in self:
            for attribute in ("bounds", "active"):
                cell = getattr(region, attribute, None)
                if isinstance(cell, ObservableValue):
                    yield cell
