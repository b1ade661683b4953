"""
Meter Package
=============

pH meter and the probe geometry it reads from.

- regions: Vector2, Bounds2, FluidRegion, ProbeRegions
- probe: MeterProbe, ProbeLocation
- ph_meter: PHMeter

License: MIT
"""

from .regions import Bounds2, FluidRegion, ProbeRegions, Region, Vector2
from .probe import MeterProbe, ProbeLocation
from .ph_meter import PHMeter

__all__ = [
    "Vector2",
    "Bounds2",
    "Region",
    "FluidRegion",
    "ProbeRegions",
    "MeterProbe",
    "ProbeLocation",
    "PHMeter",
]
