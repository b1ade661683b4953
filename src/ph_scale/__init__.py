"""
pH Scale
========

Reactive model of a solute diluted with water, read by a pH meter probe.

- core: observable graph, chemistry, solutes, solution
- meter: probe regions, probe, pH meter
- model: dropper, faucets and the composed PHScaleModel

License: MIT
"""

__version__ = "1.0.0"
