"""
pH Scale Core Package
=====================

Reactive chemistry of a solute diluted with water.

This package provides:
- Observable: ObservableValue / DerivedValue change propagation, NO_READING
- Chemistry: pH mixing, concentration, molecule and mole conversions
- Solute: immutable solutes, water, color ramps, the solute catalog
- Solution: beaker contents with derived volume, pH and color

USAGE EXAMPLE
============

```python
from ph_scale.core import ObservableValue, Solution, WATER, get_solute

solute = ObservableValue(get_solute("soda"))
solution = Solution(solute, 0.5, WATER, 0.5, max_volume=1.2)

solution.pH.link(lambda pH, old: print(f"pH -> {pH}"))
solution.add_water(0.2)

solute.set(get_solute("drain_cleaner"))   # beaker is emptied
solution.pH.get()                          # NO_READING
```

PROPAGATION
===========

Every mutation settles synchronously: when set() returns, every derived
value downstream already holds its new value. Subscribers run in
subscription order, depth-first. There are no threads, timers or batching.

EDGE CASES
==========

1. **Empty beaker:** pH is NO_READING, concentrations are 0, color is water.
2. **Solute only:** pH equals the solute pH exactly.
3. **Capacity:** writes that overfill the beaker raise VolumeCapacityError.
4. **Fixed solutes:** back-solving setters raise ValueError.

Run validation: `python -m ph_scale.core` or call `run_all_validations()`

License: MIT
"""

# Version
__version__ = "1.0.0"

# Change propagation
from .observable import (
    NO_READING,
    DerivedValue,
    NoReading,
    ObservableValue,
    ReentrantUpdateError,
    has_reading,
    validate_observable,
)

# Formulas
from .chemistry import ConcentrationMath, PHValue, validate_chemistry

# Chemical descriptors
from .solute import (
    SOLUTES,
    WATER,
    AdjustableSolute,
    Color,
    PHScaleColors,
    Solute,
    SolutePHTracker,
    Water,
    create_custom_solute,
    get_solute,
    list_solutes,
    validate_solutes,
)

# Beaker contents
from .solution import (
    GraphUnits,
    Solution,
    SolutionLike,
    VolumeCapacityError,
    validate_solution,
)

# Convenience imports
__all__ = [
    # Observable
    "ObservableValue",
    "DerivedValue",
    "NoReading",
    "NO_READING",
    "has_reading",
    "ReentrantUpdateError",
    # Chemistry
    "ConcentrationMath",
    "PHValue",
    # Solutes
    "Color",
    "PHScaleColors",
    "Water",
    "WATER",
    "Solute",
    "AdjustableSolute",
    "SolutePHTracker",
    "SOLUTES",
    "get_solute",
    "list_solutes",
    "create_custom_solute",
    # Solution
    "SolutionLike",
    "Solution",
    "GraphUnits",
    "VolumeCapacityError",
    # Validation functions
    "validate_observable",
    "validate_chemistry",
    "validate_solutes",
    "validate_solution",
]


def run_all_validations():
    """
    Run all core validation tests.

    This should be run after any code changes to ensure the propagation
    rules and the chemistry are still correct.
    """
    print("Running pH Scale Core Validation Suite")
    print("=" * 70)

    print("\n1. Observable graph...")
    validate_observable()

    print("\n2. Chemistry...")
    validate_chemistry()

    print("\n3. Solutes...")
    validate_solutes()

    print("\n4. Solution...")
    validate_solution()

    print("\n" + "=" * 70)
    print("ALL VALIDATIONS PASSED ✓")
    print("=" * 70)


if __name__ == "__main__":
    """Run all validations when package is executed."""
    run_all_validations()
