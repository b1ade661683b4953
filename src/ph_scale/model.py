"""
pH Scale Model
==============

Beaker, dropper, faucets and pH meter wired into one model.

DEVICES
=======

    dropper        adds solute at a fixed rate while dispensing
    water faucet   adds water at a user-set rate in [0, max]
    drain faucet   removes solution at a user-set rate in [0, max]

Enabled states are DerivedValues of the solution volume:

    dropper, water faucet   enabled while the beaker is not full
    drain faucet            enabled while the beaker is not empty

A device that becomes disabled stops (flow rate 0, dropper not dispensing).

TIME STEPPING
=============

step(dt) applies the dropper, then the water faucet, then the drain. Each
addition is clipped to the free volume, so the capacity invariant holds for
any dt.

DEFAULT GEOMETRY
================

Without explicit regions, the beaker is the unit square [0, 1] x [0, 1] and
the solution fills it from y = 0 up to volume / max_volume. Streams are
vertical strips that exist only while their device is running:

    y
    1.4 ┤  ║water       ║dropper
        │  ║            ║
    1.0 ┤┌─║────────────║──────────┐
        ││ ║            ║          │
        ││~~~~~~~~~~~~~~~~~~~~~~~~~│  solution
        │└──────────────────────║──┘
    0.0 ┤                       ║drain
   -0.6 ┤                       ║
        └───────────────────────────── x

License: MIT
"""

import logging
from typing import Dict, Optional, Union

from .config import ModelConfiguration
from .core.observable import DerivedValue, ObservableValue
from .core.solute import (
    WATER,
    AdjustableSolute,
    Solute,
    SolutePHTracker,
    create_custom_solute,
    get_solute,
)
from .core.solution import VOLUME_TOLERANCE, Solution
from .meter import (
    Bounds2,
    FluidRegion,
    MeterProbe,
    PHMeter,
    ProbeRegions,
    Vector2,
)

logger = logging.getLogger(__name__)

CUSTOM_SOLUTE_KEY = "custom"


class Faucet:
    """
    Faucet with an adjustable flow rate.

    Attributes:
        flow_rate: ObservableValue[float] in [0, max_flow_rate] [L/s]
        enabled: ObservableValue[bool]; the faucet closes when disabled
    """

    def __init__(
        self,
        name: str,
        max_flow_rate: float,
        enabled: Optional[ObservableValue] = None,
    ):
        if max_flow_rate <= 0:
            raise ValueError(f"{name}: max flow rate must be positive, got {max_flow_rate}")

        self.name = name
        self.max_flow_rate = max_flow_rate
        self.flow_rate = ObservableValue(
            0.0, name=f"{name}.flow_rate", validator=self._check_flow_rate
        )
        self.enabled = enabled if enabled is not None else ObservableValue(True)
        self.enabled.lazy_link(self._on_enabled_changed)

    def _check_flow_rate(self, rate: float) -> None:
        if not 0.0 <= rate <= self.max_flow_rate:
            raise ValueError(
                f"{self.name}: flow rate must be in [0, {self.max_flow_rate}], got {rate}"
            )

    def _on_enabled_changed(self, enabled: bool, was_enabled: bool) -> None:
        if not enabled:
            self.flow_rate.set(0.0)

    def open(self, rate: Optional[float] = None) -> None:
        """Open to rate, or fully when rate is None. Ignored while disabled."""
        if not self.enabled.get():
            logger.warning(f"{self.name} is disabled, ignoring open request")
            return
        self.flow_rate.set(self.max_flow_rate if rate is None else rate)

    def close(self) -> None:
        self.flow_rate.set(0.0)

    @property
    def is_open(self) -> bool:
        return self.flow_rate.get() > 0

    def volume_for(self, dt: float) -> float:
        """Volume delivered over dt [L]."""
        if not self.enabled.get():
            return 0.0
        return self.flow_rate.get() * dt

    def reset(self) -> None:
        self.flow_rate.reset()


class Dropper:
    """
    Dropper loaded with the selected solute.

    Owns the solute selector shared with the solution, so switching the
    dropper's solute switches (and empties) the beaker.
    """

    def __init__(
        self,
        solute: Union[Solute, AdjustableSolute],
        flow_rate: float,
        enabled: Optional[ObservableValue] = None,
    ):
        if flow_rate <= 0:
            raise ValueError(f"Dropper flow rate must be positive, got {flow_rate}")

        self.flow_rate = flow_rate  # [L/s]
        self.solute_property = ObservableValue(solute, name="dropper.solute")
        self.dispensing = ObservableValue(False, name="dropper.dispensing")
        self.enabled = ObservableValue(True)
        self.enabled.lazy_link(self._on_enabled_changed)
        if enabled is not None:
            self.bind_enabled(enabled)

        # pH of the loaded solute, for the meter's dropper-stream reading
        self._solute_pH = SolutePHTracker(self.solute_property, name="dropper.solute_pH")
        self.solute_pH = self._solute_pH.pH

    def bind_enabled(self, enabled: ObservableValue) -> None:
        """Follow a different enabled cell, e.g. one derived from the beaker."""
        self.enabled.unlink(self._on_enabled_changed)
        self.enabled = enabled
        enabled.lazy_link(self._on_enabled_changed)
        if not enabled.get():
            self.dispensing.set(False)

    def _on_enabled_changed(self, enabled: bool, was_enabled: bool) -> None:
        if not enabled:
            self.dispensing.set(False)

    def start(self) -> None:
        if not self.enabled.get():
            logger.warning("Dropper is disabled, ignoring start request")
            return
        self.dispensing.set(True)

    def stop(self) -> None:
        self.dispensing.set(False)

    def volume_for(self, dt: float) -> float:
        """Solute delivered over dt [L]."""
        if not (self.enabled.get() and self.dispensing.get()):
            return 0.0
        return self.flow_rate * dt

    def reset(self) -> None:
        self.solute_property.reset()
        self.dispensing.reset()


class PHScaleModel:
    """
    Complete pH scale model.

    Typical Use:
        model = PHScaleModel(ModelConfiguration(initial_solute="coffee"))
        model.water_faucet.open(0.1)
        for _ in range(10):
            model.step(0.1)
        model.solution.pH.get()
    """

    def __init__(
        self,
        config: Optional[ModelConfiguration] = None,
        regions: Optional[ProbeRegions] = None,
        include_ph_meter: bool = True,
    ):
        """
        Initialize model.

        Args:
            config: Model configuration (defaults if None)
            regions: Probe regions; the default beaker geometry if None
            include_ph_meter: Build the pH meter

        Raises:
            ValueError: If the configuration is invalid
            KeyError: If the initial solute is not in the catalog
        """
        self.config = config if config is not None else ModelConfiguration()
        self.config.validate()

        beaker = self.config.beaker
        flow = self.config.flow

        self.water = WATER
        self.custom_solute = create_custom_solute()
        self.elapsed_time = 0.0  # [s]

        initial_solute = self.resolve_solute(self.config.initial_solute)
        self.dropper = Dropper(initial_solute, flow.dropper_flow_rate)

        self.solution = Solution(
            self.dropper.solute_property,
            beaker.initial_solute_volume,
            self.water,
            beaker.initial_water_volume,
            beaker.max_volume,
            decimal_places=self.config.meter.decimal_places,
        )

        max_volume = beaker.max_volume
        self.fill_enabled = DerivedValue(
            [self.solution.volume],
            lambda v: v < max_volume - VOLUME_TOLERANCE,
            name="fill_enabled",
        )
        self.drain_enabled = DerivedValue(
            [self.solution.volume], lambda v: v > 0, name="drain_enabled"
        )

        self.dropper.bind_enabled(self.fill_enabled)
        self.water_faucet = Faucet(
            "water_faucet", flow.water_faucet_max_flow_rate, enabled=self.fill_enabled
        )
        self.drain_faucet = Faucet(
            "drain_faucet", flow.drain_faucet_max_flow_rate, enabled=self.drain_enabled
        )

        self.regions = regions if regions is not None else self._default_regions()

        meter_config = self.config.meter
        drag_bounds = (
            Bounds2(*meter_config.drag_bounds) if meter_config.drag_bounds is not None else None
        )
        self.probe = MeterProbe(Vector2(*meter_config.probe_start), self.regions, drag_bounds)

        self.ph_meter: Optional[PHMeter] = None
        if include_ph_meter:
            self.ph_meter = PHMeter(
                self.probe,
                self.solution,
                self.water,
                self.dropper.solute_pH,
                decimal_places=meter_config.decimal_places,
            )

        logger.info(
            f"pH scale model initialized: solute={initial_solute.key}, "
            f"V_s={beaker.initial_solute_volume}L, V_w={beaker.initial_water_volume}L, "
            f"capacity={max_volume}L"
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def resolve_solute(self, key: str) -> Union[Solute, AdjustableSolute]:
        """Catalog solute by key; "custom" is this model's adjustable solute."""
        if key == CUSTOM_SOLUTE_KEY:
            return self.custom_solute
        return get_solute(key)

    def _default_regions(self) -> ProbeRegions:
        max_volume = self.config.beaker.max_volume

        solution_bounds = DerivedValue(
            [self.solution.volume],
            lambda v: Bounds2(0.0, 0.0, 1.0, v / max_volume),
            name="solution.bounds",
            use_deep_equality=True,
        )
        return ProbeRegions(
            solution=FluidRegion(
                solution_bounds, active=self.drain_enabled, name="solution"
            ),
            dropper_stream=FluidRegion(
                ObservableValue(Bounds2(0.45, 0.0, 0.55, 1.4)),
                active=self.dropper.dispensing,
                name="dropper_stream",
            ),
            water_stream=FluidRegion(
                ObservableValue(Bounds2(0.05, 0.0, 0.2, 1.4)),
                active=DerivedValue([self.water_faucet.flow_rate], lambda r: r > 0),
                name="water_stream",
            ),
            drain_stream=FluidRegion(
                ObservableValue(Bounds2(0.85, -0.6, 0.95, 0.0)),
                active=DerivedValue([self.drain_faucet.flow_rate], lambda r: r > 0),
                name="drain_stream",
            ),
        )

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def select_solute(self, solute: Union[str, Solute, AdjustableSolute]) -> None:
        """Load a different solute into the dropper. Empties the beaker."""
        if isinstance(solute, str):
            solute = self.resolve_solute(solute)
        logger.debug(f"Selecting solute {solute.key}")
        self.dropper.solute_property.set(solute)

    # ------------------------------------------------------------------
    # Time evolution
    # ------------------------------------------------------------------

    def step(self, dt: float) -> None:
        """
        Advance the model by dt seconds.

        Args:
            dt: Time step [s]

        Raises:
            ValueError: If dt is negative
        """
        if dt < 0:
            raise ValueError(f"Time step cannot be negative: {dt}")

        solute_volume = self.dropper.volume_for(dt)
        if solute_volume > 0:
            self.solution.add_solute(solute_volume)

        water_volume = self.water_faucet.volume_for(dt)
        if water_volume > 0:
            self.solution.add_water(water_volume)

        drain_volume = self.drain_faucet.volume_for(dt)
        if drain_volume > 0:
            self.solution.drain(min(drain_volume, self.solution.volume.get()))

        self.elapsed_time += dt

    def reset(self) -> None:
        """Restore every device, the solution and the probe."""
        self.dropper.reset()
        self.custom_solute.reset()
        self.solution.reset()
        self.water_faucet.reset()
        self.drain_faucet.reset()
        self.probe.reset()
        self.elapsed_time = 0.0
        logger.info("pH scale model reset")

    # ------------------------------------------------------------------
    # Readout
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, object]:
        """Current state for printing or plotting."""
        solution = self.solution
        state = {
            "time": self.elapsed_time,
            "solute": solution.solute_property.get().key,
            "solute_volume": solution.solute_volume.get(),
            "water_volume": solution.water_volume.get(),
            "volume": solution.volume.get(),
            "pH": solution.pH.get(),
            "color": solution.color.get().to_css(),
        }
        if self.ph_meter is not None:
            state["meter"] = self.ph_meter.display_text
            state["probe_location"] = self.ph_meter.location.get().value
        return state

    def __repr__(self) -> str:
        return f"PHScaleModel({self.solution!r}, t={self.elapsed_time:.2f}s)"
