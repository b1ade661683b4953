"""Tests for the composed pH scale model."""

import pytest

from ph_scale.config import (
    BeakerConfiguration,
    FlowConfiguration,
    MeterConfiguration,
    ModelConfiguration,
)
from ph_scale.core import NO_READING, ObservableValue, get_solute
from ph_scale.meter import ProbeLocation
from ph_scale.model import Dropper, Faucet, PHScaleModel

ABOVE_BEAKER_IN_DROPPER_STREAM = (0.5, 1.2)
ABOVE_BEAKER_IN_WATER_STREAM = (0.1, 1.2)
BELOW_BEAKER_IN_DRAIN_STREAM = (0.9, -0.3)


class TestConfiguration:

    def test_defaults_are_valid(self):
        config = ModelConfiguration()
        config.validate()
        assert config.beaker.max_volume == 1.2
        assert config.initial_solute == "chicken_soup"

    def test_initial_volume_over_capacity(self):
        with pytest.raises(ValueError):
            BeakerConfiguration(max_volume=1.0, initial_solute_volume=0.8,
                                initial_water_volume=0.3).validate()

    def test_negative_volume(self):
        with pytest.raises(ValueError):
            BeakerConfiguration(initial_water_volume=-0.1).validate()

    def test_non_positive_flow(self):
        with pytest.raises(ValueError):
            FlowConfiguration(dropper_flow_rate=0.0).validate()

    def test_probe_outside_drag_bounds(self):
        with pytest.raises(ValueError):
            MeterConfiguration(probe_start=(2.0, 2.0), drag_bounds=(0, 0, 1, 1)).validate()

    def test_negative_decimal_places(self):
        with pytest.raises(ValueError):
            MeterConfiguration(decimal_places=-1).validate()


class TestFaucet:

    def test_flow_rate_range(self):
        faucet = Faucet("tap", 0.25)
        faucet.open(0.1)
        assert faucet.is_open
        with pytest.raises(ValueError):
            faucet.open(0.3)
        with pytest.raises(ValueError):
            faucet.flow_rate.set(-0.1)

    def test_open_fully(self):
        faucet = Faucet("tap", 0.25)
        faucet.open()
        assert faucet.flow_rate.get() == 0.25

    def test_closes_when_disabled(self):
        enabled = ObservableValue(True)
        faucet = Faucet("tap", 0.25, enabled=enabled)
        faucet.open(0.2)
        enabled.set(False)
        assert faucet.flow_rate.get() == 0.0
        assert faucet.volume_for(1.0) == 0.0

    def test_open_ignored_while_disabled(self):
        faucet = Faucet("tap", 0.25, enabled=ObservableValue(False))
        faucet.open(0.2)
        assert not faucet.is_open

    def test_volume_for(self):
        faucet = Faucet("tap", 0.25)
        faucet.open(0.2)
        assert faucet.volume_for(0.5) == pytest.approx(0.1)


class TestDropper:

    def test_dispensing(self):
        dropper = Dropper(get_solute("soda"), 0.05)
        assert dropper.volume_for(1.0) == 0.0
        dropper.start()
        assert dropper.volume_for(2.0) == pytest.approx(0.1)
        dropper.stop()
        assert not dropper.dispensing.get()

    def test_stops_when_disabled(self):
        enabled = ObservableValue(True)
        dropper = Dropper(get_solute("soda"), 0.05, enabled=enabled)
        dropper.start()
        enabled.set(False)
        assert not dropper.dispensing.get()

    def test_solute_pH_mirror(self):
        dropper = Dropper(get_solute("soda"), 0.05)
        assert dropper.solute_pH.get() == 2.5
        dropper.solute_property.set(get_solute("milk"))
        assert dropper.solute_pH.get() == 6.5


class TestModel:

    def test_initial_state(self, model):
        assert model.solution.solute_property.get() is get_solute("chicken_soup")
        assert model.solution.solute_volume.get() == 0.5
        assert model.solution.pH.get() == pytest.approx(5.8)
        assert model.ph_meter.location.get() is ProbeLocation.SOLUTION
        assert model.ph_meter.display_text == "5.80"

    def test_without_meter(self):
        model = PHScaleModel(include_ph_meter=False)
        assert model.ph_meter is None
        assert "meter" not in model.snapshot()

    def test_unknown_solute(self):
        with pytest.raises(KeyError):
            PHScaleModel(ModelConfiguration(initial_solute="lemonade"))

    def test_invalid_configuration(self):
        config = ModelConfiguration(beaker=BeakerConfiguration(max_volume=0.0))
        with pytest.raises(ValueError):
            PHScaleModel(config)

    def test_custom_solute(self):
        model = PHScaleModel(ModelConfiguration(initial_solute="custom"))
        model.custom_solute.set_pH(3.0)
        assert model.solution.pH.get() == pytest.approx(3.0)
        model.solution.set_concentration_OH(1e-3)
        assert model.custom_solute.pH == pytest.approx(11.0)


class TestStep:

    def test_water_faucet(self, model):
        model.water_faucet.open(0.1)
        model.step(1.0)
        assert model.solution.water_volume.get() == pytest.approx(0.1)
        assert model.elapsed_time == 1.0

    def test_dropper(self, model):
        model.dropper.start()
        model.step(1.0)
        assert model.solution.solute_volume.get() == pytest.approx(0.55)

    def test_drain(self, model):
        model.water_faucet.open(0.1)
        model.step(1.0)
        model.water_faucet.close()
        model.drain_faucet.open(0.2)
        model.step(1.0)
        assert model.solution.volume.get() == pytest.approx(0.4)
        assert model.solution.solute_volume.get() == pytest.approx(0.4 * 0.5 / 0.6)

    def test_fill_until_full_disables_filling(self, model):
        model.water_faucet.open()
        model.dropper.start()
        for _ in range(10):
            model.step(1.0)
        assert model.solution.is_full()
        assert model.solution.volume.get() == pytest.approx(1.2)
        assert not model.fill_enabled.get()
        assert not model.water_faucet.is_open
        assert not model.dropper.dispensing.get()

    def test_drain_until_empty_disables_drain(self, model):
        model.drain_faucet.open()
        for _ in range(5):
            model.step(1.0)
        assert model.solution.is_empty()
        assert model.solution.pH.get() is NO_READING
        assert not model.drain_faucet.is_open
        assert model.ph_meter.value.get() is NO_READING

    def test_step_order_dropper_before_drain(self, model):
        """Solute added in a step can be drained in the same step."""
        model.dropper.start()
        model.drain_faucet.open(0.05)
        model.step(1.0)
        assert model.solution.volume.get() == pytest.approx(0.5)

    def test_negative_dt(self, model):
        with pytest.raises(ValueError):
            model.step(-0.1)

    def test_zero_dt_is_noop(self, model):
        model.water_faucet.open()
        model.step(0.0)
        assert model.solution.water_volume.get() == 0.0


class TestMeterInModel:

    def test_dropper_stream(self, model):
        model.probe.move_to(*ABOVE_BEAKER_IN_DROPPER_STREAM)
        assert model.ph_meter.value.get() is NO_READING
        model.dropper.start()
        assert model.ph_meter.value.get() == pytest.approx(5.8)
        model.dropper.stop()
        assert model.ph_meter.value.get() is NO_READING

    def test_water_stream(self, model):
        model.probe.move_to(*ABOVE_BEAKER_IN_WATER_STREAM)
        model.water_faucet.open(0.1)
        assert model.ph_meter.value.get() == 7.0
        assert model.ph_meter.location.get() is ProbeLocation.WATER_STREAM

    def test_drain_stream(self, model):
        model.probe.move_to(*BELOW_BEAKER_IN_DRAIN_STREAM)
        model.drain_faucet.open(0.1)
        assert model.ph_meter.value.get() == pytest.approx(5.8)

    def test_level_drop_leaves_probe_dry(self, model):
        model.probe.move_to(0.3, 0.4)
        assert model.ph_meter.location.get() is ProbeLocation.SOLUTION
        model.drain_faucet.open(0.25)
        model.step(1.0)
        assert model.ph_meter.value.get() is NO_READING

    def test_water_lowers_acidity(self, model):
        before = model.ph_meter.value.get()
        model.water_faucet.open()
        model.step(2.0)
        assert model.ph_meter.value.get() > before
        assert model.ph_meter.value.get() == pytest.approx(model.solution.pH.get())


class TestSoluteSelectionAndReset:

    def test_select_solute_empties_beaker(self, model):
        model.select_solute("drain_cleaner")
        assert model.solution.volume.get() == 0.0
        assert model.dropper.solute_pH.get() == 13.0
        assert not model.drain_enabled.get()

    def test_select_solute_object(self, model):
        model.select_solute(get_solute("milk"))
        assert model.solution.solute_property.get() is get_solute("milk")

    def test_reset(self, model):
        model.select_solute("custom")
        model.custom_solute.set_pH(2.0)
        model.water_faucet.open(0.2)
        model.step(1.0)
        model.probe.move_to(5.0, 5.0)

        model.reset()

        assert model.solution.solute_property.get() is get_solute("chicken_soup")
        assert model.custom_solute.pH == 7.0
        assert model.solution.solute_volume.get() == 0.5
        assert model.solution.water_volume.get() == 0.0
        assert not model.water_faucet.is_open
        assert model.elapsed_time == 0.0
        assert model.ph_meter.value.get() == pytest.approx(5.8)

    def test_snapshot(self, model):
        state = model.snapshot()
        assert state["solute"] == "chicken_soup"
        assert state["pH"] == pytest.approx(5.8)
        assert state["meter"] == "5.80"
        assert state["probe_location"] == "solution"
