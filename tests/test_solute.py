"""Tests for colors, solutes and the solute catalog."""

import dataclasses

import numpy as np
import pytest

from ph_scale.core.observable import ObservableValue
from ph_scale.core.solute import (
    BLOOD,
    COFFEE,
    DRAIN_CLEANER,
    SOLUTES,
    WATER,
    Color,
    PHScaleColors,
    Solute,
    SolutePHTracker,
    color_ramp,
    create_custom_solute,
    get_solute,
    list_solutes,
)


class TestColor:

    def test_channel_range_enforced(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -1, 0)
        with pytest.raises(ValueError):
            Color(0, 0, 0, 1.5)

    def test_from_array_rounds_rgb_half_up_and_keeps_alpha(self):
        color = Color.from_array(np.array([0.5, 1.5, 2.49, 0.3]))
        assert (color.r, color.g, color.b) == (1, 2, 2)
        assert color.a == pytest.approx(0.3)

    def test_interpolate_rgba(self):
        mid = Color.interpolate_rgba(Color(0, 0, 0, 0.0), Color(100, 200, 50, 1.0), 0.5)
        assert mid == Color(50, 100, 25, 0.5)

    def test_interpolate_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Color.interpolate_rgba(Color(0, 0, 0), Color(1, 1, 1), 1.5)

    def test_css(self):
        assert Color(1, 2, 3).to_css() == "rgba(1,2,3,1)"


class TestColorRamp:

    def test_two_point_ramp(self):
        assert COFFEE.color_at(0.0) == WATER.color
        assert COFFEE.color_at(1.0) == COFFEE.color
        assert COFFEE.color_at(0.5) == Color(194, 177, 131)

    def test_midpoint_ramp(self):
        assert BLOOD.color_at(0.5) == BLOOD.midpoint_color
        # halfway between water and the midpoint
        assert BLOOD.color_at(0.25) == Color(240, 231, 230)
        assert BLOOD.color_at(1.0) == BLOOD.color

    def test_alpha_interpolated_as_float(self):
        color = color_ramp(Color(0, 0, 0, 0.0), Color(0, 0, 0, 1.0), None, 0.3)
        assert color.a == pytest.approx(0.3)

    @pytest.mark.parametrize("ratio", [-0.01, 1.01])
    def test_ratio_out_of_range(self, ratio):
        with pytest.raises(ValueError):
            COFFEE.color_at(ratio)


class TestSolute:

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            COFFEE.pH = 3.0

    def test_pH_range_checked(self):
        with pytest.raises(ValueError):
            Solute(key="bad", name="Bad", pH=15.0, color=Color(0, 0, 0))

    def test_fixed_solute_has_no_pH_property(self):
        assert not COFFEE.is_adjustable
        assert COFFEE.pH_property is None

    def test_water(self):
        assert WATER.pH == 7.0
        assert WATER.color == PHScaleColors.WATER


class TestCatalog:

    def test_lookup(self):
        assert get_solute("drain_cleaner") is DRAIN_CLEANER
        assert get_solute("coffee").pH == 5.0

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            get_solute("lemonade")

    def test_ordered_by_pH(self):
        pHs = [s.pH for s in list_solutes()]
        assert pHs == sorted(pHs)
        assert len(pHs) == len(SOLUTES)

    def test_reference_values(self):
        expected = {
            "battery_acid": 1.0,
            "vomit": 2.0,
            "soda": 2.5,
            "orange_juice": 3.5,
            "coffee": 5.0,
            "chicken_soup": 5.8,
            "milk": 6.5,
            "spit": 7.4,
            "blood": 7.4,
            "hand_soap": 10.0,
            "drain_cleaner": 13.0,
        }
        assert {key: s.pH for key, s in SOLUTES.items()} == expected


class TestAdjustableSolute:

    def test_set_pH(self, custom_solute):
        custom_solute.set_pH(3.2)
        assert custom_solute.pH == 3.2
        assert custom_solute.pH_property.get() == 3.2

    def test_rejects_out_of_range(self, custom_solute):
        with pytest.raises(ValueError):
            custom_solute.set_pH(-1.0)
        assert custom_solute.pH == 7.0

    def test_reset(self, custom_solute):
        custom_solute.set_pH(10.0)
        custom_solute.reset()
        assert custom_solute.pH == 7.0

    def test_shares_color_ramp(self, custom_solute):
        assert custom_solute.is_adjustable
        assert custom_solute.color_at(0.0) == WATER.color

    def test_custom_defaults(self):
        custom = create_custom_solute()
        assert custom.key == "custom"
        assert custom.pH == 7.0


class TestSolutePHTracker:

    def test_follows_selection(self):
        selector = ObservableValue(COFFEE)
        tracker = SolutePHTracker(selector)
        assert tracker.pH.get() == 5.0
        selector.set(DRAIN_CLEANER)
        assert tracker.pH.get() == 13.0

    def test_follows_adjustable_pH(self, custom_solute):
        selector = ObservableValue(custom_solute)
        tracker = SolutePHTracker(selector)
        custom_solute.set_pH(4.0)
        assert tracker.pH.get() == 4.0

    def test_stops_following_deselected_solute(self, custom_solute):
        selector = ObservableValue(custom_solute)
        tracker = SolutePHTracker(selector)
        selector.set(COFFEE)
        custom_solute.set_pH(2.0)
        assert tracker.pH.get() == 5.0
        assert custom_solute.pH_property.listener_count == 0

    def test_dispose(self, custom_solute):
        selector = ObservableValue(custom_solute)
        tracker = SolutePHTracker(selector)
        tracker.dispose()
        assert selector.listener_count == 0
        assert custom_solute.pH_property.listener_count == 0
