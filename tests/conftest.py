"""
Pytest configuration for ph_scale tests.
"""
import os
import sys

import pytest

# Add src directory to Python path so tests can import ph_scale modules
src_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../src"))
sys.path.insert(0, src_path)


# ==============================================================================
# Solution Fixtures
# ==============================================================================

@pytest.fixture
def coffee_selector():
    """Solute selector loaded with coffee (pH 5.0)."""
    from ph_scale.core import ObservableValue, get_solute
    return ObservableValue(get_solute("coffee"), name="solute")


@pytest.fixture
def coffee_solution(coffee_selector):
    """0.5 L coffee + 0.5 L water in a 1.2 L beaker."""
    from ph_scale.core import WATER, Solution
    return Solution(coffee_selector, 0.5, WATER, 0.5, max_volume=1.2)


@pytest.fixture
def custom_solute():
    """Adjustable solute starting at pH 7."""
    from ph_scale.core import create_custom_solute
    return create_custom_solute(7.0)


@pytest.fixture
def custom_solution(custom_solute):
    """0.5 L of the adjustable solute, no water."""
    from ph_scale.core import WATER, ObservableValue, Solution
    selector = ObservableValue(custom_solute, name="solute")
    return Solution(selector, 0.5, WATER, 0.0, max_volume=1.2)


# ==============================================================================
# Model Fixtures
# ==============================================================================

@pytest.fixture
def model():
    """Model with the default configuration (chicken soup, 0.5 L)."""
    from ph_scale.model import PHScaleModel
    return PHScaleModel()
