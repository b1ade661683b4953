"""The built-in validation routines must pass."""

from ph_scale.core import run_all_validations
from ph_scale.core.chemistry import validate_chemistry
from ph_scale.core.observable import validate_observable
from ph_scale.core.solute import validate_solutes
from ph_scale.core.solution import validate_solution


def test_validate_observable():
    validate_observable()


def test_validate_chemistry():
    validate_chemistry()


def test_validate_solutes():
    validate_solutes()


def test_validate_solution():
    validate_solution()


def test_run_all_validations(capsys):
    run_all_validations()
    assert "ALL VALIDATIONS PASSED" in capsys.readouterr().out
