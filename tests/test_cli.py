"""Tests for the command-line demo runner."""

from ph_scale.__main__ import build_parser, format_state, main
from ph_scale.core import NO_READING


class TestCLI:

    def test_list_solutes(self, capsys):
        assert main(["--list-solutes"]) == 0
        out = capsys.readouterr().out
        assert "battery_acid" in out
        assert "custom" in out

    def test_run_steps(self):
        assert main(["--solute", "soda", "--water-rate", "0.1", "--steps", "3"]) == 0

    def test_custom_solute_pH(self):
        assert main(["--solute", "custom", "--solute-pH", "4.2", "--steps", "1"]) == 0

    def test_solute_pH_needs_custom(self):
        assert main(["--solute", "soda", "--solute-pH", "4.2"]) == 1

    def test_unknown_solute_fails(self):
        assert main(["--solute", "lemonade"]) == 1

    def test_overfull_beaker_fails(self):
        assert main(["--solute-volume", "1.0", "--water-volume", "1.0"]) == 1

    def test_rate_above_maximum_fails(self):
        assert main(["--water-rate", "5.0"]) == 1

    def test_parser_defaults(self):
        args = build_parser().parse_args([])
        assert args.solute == "chicken_soup"
        assert args.steps == 20
        assert tuple(args.probe) == (0.5, 0.1)

    def test_format_state_without_reading(self):
        state = {
            "time": 0.0,
            "solute_volume": 0.0,
            "water_volume": 0.0,
            "pH": NO_READING,
            "color": "rgba(224,255,255,1)",
        }
        assert "pH=-" in format_state(state)
