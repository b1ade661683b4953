"""
pH Scale Demo Runner
====================

Command-line entry point that drives the pH scale model and logs the
solution and meter state as it evolves.

Examples:
    python -m ph_scale --list-solutes
    python -m ph_scale --solute soda --water-rate 0.1 --steps 50
    python -m ph_scale --solute coffee --probe 0.5 0.2 --plot

License: MIT
"""

import argparse
import logging
import signal
import sys
from typing import Dict, List

from .config import BeakerConfiguration, MeterConfiguration, ModelConfiguration
from .core import NO_READING, list_solutes
from .model import CUSTOM_SOLUTE_KEY, PHScaleModel

logger = logging.getLogger(__name__)

# Stops the step loop on Ctrl+C
running = True


def signal_handler(sig, frame):
    """Handle Ctrl+C for clean shutdown."""
    global running
    logger.info("Shutdown signal received. Stopping...")
    running = False


def print_solute_table() -> None:
    print(f"{'key':<16} {'name':<16} {'pH':>5}")
    print("-" * 40)
    for solute in list_solutes():
        print(f"{solute.key:<16} {solute.name:<16} {solute.pH:>5.1f}")
    print(f"{CUSTOM_SOLUTE_KEY:<16} {'My Solution':<16} {'adj.':>5}")


def format_state(state: Dict[str, object]) -> str:
    pH = state["pH"]
    pH_text = "-" if pH is NO_READING else f"{pH:.3f}"
    text = (
        f"t={state['time']:.2f}s | V_s={state['solute_volume']:.3f}L | "
        f"V_w={state['water_volume']:.3f}L | pH={pH_text} | color={state['color']}"
    )
    if "meter" in state:
        text += f" | meter={state['meter']} ({state['probe_location']})"
    return text


def plot_history(history: List[Dict[str, object]]) -> None:
    """Plot volume and pH against time."""
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        logger.error("--plot needs matplotlib (pip install ph-scale-engine[plot])")
        return

    times = [s["time"] for s in history]
    volumes = [s["volume"] for s in history]
    pHs = [float("nan") if s["pH"] is NO_READING else s["pH"] for s in history]

    fig, (ax_volume, ax_pH) = plt.subplots(2, 1, sharex=True, figsize=(8, 6))
    ax_volume.plot(times, volumes)
    ax_volume.set_ylabel("Volume [L]")
    ax_pH.plot(times, pHs)
    ax_pH.set_ylim(0, 14)
    ax_pH.set_ylabel("pH")
    ax_pH.set_xlabel("Time [s]")
    fig.suptitle(f"Solute: {history[0]['solute']}")
    plt.show()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="pH Scale Model")
    parser.add_argument(
        "--solute", type=str, default="chicken_soup", help="Solute catalog key"
    )
    parser.add_argument(
        "--solute-pH", type=float, default=None, help="pH of the custom solute"
    )
    parser.add_argument(
        "--solute-volume", type=float, default=0.5, help="Initial solute volume [L]"
    )
    parser.add_argument(
        "--water-volume", type=float, default=0.0, help="Initial water volume [L]"
    )
    parser.add_argument(
        "--max-volume", type=float, default=1.2, help="Beaker capacity [L]"
    )
    parser.add_argument(
        "--water-rate", type=float, default=0.0, help="Water faucet flow rate [L/s]"
    )
    parser.add_argument(
        "--drain-rate", type=float, default=0.0, help="Drain faucet flow rate [L/s]"
    )
    parser.add_argument(
        "--dispense", action="store_true", help="Keep the dropper dispensing"
    )
    parser.add_argument(
        "--probe",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=(0.5, 0.1),
        help="Probe tip position",
    )
    parser.add_argument("--steps", type=int, default=20, help="Number of time steps")
    parser.add_argument("--dt", type=float, default=0.1, help="Time step [seconds]")
    parser.add_argument(
        "--log-interval", type=int, default=5, help="Steps between state lines"
    )
    parser.add_argument(
        "--list-solutes", action="store_true", help="Print the solute catalog and exit"
    )
    parser.add_argument(
        "--plot", action="store_true", help="Plot volume and pH (needs matplotlib)"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    signal.signal(signal.SIGINT, signal_handler)

    if args.list_solutes:
        print_solute_table()
        return 0

    # ========================================================================
    # PHASE 1: Build model
    # ========================================================================
    try:
        config = ModelConfiguration(
            initial_solute=args.solute,
            beaker=BeakerConfiguration(
                max_volume=args.max_volume,
                initial_solute_volume=args.solute_volume,
                initial_water_volume=args.water_volume,
            ),
            meter=MeterConfiguration(probe_start=tuple(args.probe)),
        )
        model = PHScaleModel(config)

        if args.solute_pH is not None:
            if args.solute != CUSTOM_SOLUTE_KEY:
                raise ValueError("--solute-pH applies only to --solute custom")
            model.custom_solute.set_pH(args.solute_pH)

    except (ValueError, KeyError) as e:
        logger.error(f"Model initialization failed: {e}")
        return 1

    # ========================================================================
    # PHASE 2: Configure devices
    # ========================================================================
    try:
        if args.water_rate > 0:
            model.water_faucet.open(args.water_rate)
        if args.drain_rate > 0:
            model.drain_faucet.open(args.drain_rate)
        if args.dispense:
            model.dropper.start()
    except ValueError as e:
        logger.error(f"Invalid device setting: {e}")
        return 1

    # ========================================================================
    # PHASE 3: Step loop
    # ========================================================================
    history = [model.snapshot()]
    logger.info(format_state(history[-1]))

    try:
        for step in range(1, args.steps + 1):
            if not running:
                break
            model.step(args.dt)
            history.append(model.snapshot())
            if step % args.log_interval == 0 or step == args.steps:
                logger.info(format_state(history[-1]))

    except Exception as e:
        logger.error(f"Simulation error: {type(e).__name__}: {e}")
        return 1

    logger.info(f"Finished after {model.elapsed_time:.2f}s: {model!r}")

    if args.plot:
        plot_history(history)

    return 0


if __name__ == "__main__":
    sys.exit(main())
