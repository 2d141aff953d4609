"""Circular plots and Watson-Williams test for circadian phase data."""

from .phase_plot import main as phase_plot_main


def main() -> None:
    """Entry point for the circadian phase plot."""
    raise SystemExit(phase_plot_main())
