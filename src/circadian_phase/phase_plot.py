"""
Circadian Phase Plot & Watson-Williams Test
===========================================
Plots circadian phase (h) for each condition on a circle and compares the
mean phase of two conditions with the Watson-Williams test

Phase should preferably lie between 0 and 24, where 0 is a set point you
define (e.g. time of medium addition). Values slightly over 24 are wrapped
after the condition means are calculated.
"""
from rich import print
from rich.console import Console
console = Console()

import os
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import pandas as pd

from .data_utils import correct_wraparound, load_phase_data, summarise_conditions
from .plotting import PlotStyle, build_draw_ops, render
from .stats import check_test_groups, format_result, watson_williams_test

# ============================================================================
# CONFIGURATION
# ============================================================================

DATA_DIR = "data"
INPUT_FILE = os.path.join(DATA_DIR, "table.csv")  # condition,phase table
OUTPUT_DIR = "outputs"
OUTPUT_FILE = os.path.join(OUTPUT_DIR, "phase_plot.pdf")
SUMMARY_FILE = os.path.join(OUTPUT_DIR, "phase_summary.csv")  # None to skip

# Colours for the conditions; every condition in the table needs one
COLOURS = {
    "A": "#000000",
    "B": "#777777",
}

# Adjust width and height iteratively to get the plot you want
PLOT_WIDTH = 1   # inches
PLOT_HEIGHT = 1  # inches
PLOT_DPI = 300

# Radii and sizes; trial and error will size the plot correctly
STYLE = PlotStyle()


# ============================================================================
# PIPELINE
# ============================================================================

def run_pipeline(
    source: Optional[Union[str, Path, pd.DataFrame]],
    output_file: Union[str, Path],
    colours: Mapping[str, str],
    width: float = PLOT_WIDTH,
    height: float = PLOT_HEIGHT,
    dpi: int = PLOT_DPI,
    style: Optional[PlotStyle] = None,
    summary_file: Optional[Union[str, Path]] = None,
) -> Dict:
    """
    Load -> summarise -> wrap -> plot -> test

    Args:
        source: Input table path, a DataFrame, or None for the sample data
        output_file: Where to save the figure (format from the extension)
        colours: Condition -> colour mapping
        width, height: Figure size in inches
        dpi: Figure resolution
        style: Plot radii and sizes
        summary_file: Optional CSV path for the condition summary

    Returns:
        Dictionary with data, summary, result and plot_path
    """
    style = style or STYLE

    print("\n[1/4] Loading phase data...")
    data = load_phase_data(source)
    print(f"  ✓ Loaded {len(data):,} rows, conditions: {sorted(data['condition'].unique())}")
    # fail before anything is written if the test cannot run
    check_test_groups(data)

    # Means and SEM come from the raw phases, BEFORE the wraparound correction
    print("\n[2/4] Calculating condition mean and SEM...")
    summary = summarise_conditions(data)
    print(summary.to_string(index=False))

    correct_wraparound(data)

    print("\n[3/4] Plotting...")
    ops = build_draw_ops(data, summary, colours, style=style)
    if summary_file:
        Path(summary_file).parent.mkdir(parents=True, exist_ok=True)
        summary.to_csv(summary_file, index=False)
        print(f"  ✓ Saved summary: {summary_file}")
    plot_path = render(ops, output_file, width, height, dpi, style=style)
    print(f"  ✓ Saved plot: {plot_path}")

    print("\n[4/4] Watson-Williams test...")
    result = watson_williams_test(data)
    print(format_result(result))

    return {
        "data": data,
        "summary": summary,
        "result": result,
        "plot_path": plot_path,
    }


# ============================================================================
# MAIN EXECUTION
# ============================================================================

def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # Allow custom input file as command line argument
    if argv:
        input_file = argv[0]
    elif os.path.exists(INPUT_FILE):
        input_file = INPUT_FILE
    else:
        input_file = None

    print("=" * 70)
    print("Circadian Phase Plot")
    print("=" * 70)
    print(f"Input file:  {input_file or 'built-in sample data'}")
    print(f"Output file: {OUTPUT_FILE}")

    try:
        run_pipeline(
            input_file,
            OUTPUT_FILE,
            COLOURS,
            width=PLOT_WIDTH,
            height=PLOT_HEIGHT,
            dpi=PLOT_DPI,
            style=STYLE,
            summary_file=SUMMARY_FILE,
        )
    except FileNotFoundError as e:
        print(f"\n✗ Error: {e}")
        print(f"Please ensure your CSV file is at: {INPUT_FILE}")
        print("Or provide the path as argument: circadian-phase-plot /path/to/table.csv")
        return 1
    except Exception as e:
        print(f"\n✗ Pipeline failed: {e}")
        console.print_exception()
        return 1

    print("=" * 70)
    print("✓ Done!")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
