"""
Circular Phase Plot
===================
A 1D phase axis wrapped into a circle: individual points, a radial tick at
each condition mean and a shaded SEM band, drawn on a clockwise polar axis
with 0h at the top.

The figure is first described as an ordered list of draw ops and only then
handed to matplotlib, so the layout can be inspected without rendering.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .errors import ConfigurationError
from .utils.circular import HOURS_PER_DAY, time_to_degrees, wrap_hours

# (hour, label, label radius) for the manual axis
AXIS_LABELS = [
    (0, "0/24", 0.15),
    (6, "6", 0.15),
    (12, "12", 0.15),
    (18, "18", 0.16),
]


@dataclass(frozen=True)
class PlotStyle:
    """Radii are in data units, widths and sizes in points."""
    radius_limit: float = 0.37
    point_radius: float = 0.31
    point_size: float = 1.4
    ring_colour: str = "#eeeeee"
    ring_width: float = 1.7
    mean_inner: float = 0.25
    mean_outer: float = 0.35
    mean_width: float = 1.1
    sem_width: float = 6.4
    sem_alpha: float = 0.5
    centre_colour: str = "black"
    centre_size: float = 12.8
    axis_tick_inner: float = 0.05
    axis_tick_outer: float = 0.09
    axis_tick_width: float = 0.6
    label_colour: str = "black"
    label_size: float = 7.0
    theta_zero: str = "N"
    clockwise: bool = True


# ============================================================================
# DRAW OPS
# ============================================================================
# All angles are in degrees, 0-360.

@dataclass(frozen=True)
class Arc:
    start: float
    end: float
    radius: float
    colour: str
    linewidth: float
    alpha: float = 1.0


@dataclass(frozen=True)
class Segment:
    """Radial line at a fixed angle."""
    angle: float
    r_start: float
    r_end: float
    colour: str
    linewidth: float


@dataclass(frozen=True)
class Points:
    angles: Tuple[float, ...]
    radius: float
    colour: str
    size: float
    marker: str = "o"


@dataclass(frozen=True)
class Label:
    angle: float
    radius: float
    text: str
    colour: str
    size: float


DrawOp = Union[Arc, Segment, Points, Label]


def sem_arc_segments(mean: float, sem: float, period: float = HOURS_PER_DAY) -> List[Tuple[float, float]]:
    """
    Hour intervals covering mean +/- SEM on the circle.

    A band that crosses the 0/24 boundary is returned as two intervals, one
    ending at 24 and one starting at 0.

    Example:
        mean=23.5, sem=1.0 -> [(22.5, 24.0), (0.0, 0.5)]
    """
    if not (np.isfinite(mean) and np.isfinite(sem)):
        return []

    if 2 * sem >= period:
        return [(0.0, period)]

    # summaries are computed before the wraparound correction
    mean = wrap_hours(mean, period)
    low, high = mean - sem, mean + sem

    if low < 0:
        return [(period + low, period), (0.0, high)]
    if high > period:
        return [(low, period), (0.0, high - period)]
    return [(low, high)]


def _check_palette(conditions: Sequence[str], mapping: Mapping[str, str], what: str):
    missing = [c for c in conditions if c not in mapping]
    if missing:
        raise ConfigurationError(
            f"No {what} defined for condition(s) {missing}; "
            f"known conditions: {sorted(mapping)}"
        )


def build_draw_ops(
    data: pd.DataFrame,
    summary: pd.DataFrame,
    colours: Mapping[str, str],
    markers: Optional[Mapping[str, str]] = None,
    style: Optional[PlotStyle] = None,
) -> List[DrawOp]:
    """
    Compose the phase plot as an ordered list of draw ops.

    Args:
        data: Observations with wraparound-corrected phases
        summary: Output of summarise_conditions() (uncorrected means)
        colours: Condition -> colour; every condition must be present
        markers: Optional condition -> matplotlib marker
        style: Sizes and radii, PlotStyle() if omitted

    Returns:
        Draw ops in paint order: ring, mean ticks, SEM arcs, points,
        centre dot, axis ticks, axis labels

    Raises:
        ConfigurationError: A condition has no colour (or marker)
    """
    style = style or PlotStyle()

    conditions = sorted(set(data["condition"]) | set(summary["condition"]))
    _check_palette(conditions, colours, "colour")
    if markers is not None:
        _check_palette(conditions, markers, "marker")

    # Outer circle is the "x" axis and sits under everything else
    ops: List[DrawOp] = [
        Arc(0.0, 360.0, style.point_radius, style.ring_colour, style.ring_width),
    ]

    # Mean is a truncated segment radiating from the centre
    for row in summary.itertuples(index=False):
        if np.isfinite(row.Mean):
            ops.append(Segment(
                float(time_to_degrees(wrap_hours(row.Mean))),
                style.mean_inner, style.mean_outer,
                colours[row.condition], style.mean_width,
            ))

    # SEM is a shaded thick bar
    for row in summary.itertuples(index=False):
        for start, end in sem_arc_segments(row.Mean, row.SEM):
            ops.append(Arc(
                float(time_to_degrees(start)), float(time_to_degrees(end)),
                style.point_radius, colours[row.condition],
                style.sem_width, style.sem_alpha,
            ))

    for condition, group in data.groupby("condition", sort=True):
        phases = group["phase"].dropna().to_numpy(dtype=float)
        ops.append(Points(
            tuple(float(a) for a in time_to_degrees(phases)),
            style.point_radius, colours[condition], style.point_size,
            markers[condition] if markers is not None else "o",
        ))

    ops.append(Points((0.0,), 0.0, style.centre_colour, style.centre_size))

    for hour, _, _ in AXIS_LABELS:
        ops.append(Segment(
            float(time_to_degrees(hour)),
            style.axis_tick_inner, style.axis_tick_outer,
            style.label_colour, style.axis_tick_width,
        ))
    for hour, text, radius in AXIS_LABELS:
        ops.append(Label(
            float(time_to_degrees(hour)), radius, text,
            style.label_colour, style.label_size,
        ))

    return ops


def _op_angles(op: DrawOp) -> Tuple[float, ...]:
    if isinstance(op, Arc):
        return (op.start, op.end)
    if isinstance(op, Points):
        return op.angles
    return (op.angle,)


def _draw(ax, op: DrawOp):
    if isinstance(op, Arc):
        n = max(2, int(abs(op.end - op.start)) + 1)
        theta = np.deg2rad(np.linspace(op.start, op.end, n))
        ax.plot(theta, np.full(n, op.radius), color=op.colour,
                linewidth=op.linewidth, alpha=op.alpha, solid_capstyle="butt")
    elif isinstance(op, Segment):
        theta = np.deg2rad(op.angle)
        ax.plot([theta, theta], [op.r_start, op.r_end], color=op.colour,
                linewidth=op.linewidth, solid_capstyle="butt")
    elif isinstance(op, Points):
        theta = np.deg2rad(np.asarray(op.angles, dtype=float))
        ax.plot(theta, np.full(len(theta), op.radius), linestyle="none",
                marker=op.marker, markersize=op.size, markeredgewidth=0,
                color=op.colour)
    elif isinstance(op, Label):
        ax.text(np.deg2rad(op.angle), op.radius, op.text, color=op.colour,
                fontsize=op.size, ha="center", va="center")
    else:
        raise TypeError(f"Unknown draw op: {op!r}")


def draw_figure(
    ops: Sequence[DrawOp],
    width: float,
    height: float,
    style: Optional[PlotStyle] = None,
):
    """
    Build the polar figure for the ops without saving it.

    0h sits at `style.theta_zero` and the axis winds clockwise unless
    `style.clockwise` is False. The caller closes the figure.
    """
    style = style or PlotStyle()

    fig = plt.figure(figsize=(width, height))
    ax = fig.add_subplot(projection="polar")
    fig.subplots_adjust(left=0, right=1, bottom=0, top=1)
    ax.set_theta_zero_location(style.theta_zero)
    ax.set_theta_direction(-1 if style.clockwise else 1)
    ax.set_ylim(0, style.radius_limit)
    ax.set_axis_off()

    try:
        for op in ops:
            _draw(ax, op)
    except Exception:
        plt.close(fig)
        raise

    return fig


def render(
    ops: Sequence[DrawOp],
    path: Union[str, Path],
    width: float,
    height: float,
    dpi: int = 300,
    style: Optional[PlotStyle] = None,
) -> Path:
    """
    Draw the ops on a polar axis and save the figure.

    Width and height are in inches. The output format follows the file
    extension (pdf, svg, png, ...). No grid, spine, tick labels or legend
    are drawn; the ops carry their own axis.

    Raises:
        ValueError: An op angle lies outside 0-360°
        OSError: The file cannot be written
    """
    style = style or PlotStyle()
    path = Path(path)

    for op in ops:
        bad = [a for a in _op_angles(op) if not 0.0 <= a <= 360.0]
        if bad:
            raise ValueError(f"Angle(s) {bad} outside 0-360° in {type(op).__name__}")

    path.parent.mkdir(parents=True, exist_ok=True)

    fig = draw_figure(ops, width, height, style)
    try:
        fig.savefig(path, dpi=dpi)
    finally:
        plt.close(fig)

    return path
