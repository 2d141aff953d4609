from __future__ import annotations

import math

import matplotlib.image as mpimg
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from circadian_phase.data_utils import correct_wraparound, load_phase_data, summarise_conditions
from circadian_phase.errors import ConfigurationError
from circadian_phase.plotting import (
    Arc,
    Label,
    PlotStyle,
    Points,
    Segment,
    build_draw_ops,
    draw_figure,
    render,
    sem_arc_segments,
)
from circadian_phase.utils.circular import time_to_degrees


def _prepared(frame: pd.DataFrame | None = None):
    data = load_phase_data(frame)
    summary = summarise_conditions(data)
    correct_wraparound(data)
    return data, summary


def test_sem_arc_split_past_midnight() -> None:
    segments = sem_arc_segments(23.5, 1.0)

    assert segments == [pytest.approx((22.5, 24.0)), pytest.approx((0.0, 0.5))]
    degrees = [tuple(time_to_degrees(np.array(seg))) for seg in segments]
    assert degrees == [pytest.approx((337.5, 360.0)), pytest.approx((0.0, 7.5))]


def test_sem_arc_split_before_midnight() -> None:
    assert sem_arc_segments(0.5, 1.0) == [pytest.approx((23.5, 24.0)), pytest.approx((0.0, 1.5))]


def test_sem_arc_without_crossing_is_single() -> None:
    assert sem_arc_segments(12.0, 1.0) == [pytest.approx((11.0, 13.0))]


def test_sem_arc_for_uncorrected_mean_over_24() -> None:
    assert sem_arc_segments(24.3, 0.5) == [pytest.approx((23.8, 24.0)), pytest.approx((0.0, 0.8))]
    assert sem_arc_segments(24.8, 0.5) == [pytest.approx((0.3, 1.3))]


def test_sem_arc_undefined_sem_draws_nothing() -> None:
    assert sem_arc_segments(12.0, float("nan")) == []
    assert sem_arc_segments(float("nan"), 1.0) == []


def test_sem_arc_wider_than_circle_is_full_ring() -> None:
    assert sem_arc_segments(3.0, 13.0) == [(0.0, 24.0)]


def test_draw_ops_layers_in_order(colours) -> None:
    data, summary = _prepared()

    ops = build_draw_ops(data, summary, colours)

    kinds = [type(op).__name__ for op in ops]
    assert kinds == (
        ["Arc"]                 # ring
        + ["Segment"] * 2       # mean ticks
        + ["Arc"] * 2           # SEM arcs
        + ["Points"] * 3        # A, B, centre dot
        + ["Segment"] * 4       # axis ticks
        + ["Label"] * 4
    )
    ring = ops[0]
    assert (ring.start, ring.end) == (0.0, 360.0)
    assert ring.colour == PlotStyle().ring_colour


def test_draw_ops_mean_ticks_and_points(colours) -> None:
    data, summary = _prepared()

    ops = build_draw_ops(data, summary, colours)

    ticks = ops[1:3]
    assert ticks[0].colour == colours["A"]
    assert ticks[0].angle == pytest.approx(time_to_degrees(summary.iloc[0]["Mean"]))
    assert ticks[1].colour == colours["B"]

    points = [op for op in ops if isinstance(op, Points) and op.radius > 0]
    assert points[0].colour == colours["A"]
    assert points[0].angles == pytest.approx(tuple(data.loc[data["condition"] == "A", "phase"] * 15))


def test_draw_ops_axis_labels() -> None:
    data, summary = _prepared()

    ops = build_draw_ops(data, summary, {"A": "k", "B": "grey"})

    labels = [op for op in ops if isinstance(op, Label)]
    assert [label.text for label in labels] == ["0/24", "6", "12", "18"]
    assert [label.angle for label in labels] == [0.0, 90.0, 180.0, 270.0]
    axis_ticks = [op for op in ops if isinstance(op, Segment)][-4:]
    assert [tick.angle for tick in axis_ticks] == [0.0, 90.0, 180.0, 270.0]


def test_draw_ops_split_sem_at_seam(colours) -> None:
    data, summary = _prepared(pd.DataFrame({
        "condition": ["A"] * 3 + ["B"] * 3,
        "phase": [23.0, 24.0, 25.0, 9.0, 10.0, 11.0],
    }))

    ops = build_draw_ops(data, summary, colours)

    sem_arcs = [op for op in ops if isinstance(op, Arc) and op.colour == colours["A"]]
    assert len(sem_arcs) == 2
    assert sem_arcs[0].end == pytest.approx(360.0)
    assert sem_arcs[1].start == pytest.approx(0.0)
    assert all(0.0 <= a <= 360.0 for arc in sem_arcs for a in (arc.start, arc.end))


def test_draw_ops_mean_over_24_is_wrapped(colours) -> None:
    data, summary = _prepared(pd.DataFrame({
        "condition": ["A", "A", "B", "B"],
        "phase": [24.5, 24.7, 9.0, 10.0],
    }))

    ops = build_draw_ops(data, summary, colours)

    assert ops[1].angle == pytest.approx(0.6 * 15)


def test_draw_ops_skip_sem_for_single_observation(colours) -> None:
    data, summary = _prepared(pd.DataFrame({"condition": ["A", "B", "B"], "phase": [3.0, 9.0, 10.0]}))

    ops = build_draw_ops(data, summary, colours)

    sem_arcs = [op for op in ops if isinstance(op, Arc) and op.alpha < 1]
    assert [arc.colour for arc in sem_arcs] == [colours["B"]]


def test_unmapped_condition_raises_configuration_error() -> None:
    data, summary = _prepared()

    with pytest.raises(ConfigurationError, match="B"):
        build_draw_ops(data, summary, {"A": "#000000"})


def test_unmapped_marker_raises_configuration_error(colours) -> None:
    data, summary = _prepared()

    with pytest.raises(ConfigurationError, match="marker"):
        build_draw_ops(data, summary, colours, markers={"A": "o"})


def test_markers_are_applied(colours) -> None:
    data, summary = _prepared()

    ops = build_draw_ops(data, summary, colours, markers={"A": "o", "B": "^"})

    points = [op for op in ops if isinstance(op, Points) and op.radius > 0]
    assert [p.marker for p in points] == ["o", "^"]


@pytest.mark.parametrize("name", ["plot.pdf", "plot.png", "plot.svg"])
def test_render_writes_file(tmp_path, colours, name: str) -> None:
    data, summary = _prepared()
    ops = build_draw_ops(data, summary, colours)
    path = tmp_path / "figures" / name

    result = render(ops, path, width=1, height=1, dpi=100)

    assert result == path
    assert path.exists()
    assert path.stat().st_size > 0


def test_render_rejects_out_of_range_angle(tmp_path) -> None:
    ops = [Points((370.0,), 0.31, "#000000", 1.0)]

    with pytest.raises(ValueError, match="370"):
        render(ops, tmp_path / "plot.pdf", width=1, height=1)

    assert not (tmp_path / "plot.pdf").exists()


def test_figure_starts_at_top_and_runs_clockwise(colours) -> None:
    data, summary = _prepared()

    fig = draw_figure(build_draw_ops(data, summary, colours), width=2, height=1.5)
    try:
        ax = fig.axes[0]
        assert ax.name == "polar"
        assert ax.get_theta_offset() == pytest.approx(math.pi / 2)
        assert ax.get_theta_direction() == -1
        assert not ax.axison
        assert ax.get_legend() is None
        assert tuple(fig.get_size_inches()) == pytest.approx((2.0, 1.5))
    finally:
        plt.close(fig)


def test_figure_follows_style_orientation(colours) -> None:
    data, summary = _prepared()
    style = PlotStyle(theta_zero="E", clockwise=False)

    fig = draw_figure(build_draw_ops(data, summary, colours, style=style), 1, 1, style=style)
    try:
        ax = fig.axes[0]
        assert ax.get_theta_offset() == pytest.approx(0.0)
        assert ax.get_theta_direction() == 1
    finally:
        plt.close(fig)


def test_render_png_size_follows_inches_and_dpi(tmp_path, colours) -> None:
    data, summary = _prepared()
    path = tmp_path / "plot.png"

    render(build_draw_ops(data, summary, colours), path, width=2, height=1.5, dpi=100)

    height_px, width_px = mpimg.imread(path).shape[:2]
    assert (width_px, height_px) == (200, 150)
