"""
Watson-Williams test between two conditions.

Effectively a circular t-test, so it only works with two groups. The F
statistic and p-value come from pycircstat2; this module only prepares the
angles (hours -> degrees -> radians) and checks the group preconditions.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pycircstat2 import hypothesis

from .errors import StatisticalPreconditionError
from .utils.circular import time_to_degrees


@dataclass(frozen=True)
class WatsonWilliamsResult:
    statistic: float
    p_value: float
    df_between: int
    df_within: int
    conditions: Tuple[str, ...]
    n: int


def _two_samples(angles_by_group: Mapping[str, Sequence[float]]) -> List[np.ndarray]:
    """NaN-free radian samples, one per group, or StatisticalPreconditionError."""
    labels = list(angles_by_group)
    if len(labels) != 2:
        raise StatisticalPreconditionError(
            f"Watson-Williams test needs exactly 2 groups, got {len(labels)}: {labels}"
        )

    samples = []
    for label in labels:
        angles = np.asarray(angles_by_group[label], dtype=float).ravel()
        angles = angles[~np.isnan(angles)]
        if angles.size == 0:
            raise StatisticalPreconditionError(f"Group {label!r} has no observations")
        samples.append(np.deg2rad(angles))

    n = int(sum(sample.size for sample in samples))
    if n <= len(samples):
        raise StatisticalPreconditionError(
            f"Watson-Williams test needs more than {len(samples)} observations in total, got {n}"
        )
    return samples


def watson_williams(angles_by_group: Mapping[str, Sequence[float]]) -> WatsonWilliamsResult:
    """
    Compare the mean direction of two groups of angles.

    Args:
        angles_by_group: Group label -> angles in degrees. NaNs are dropped.

    Returns:
        WatsonWilliamsResult with the F statistic, p-value and degrees of freedom

    Raises:
        StatisticalPreconditionError: Not exactly two groups, an empty group,
            or no more observations than groups
    """
    samples = _two_samples(angles_by_group)

    res = hypothesis.watson_williams_test(samples)

    return WatsonWilliamsResult(
        statistic=float(res.F),
        p_value=float(res.pval),
        df_between=int(res.df_between),
        df_within=int(res.df_within),
        conditions=tuple(angles_by_group),
        n=int(sum(sample.size for sample in samples)),
    )


def group_angles(data: pd.DataFrame, conditions: Optional[Sequence[str]] = None) -> Dict[str, np.ndarray]:
    """
    Phase angles in degrees per condition.

    Args:
        data: Observations with `condition` and `phase` (hours) columns
        conditions: The conditions to keep, in order. Defaults to every
            condition in the data, sorted.
    """
    if conditions is None:
        conditions = sorted(data["condition"].unique())

    return {
        condition: time_to_degrees(
            data.loc[data["condition"] == condition, "phase"].to_numpy(dtype=float)
        )
        for condition in conditions
    }


def check_test_groups(data: pd.DataFrame, conditions: Optional[Sequence[str]] = None):
    """Raise StatisticalPreconditionError now if watson_williams_test() would."""
    _two_samples(group_angles(data, conditions))


def watson_williams_test(data: pd.DataFrame, conditions: Optional[Sequence[str]] = None) -> WatsonWilliamsResult:
    """
    Watson-Williams test of phase ~ condition.

    Args:
        data: Observations with `condition` and `phase` (hours) columns
        conditions: The two conditions to compare, in order. Defaults to
            every condition in the data, sorted.
    """
    return watson_williams(group_angles(data, conditions))


def format_result(result: WatsonWilliamsResult) -> str:
    """Console report laid out like R's watson.williams.test()."""
    return "\n".join([
        "",
        "        Watson-Williams test for homogeneity of means",
        "",
        f"data:  {' and '.join(result.conditions)}",
        f"F = {result.statistic:.4f}, df1 = {result.df_between}, "
        f"df2 = {result.df_within}, p-value = {result.p_value:.4g}",
        "alternative hypothesis: true mean directions are not equal",
        "",
    ])
