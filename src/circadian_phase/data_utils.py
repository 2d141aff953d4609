"""Utilities for loading, summarising and correcting circadian phase data."""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from .errors import ParseError
from .utils.circular import HOURS_PER_DAY, circular_mean, circular_std

REQUIRED_COLUMNS = ["condition", "phase"]

# Phase in h, 0 is a set point chosen by the experimenter (e.g. medium addition)
SAMPLE_DATA = pd.DataFrame({
    "condition": ["A"] * 5 + ["B"] * 5,
    "phase": [
        20.16829452, 19.36571658, 20.65550798, 21.00584795, 21.78896104,
        8.638333976, 9.866050808, 8.514401623, 9.404041237, 9.678321678,
    ],
})


def load_phase_data(
    source: Optional[Union[str, Path, pd.DataFrame]] = None,
    sep: str = ",",
) -> pd.DataFrame:
    """
    Load (condition, phase) observations.

    Args:
        source: None for the built-in sample table, an existing DataFrame,
            or the path of a delimited file with a header row
        sep: Field delimiter used when reading a file

    Returns:
        DataFrame with a str `condition` column and a float `phase` column
        (hours). Blank phases are kept as NaN.

    Raises:
        FileNotFoundError: The input file does not exist
        ParseError: A required column is missing, a condition is missing,
            or a phase value is not numeric
    """
    if source is None:
        df = SAMPLE_DATA.copy()
    elif isinstance(source, pd.DataFrame):
        df = source.copy()
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        try:
            df = pd.read_csv(path, sep=sep)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise ParseError(f"Could not parse {path}: {e}") from e

    return _validate_observations(df)


def _validate_observations(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = [str(col).strip() for col in df.columns]

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ParseError(f"Missing required column(s) {missing}; found {list(df.columns)}")

    if df["condition"].isna().any():
        rows = list(df.index[df["condition"].isna()])
        raise ParseError(f"Rows {rows} have no condition")
    df["condition"] = df["condition"].astype(str).str.strip()

    raw = df["phase"]
    if not pd.api.types.is_numeric_dtype(raw):
        # blank cells count as missing, not malformed
        raw = raw.replace(r"^\s*$", np.nan, regex=True)
    phase = pd.to_numeric(raw, errors="coerce")

    malformed = phase.isna() & raw.notna()
    if malformed.any():
        bad = df.loc[malformed, "phase"].tolist()
        raise ParseError(f"Non-numeric phase value(s): {bad}")

    df["phase"] = phase.astype(float)
    return df.reset_index(drop=True)


def summarise_conditions(data: pd.DataFrame) -> pd.DataFrame:
    """
    Calculate mean and SEM of phase for each condition

    Must run on the uncorrected phases, i.e. before correct_wraparound().
    Missing phases are excluded; groups with fewer than two usable values
    get a NaN SEM.

    Returns:
        DataFrame with columns condition, n, Mean, SEM, CircMean (h), CircSD (rad),
        one row per condition in alphabetical order
    """
    grouped = data.groupby("condition", sort=True)["phase"]
    summary = grouped.agg(
        n="count",
        Mean="mean",
        SD="std",
        CircMean=circular_mean,
        CircSD=circular_std,
    ).reset_index()

    with np.errstate(divide="ignore", invalid="ignore"):
        summary["SEM"] = summary["SD"] / np.sqrt(summary["n"])

    for row in summary.itertuples():
        if row.n < 2:
            print(f"  ⚠ Warning: condition {row.condition!r} has {row.n} usable phase value(s), SEM is undefined")

    return summary[["condition", "n", "Mean", "SEM", "CircMean", "CircSD"]]


def correct_wraparound(data: pd.DataFrame, period: float = HOURS_PER_DAY) -> pd.DataFrame:
    """
    Subtract one period from phases above it, in place.

    Apply AFTER summarise_conditions() so the condition means are not biased
    by values moved across the boundary. Negative phases and phases above
    two periods are left to the caller.

    Returns:
        The same DataFrame, for chaining
    """
    over = data["phase"] > period
    data.loc[over, "phase"] = data.loc[over, "phase"] - period
    if over.any():
        print(f"  ✓ Wrapped {int(over.sum())} phase value(s) > {period:g}h back into range")
    return data
