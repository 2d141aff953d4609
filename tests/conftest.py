from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from circadian_phase.data_utils import load_phase_data

COLOURS = {"A": "#000000", "B": "#777777"}


@pytest.fixture
def sample_data() -> pd.DataFrame:
    return load_phase_data()


@pytest.fixture
def colours() -> dict[str, str]:
    return dict(COLOURS)


@pytest.fixture
def write_table(tmp_path):
    def _write(text: str, name: str = "table.csv"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
