# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Auxiliary forcing series.

Raw input series that SCALING parameters multiply before they are pushed
into the simulation adapter. The raw data is never modified.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from .series import YearSeries, read_year_value_csv

logger = logging.getLogger(__name__)


class AuxiliaryForcingSeries(YearSeries):
    """A raw (year, value) forcing series."""

    @property
    def raw_values(self) -> np.ndarray:
        return self.values

    def scaled(self, multiplier: float) -> np.ndarray:
        """New array holding ``raw[i] * multiplier`` for every index i."""
        return self.values * float(multiplier)


def load_forcing_series(
    name: str,
    path: Union[str, Path],
    year_column: str = 'year',
    value_column: str = 'value',
) -> AuxiliaryForcingSeries:
    """Load one forcing series from a CSV file."""
    series = AuxiliaryForcingSeries.from_series(
        name, read_year_value_csv(path, year_column, value_column)
    )
    logger.debug(f"Loaded forcing '{name}': {len(series)} years from {path}")
    return series
