# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Observation store.

Holds the observed annual series a calibration is scored against. Series
are loaded once before optimization starts and are read-only afterwards.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Union

from simcal.core.exceptions import ObservationError

from .series import YearSeries, read_year_value_csv

logger = logging.getLogger(__name__)


class ObservationSeries(YearSeries):
    """An observed (year, value) series for one output variable."""

    def zero_years(self) -> List[int]:
        """Years whose observed value is exactly zero."""
        return [int(y) for y, v in zip(self.years, self.values) if v == 0.0]


class ObservationStore(Mapping[str, ObservationSeries]):
    """Read-only mapping of observation name to series."""

    def __init__(self, series: Mapping[str, ObservationSeries]):
        self._series: Dict[str, ObservationSeries] = dict(series)

    def __getitem__(self, name: str) -> ObservationSeries:
        try:
            return self._series[name]
        except KeyError:
            raise ObservationError(
                f"No observation series named '{name}'; available: {sorted(self._series)}"
            ) from None

    def __contains__(self, name) -> bool:
        return name in self._series

    def __iter__(self) -> Iterator[str]:
        return iter(self._series)

    def __len__(self) -> int:
        return len(self._series)

    @classmethod
    def from_config(cls, observations_config) -> 'ObservationStore':
        """Load every series declared in ``config.observations``."""
        loaded = {}
        for name, obs_cfg in observations_config.items():
            loaded[name] = load_observation_series(
                name, obs_cfg.path, obs_cfg.year_column, obs_cfg.value_column
            )
        return cls(loaded)


def load_observation_series(
    name: str,
    path: Union[str, Path],
    year_column: str = 'year',
    value_column: str = 'value',
) -> ObservationSeries:
    """Load one observed series from a CSV file."""
    series = ObservationSeries.from_series(
        name, read_year_value_csv(path, year_column, value_column)
    )
    logger.info(
        f"Loaded observations '{name}': {len(series)} years "
        f"({series.first_year}-{series.last_year}) from {path}"
    )
    zeros = series.zero_years()
    if zeros:
        logger.warning(
            f"Observations '{name}' contain zero values in years {zeros}; "
            f"the normalized residual is undefined there"
        )
    return series
