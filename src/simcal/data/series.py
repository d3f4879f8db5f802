# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Read-only annual time series.

Base class shared by observed series and auxiliary forcing series, plus the
CSV reader both are loaded with.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

import numpy as np
import pandas as pd

from simcal.core.exceptions import ObservationError

logger = logging.getLogger(__name__)


class YearSeries:
    """An immutable, year-indexed float64 series.

    Years are unique and sorted ascending. Accessors return copies or
    read-only views; the underlying data never changes after construction.
    """

    def __init__(self, name: str, years: Iterable[int], values: Iterable[float]):
        years_arr = np.asarray(list(years), dtype=np.int64)
        values_arr = np.asarray(list(values), dtype=np.float64)

        if years_arr.shape != values_arr.shape:
            raise ObservationError(
                f"Series '{name}': {len(years_arr)} years but {len(values_arr)} values"
            )
        if years_arr.size == 0:
            raise ObservationError(f"Series '{name}' is empty")

        duplicated = pd.Index(years_arr).duplicated()
        if duplicated.any():
            dupes = sorted(set(years_arr[duplicated].tolist()))
            raise ObservationError(f"Series '{name}' has duplicate years: {dupes}")

        order = np.argsort(years_arr, kind='stable')
        self.name = name
        self._years = years_arr[order]
        self._values = values_arr[order]
        self._years.setflags(write=False)
        self._values.setflags(write=False)

    @classmethod
    def from_pairs(cls, name: str, pairs: Iterable[Tuple[int, float]]):
        pairs = list(pairs)
        return cls(name, [int(y) for y, _ in pairs], [float(v) for _, v in pairs])

    @classmethod
    def from_series(cls, name: str, series: pd.Series):
        return cls(name, series.index.astype(np.int64), series.to_numpy(dtype=np.float64))

    @property
    def years(self) -> np.ndarray:
        return self._years

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def first_year(self) -> int:
        return int(self._years[0])

    @property
    def last_year(self) -> int:
        return int(self._years[-1])

    def value_for(self, year: int) -> float:
        idx = np.searchsorted(self._years, year)
        if idx >= self._years.size or self._years[idx] != year:
            raise KeyError(year)
        return float(self._values[idx])

    def to_series(self) -> pd.Series:
        """A pandas copy indexed by year."""
        return pd.Series(self._values.copy(), index=pd.Index(self._years.copy(), name='year'),
                         name=self.name)

    def pairs(self) -> Tuple[Tuple[int, float], ...]:
        return tuple((int(y), float(v)) for y, v in zip(self._years, self._values))

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        return iter(self.pairs())

    def __len__(self) -> int:
        return int(self._years.size)

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(name={self.name!r}, "
                f"years={self.first_year}-{self.last_year}, n={len(self)})")


def read_year_value_csv(
    path: Union[str, Path],
    year_column: str = 'year',
    value_column: str = 'value',
) -> pd.Series:
    """Read a two-column (year, value) CSV into a year-indexed Series.

    Rows with a missing value are dropped, so absent years are simply not
    part of the series.
    """
    path = Path(path)
    if not path.exists():
        raise ObservationError(f"Series file not found: {path}")

    try:
        df = pd.read_csv(path, comment='#')
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ObservationError(f"Could not read series file {path}: {e}") from e

    missing = [c for c in (year_column, value_column) if c not in df.columns]
    if missing:
        raise ObservationError(
            f"Series file {path} is missing columns {missing}; found {list(df.columns)}"
        )

    df = df[[year_column, value_column]].dropna(subset=[value_column])
    dropped_years = df[year_column].isna().sum()
    if dropped_years:
        logger.warning(f"Dropping {dropped_years} rows without a year in {path}")
        df = df.dropna(subset=[year_column])

    try:
        years = df[year_column].astype(np.int64)
        values = df[value_column].astype(np.float64)
    except (TypeError, ValueError) as e:
        raise ObservationError(f"Non-numeric data in series file {path}: {e}") from e

    return pd.Series(values.to_numpy(), index=pd.Index(years.to_numpy(), name='year'))
