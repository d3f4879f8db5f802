# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Observation and forcing inputs."""

from .forcing import AuxiliaryForcingSeries, load_forcing_series
from .observations import ObservationSeries, ObservationStore, load_observation_series
from .series import YearSeries, read_year_value_csv

__all__ = [
    'YearSeries',
    'ObservationSeries',
    'ObservationStore',
    'AuxiliaryForcingSeries',
    'load_observation_series',
    'load_forcing_series',
    'read_year_value_csv',
]
