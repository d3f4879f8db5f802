# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Configuration layer: typed pydantic models loaded from YAML."""

from .factories import from_dict_factory, from_file_factory
from .models import (
    CalibrationConfig,
    ForcingConfig,
    LoggingConfig,
    ModelConfig,
    ObservationConfig,
    OptimizationConfig,
    ParameterConfig,
    PathsConfig,
    RunLogConfig,
    SeriesFileConfig,
    SimcalConfig,
)

__all__ = [
    'SimcalConfig',
    'CalibrationConfig',
    'ForcingConfig',
    'LoggingConfig',
    'ModelConfig',
    'ObservationConfig',
    'OptimizationConfig',
    'ParameterConfig',
    'PathsConfig',
    'RunLogConfig',
    'SeriesFileConfig',
    'from_dict_factory',
    'from_file_factory',
]
