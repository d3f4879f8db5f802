# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Core infrastructure: exceptions, constants, configuration, logging."""

from .exceptions import (
    ConfigurationError,
    LoggingFailure,
    NumericDegeneracy,
    ObservationError,
    OptimizationError,
    SimcalError,
    SimulationFailure,
)

__all__ = [
    'SimcalError',
    'ConfigurationError',
    'SimulationFailure',
    'LoggingFailure',
    'NumericDegeneracy',
    'ObservationError',
    'OptimizationError',
]
