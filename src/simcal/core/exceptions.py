# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Custom exception hierarchy for SIMCAL.

This module defines a hierarchy of exceptions that provide clear, specific
error types for the different failure modes of a calibration run.
"""

import logging
from contextlib import contextmanager
from typing import Optional, Sequence, TypeVar


class SimcalError(Exception):
    """
    Base exception for all SIMCAL-specific errors.

    All custom exceptions in SIMCAL should inherit from this class.
    This allows catching all SIMCAL errors with a single except clause.
    """
    pass


class ConfigurationError(SimcalError):
    """
    Configuration-related errors.

    Raised when:
    - A parameter specification is missing or invalid
    - Parameter bounds violate lower <= initial <= upper
    - A parameter vector is incomplete or names undeclared parameters
    - Configuration file cannot be loaded or parsed
    """
    pass


class SimulationFailure(SimcalError):
    """
    Simulation core failures.

    Raised when the simulation adapter fails to apply a parameter, reset,
    run or return output. Carries the evaluation step and, where known,
    the parameter being applied.
    """

    def __init__(self, message: str, step: Optional[int] = None,
                 parameter: Optional[str] = None):
        self.step = step
        self.parameter = parameter
        details = []
        if step is not None:
            details.append(f"step {step}")
        if parameter is not None:
            details.append(f"parameter '{parameter}'")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class LoggingFailure(SimcalError):
    """
    Run log I/O failures.

    Raised when an evaluation record cannot be written to the run log.
    Downgraded to a warning unless strict run logging is enabled.
    """
    pass


class NumericDegeneracy(SimcalError):
    """
    Degenerate objective values.

    Raised when the normalized residual divides by a zero observation
    or the loss is not finite.
    """

    def __init__(self, message: str, step: Optional[int] = None,
                 years: Sequence[int] = ()):
        self.step = step
        self.years = tuple(years)
        if step is not None:
            message = f"{message} (step {step})"
        super().__init__(message)


class ObservationError(SimcalError):
    """
    Observation and forcing input failures.

    Raised when:
    - An observation or forcing file is missing or unreadable
    - Required columns are absent
    - A series is empty or has duplicate years
    """
    pass


class OptimizationError(SimcalError):
    """
    Optimization driver failures not attributable to the objective.

    Raised when:
    - The optimizer cannot be configured
    - The optimizer returns no usable point
    """
    pass


# =============================================================================
# Validation Helpers
# =============================================================================

T = TypeVar('T')


def require(condition: bool, message: str, error_type: type = None) -> None:
    """
    Validate a condition, raising an exception if it fails.

    Args:
        condition: The condition that must be True
        message: Error message if condition is False
        error_type: Exception type to raise (default: ConfigurationError)

    Example:
        >>> require(lower <= upper, "lower bound exceeds upper bound")
    """
    if error_type is None:
        error_type = ConfigurationError
    if not condition:
        raise error_type(message)


def require_not_none(value: Optional[T], name: str, error_type: type = None) -> T:
    """
    Validate that a value is not None, returning it if valid.

    Example:
        >>> adapter = require_not_none(self._adapter, "adapter")
    """
    if error_type is None:
        error_type = ConfigurationError
    if value is None:
        raise error_type(f"{name} must not be None")
    return value


@contextmanager
def simcal_error_handler(
    operation: str,
    logger: Optional[logging.Logger] = None,
    reraise: bool = True,
    error_type: type = SimcalError
):
    """
    Context manager for standardized error handling.

    SIMCAL errors are re-raised as-is; any other exception is converted to
    ``error_type`` with the original chained.

    Example:
        >>> with simcal_error_handler("observation loading", logger, error_type=ObservationError):
        ...     series = load_observation_series(path)
    """
    try:
        yield
    except SimcalError:
        if logger:
            logger.error(f"Error during {operation}", exc_info=True)
        if reraise:
            raise
    except Exception as e:
        if logger:
            logger.error(f"Error during {operation}: {e}", exc_info=True)
        if reraise:
            raise error_type(f"Failed during {operation}: {e}") from e


__all__ = [
    'SimcalError',
    'ConfigurationError',
    'SimulationFailure',
    'LoggingFailure',
    'NumericDegeneracy',
    'ObservationError',
    'OptimizationError',
    'require',
    'require_not_none',
    'simcal_error_handler',
]
