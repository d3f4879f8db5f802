# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Constants and default values for SIMCAL.

Centralizes hardcoded values so optimizer settings, file names and
physical constants of the reference model have a single source of truth.
"""


class CalibrationDefaults:
    """Default values for the calibration driver and run log."""

    OPTIMIZER_METHOD = 'L-BFGS-B'
    """scipy.optimize.minimize method used by the driver."""

    MAX_ITERATIONS = 200
    """Maximum quasi-Newton iterations."""

    MAX_EVALUATIONS = 2000
    """Maximum objective evaluations, finite-difference probes included."""

    FTOL = 1e-9
    """Relative reduction of the loss below which the search stops."""

    GTOL = 1e-6
    """Projected gradient tolerance."""

    EPS = 1e-4
    """Absolute finite-difference step for gradient approximation."""

    HISTORY_SIZE = 10
    """Number of correction pairs kept by the limited-memory Hessian."""

    PROGRESS_EVERY = 10
    """Log a progress line every N evaluations."""


class OutputFiles:
    """File names written below ``<output_dir>/<experiment_id>``."""

    RUN_LOG_DIR = 'run_log'
    PARAMETER_LOG = 'parameter_log.csv'
    COMPARISON_LOG = 'comparison_log.csv'
    SUMMARY = 'calibration_summary.csv'
    RESULT = 'calibration_result.yaml'
    LOG_DIR = 'logs'


class CarbonConstants:
    """Physical constants used by the reference box model."""

    GTC_PER_PPM = 2.124
    """Gigatonnes of carbon per ppm of atmospheric CO2."""

    CO2_FORCING_COEFFICIENT = 5.35
    """W/m² per natural log of the CO2 concentration ratio (Myhre et al., 1998)."""

    FORCING_2XCO2 = CO2_FORCING_COEFFICIENT * 0.6931471805599453
    """Radiative forcing of a CO2 doubling (W/m²)."""
