# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Optimization configuration model.

Settings of the bounded quasi-Newton driver (scipy L-BFGS-B).
"""

from pydantic import BaseModel, Field

from simcal.core.constants import CalibrationDefaults

from .base import FROZEN_CONFIG


class OptimizationConfig(BaseModel):
    """L-BFGS-B driver settings"""
    model_config = FROZEN_CONFIG

    max_iterations: int = Field(default=CalibrationDefaults.MAX_ITERATIONS, alias='MAX_ITERATIONS', ge=1)
    max_evaluations: int = Field(default=CalibrationDefaults.MAX_EVALUATIONS, alias='MAX_EVALUATIONS', ge=1)
    ftol: float = Field(default=CalibrationDefaults.FTOL, alias='FTOL', gt=0)
    gtol: float = Field(default=CalibrationDefaults.GTOL, alias='GTOL', gt=0)
    eps: float = Field(default=CalibrationDefaults.EPS, alias='FINITE_DIFFERENCE_STEP', gt=0)
    history_size: int = Field(default=CalibrationDefaults.HISTORY_SIZE, alias='HISTORY_SIZE', ge=1, le=100)
    progress_every: int = Field(default=CalibrationDefaults.PROGRESS_EVERY, alias='PROGRESS_EVERY', ge=1)
