# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Calibration engine.

- ParameterSpec / ParameterSet: parameter declarations and bounds
- ParameterTransformLayer: applies parameter vectors to an adapter
- ObjectiveEvaluator: parameter vector -> normalized residual loss
- RunLog / RunLogger: append-only record of every evaluation
- OptimizationDriver: bounded L-BFGS-B search
- CalibrationManager: end-to-end orchestration from a SimcalConfig
"""

from .calibration_manager import CalibrationManager
from .driver import CalibrationResult, DriverState, OptimizationDriver
from .objective import (
    EvaluationCounter,
    EvaluationRecord,
    EvaluationStatus,
    ObjectiveEvaluator,
    normalized_sse,
)
from .parameters import (
    DirectApplication,
    ParameterKind,
    ParameterSet,
    ParameterSpec,
    ParameterVector,
    ScalingApplication,
)
from .run_log import CsvRunLog, InMemoryRunLog, RunLog, RunLogger
from .transformers import ParameterTransformLayer

__all__ = [
    'CalibrationManager',
    'CalibrationResult',
    'DriverState',
    'OptimizationDriver',
    'EvaluationCounter',
    'EvaluationRecord',
    'EvaluationStatus',
    'ObjectiveEvaluator',
    'normalized_sse',
    'DirectApplication',
    'ParameterKind',
    'ParameterSet',
    'ParameterSpec',
    'ParameterVector',
    'ScalingApplication',
    'CsvRunLog',
    'InMemoryRunLog',
    'RunLog',
    'RunLogger',
    'ParameterTransformLayer',
]
