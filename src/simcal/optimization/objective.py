# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Objective evaluator.

Turns a parameter vector into a scalar loss by driving the simulation
adapter through apply -> reset -> run -> fetch and comparing the fetched
series with the observed one:

    loss = sum over observed years of (observed - simulated)^2 / observed

Each residual is normalized by the observed value itself, so large-magnitude
series do not dominate through scale alone. A zero observation makes the
term undefined (inf or nan under float64); such evaluations are logged and
raised as :class:`NumericDegeneracy`, never masked.

Every call consumes exactly one step of the evaluation counter, whether it
succeeds or fails, and hands exactly one :class:`EvaluationRecord` to the
run logger before returning or raising.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from simcal.core.exceptions import (
    ConfigurationError,
    NumericDegeneracy,
    SimcalError,
    SimulationFailure,
)
from simcal.data.observations import ObservationSeries

from .parameters import ParameterSet, ParameterVector
from .transformers import ParameterTransformLayer


class EvaluationStatus:
    OK = 'ok'
    SIMULATION_FAILED = 'simulation_failed'
    CONFIGURATION_ERROR = 'configuration_error'
    NUMERIC_DEGENERACY = 'numeric_degeneracy'


def normalized_sse(observed: Sequence[float], simulated: Sequence[float]) -> float:
    """Sum of squared residuals, each divided by its observed value.

    Division by a zero observation follows float64 semantics (inf or nan)
    and is left to the caller to detect.
    """
    observed = np.asarray(observed, dtype=np.float64)
    simulated = np.asarray(simulated, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.sum((observed - simulated) ** 2 / observed))


@dataclass(frozen=True)
class EvaluationRecord:
    """Immutable snapshot of one objective evaluation."""

    step: int
    parameters: Mapping[str, float]
    loss: float
    comparison_series: Tuple[Tuple[int, float], ...]
    variable: str
    status: str = EvaluationStatus.OK
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        object.__setattr__(self, 'parameters', MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, 'comparison_series', tuple(
            (int(y), float(v)) for y, v in self.comparison_series
        ))

    @property
    def succeeded(self) -> bool:
        return self.status == EvaluationStatus.OK


class EvaluationCounter:
    """Monotonic, 1-based evaluation step counter for one calibration run."""

    def __init__(self):
        self._value = 0

    @property
    def value(self) -> int:
        """Number of steps issued so far."""
        return self._value

    def increment(self) -> int:
        self._value += 1
        return self._value

    def reset(self) -> None:
        self._value = 0


class ObjectiveEvaluator:
    """Scalar objective ``ParameterVector -> float`` over a simulation adapter.

    The adapter, counter and run logger are explicit dependencies; the
    evaluator holds no other mutable state between calls.

    Args:
        parameters: Declared parameters (application order and validation).
        adapter: Simulation adapter owned by the current calibration run.
        observations: Observed series for the calibration target.
        target_variable: Simulated variable compared with ``observations``.
        run_logger: Receives one EvaluationRecord per call.
        counter: Evaluation counter; a fresh one is created when omitted.
        logger: Logger instance.
    """

    def __init__(
        self,
        parameters: ParameterSet,
        adapter,
        observations: ObservationSeries,
        target_variable: str,
        run_logger,
        counter: Optional[EvaluationCounter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.parameters = parameters
        self.adapter = adapter
        self.observations = observations
        self.target_variable = target_variable
        self.run_logger = run_logger
        self.counter = counter or EvaluationCounter()
        self.logger = logger or logging.getLogger(__name__)
        self.transform_layer = ParameterTransformLayer(parameters, self.logger)

    @property
    def evaluation_count(self) -> int:
        return self.counter.value

    def __call__(self, vector: Mapping[str, float]) -> float:
        return self.evaluate(vector)

    def evaluate_array(self, x: Sequence[float]) -> float:
        """Evaluate a value array ordered like ``parameters``."""
        return self.evaluate(self.parameters.from_array(x))

    def evaluate(self, vector: Mapping[str, float]) -> float:
        """Run one simulation for ``vector`` and return its loss.

        Raises:
            ConfigurationError: incomplete vector or rejected configuration.
            SimulationFailure: the adapter failed to apply, reset, run or fetch.
            NumericDegeneracy: zero observation or non-finite loss.
        """
        step = self.counter.increment()
        snapshot: ParameterVector = dict(vector)

        try:
            simulated = self._simulate(snapshot, step)
        except ConfigurationError:
            self._record_failure(step, snapshot, EvaluationStatus.CONFIGURATION_ERROR)
            raise
        except SimulationFailure as e:
            if e.step is None:
                e.step = step
            self._record_failure(step, snapshot, EvaluationStatus.SIMULATION_FAILED)
            raise

        observed = self.observations.values
        loss = normalized_sse(observed, simulated)
        comparison = tuple(zip(self.observations.years.tolist(), simulated.tolist()))

        zero_years = self.observations.zero_years()
        if zero_years or not math.isfinite(loss):
            self._record(EvaluationRecord(
                step, snapshot, loss, comparison, self.target_variable,
                EvaluationStatus.NUMERIC_DEGENERACY,
            ))
            if zero_years:
                message = f"Observed '{self.observations.name}' is zero in years {zero_years}"
            else:
                message = f"Loss is not finite ({loss})"
            raise NumericDegeneracy(message, step=step, years=zero_years)

        self._record(EvaluationRecord(step, snapshot, loss, comparison, self.target_variable))
        self.logger.debug(f"Evaluation {step}: loss={loss:.6g} params={snapshot}")
        return loss

    def _simulate(self, vector: ParameterVector, step: int) -> np.ndarray:
        self.transform_layer.apply(vector, self.adapter, step=step)

        years = self.observations.years.tolist()
        try:
            self.adapter.reset()
            self.adapter.run_to(self.observations.last_year)
            fetched = self.adapter.fetch(self.target_variable, years)
        except SimcalError:
            raise
        except Exception as e:
            raise SimulationFailure(f"Simulation run failed: {e}", step=step) from e

        return self._align(fetched, years, step)

    def _align(self, fetched, years, step: int) -> np.ndarray:
        """Order fetched values like the observed years, checking coverage."""
        if isinstance(fetched, pd.Series):
            aligned = fetched.reindex(years)
            missing = [y for y, v in zip(years, aligned.to_numpy()) if pd.isna(v)]
            if missing:
                raise SimulationFailure(
                    f"Simulated '{self.target_variable}' is missing observed years {missing}",
                    step=step,
                )
            return aligned.to_numpy(dtype=np.float64)

        values = np.asarray(fetched, dtype=np.float64)
        if values.shape != (len(years),):
            raise SimulationFailure(
                f"Simulated '{self.target_variable}' has shape {values.shape}, "
                f"expected ({len(years)},)",
                step=step,
            )
        return values

    def _record_failure(self, step: int, vector: ParameterVector, status: str) -> None:
        self._record(EvaluationRecord(step, vector, float('nan'), (), self.target_variable, status))

    def _record(self, record: EvaluationRecord) -> None:
        self.run_logger.record(record)
