# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Bounded quasi-Newton optimization driver.

Minimizes an objective ``ParameterVector -> float`` under per-parameter box
bounds with scipy's L-BFGS-B. The objective exposes no analytic gradient, so
scipy approximates it by finite differences (step ``eps``), costing roughly
``n_params + 1`` evaluations per gradient.

Driver states::

    INITIALIZED -> ITERATING -> CONVERGED       (gradient / loss tolerance met)
                             -> MAX_ITERATIONS  (iteration or evaluation cap,
                                                 or abnormal line-search stop;
                                                 best point is returned)
                             -> FAILED          (objective raised; re-raised)

The driver does not own the simulation adapter. Shutting it down on every
exit path is the caller's job (see ``simcal.simulation.managed_adapter``).

References:
    Byrd, R.H., Lu, P., Nocedal, J. and Zhu, C. (1995). A limited memory
    algorithm for bound constrained optimization. SIAM Journal on Scientific
    Computing, 16(5), 1190-1208.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import numpy as np
from scipy.optimize import minimize

from simcal.core.config.models import OptimizationConfig
from simcal.core.constants import CalibrationDefaults
from simcal.core.exceptions import OptimizationError, require
from simcal.core.mixins import TimingMixin

from .parameters import ParameterVector

Objective = Callable[[Mapping[str, float]], float]


class DriverState(Enum):
    INITIALIZED = 'initialized'
    ITERATING = 'iterating'
    CONVERGED = 'converged'
    MAX_ITERATIONS = 'max_iterations'
    FAILED = 'failed'


@dataclass
class CalibrationResult:
    """Outcome of one driver run."""

    best_parameters: ParameterVector
    final_loss: float
    converged: bool
    evaluation_count: int
    wall_clock_seconds: float
    state: DriverState
    message: str = ''
    iterations: int = 0
    trajectory: List[ParameterVector] = field(default_factory=list)
    initial_parameters: ParameterVector = field(default_factory=dict)

    @property
    def wall_clock_duration(self) -> timedelta:
        return timedelta(seconds=self.wall_clock_seconds)

    def to_dict(self) -> Dict:
        return {
            'state': self.state.value,
            'converged': self.converged,
            'message': self.message,
            'final_loss': self.final_loss,
            'evaluation_count': self.evaluation_count,
            'iterations': self.iterations,
            'wall_clock_seconds': round(self.wall_clock_seconds, 3),
            'initial_parameters': dict(self.initial_parameters),
            'best_parameters': dict(self.best_parameters),
        }


class OptimizationDriver(TimingMixin):
    """L-BFGS-B search over an objective with box constraints.

    Args:
        config: Driver settings; defaults apply when omitted.
        logger: Logger instance.
    """

    ALGORITHM_NAME = 'LBFGS-B'

    def __init__(self, config: Optional[OptimizationConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or OptimizationConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.state = DriverState.INITIALIZED

        self._names: List[str] = []
        self._lower = np.empty(0)
        self._upper = np.empty(0)
        self._evaluations = 0
        self._best_loss = math.inf
        self._best_x: Optional[np.ndarray] = None
        self._trajectory: List[ParameterVector] = []

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(initial: Mapping[str, float],
                  bounds: Mapping[str, Tuple[float, float]]) -> None:
        require(bool(initial), "Initial parameter vector is empty")

        unbounded = [n for n in initial if n not in bounds]
        require(not unbounded, f"No bounds declared for parameters: {unbounded}")
        extra = sorted(set(bounds) - set(initial))
        require(not extra, f"Bounds declared for unknown parameters: {extra}")

        for name, value in initial.items():
            lower, upper = bounds[name]
            require(math.isfinite(lower) and math.isfinite(upper),
                    f"Parameter '{name}': bounds must be finite, got ({lower}, {upper})")
            require(lower <= upper,
                    f"Parameter '{name}': lower bound {lower} exceeds upper bound {upper}")
            require(lower <= value <= upper,
                    f"Parameter '{name}': initial value {value} outside bounds [{lower}, {upper}]")

    # ------------------------------------------------------------------
    # Objective wrapper
    # ------------------------------------------------------------------

    def _to_vector(self, x: np.ndarray) -> ParameterVector:
        return {name: float(v) for name, v in zip(self._names, x)}

    def _clip(self, x: np.ndarray) -> np.ndarray:
        return np.clip(np.asarray(x, dtype=np.float64), self._lower, self._upper)

    def _wrap(self, objective: Objective) -> Callable[[np.ndarray], float]:
        def fun(x: np.ndarray) -> float:
            candidate = self._clip(x)
            loss = float(objective(self._to_vector(candidate)))
            self._evaluations += 1

            if loss < self._best_loss:
                self._best_loss = loss
                self._best_x = candidate.copy()

            if self._evaluations % self.config.progress_every == 0:
                self._log_progress(loss)
            return loss
        return fun

    def _callback(self, xk: np.ndarray) -> None:
        self._trajectory.append(self._to_vector(self._clip(xk)))

    def _log_progress(self, loss: float) -> None:
        self.logger.info(
            f"{self.ALGORITHM_NAME} eval {self._evaluations} | iter {len(self._trajectory)}"
            f"/{self.config.max_iterations} | Loss: {loss:.6g} | Best: {self._best_loss:.6g} "
            f"| Elapsed: {self.format_elapsed_time()}"
        )

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    def optimize(
        self,
        initial: Mapping[str, float],
        bounds: Mapping[str, Tuple[float, float]],
        objective: Objective,
    ) -> CalibrationResult:
        """Minimize ``objective`` from ``initial`` inside ``bounds``.

        Args:
            initial: Starting vector; its key order fixes the parameter order.
            bounds: ``name -> (lower, upper)`` for every name in ``initial``.
            objective: Callable returning the scalar loss of a full vector.

        Returns:
            CalibrationResult with the lowest-loss point seen.

        Raises:
            ConfigurationError: invalid bounds or initial vector.
            Any exception raised by ``objective`` (state becomes FAILED).
        """
        self._validate(initial, bounds)

        self._names = list(initial)
        self._lower = np.array([bounds[n][0] for n in self._names], dtype=np.float64)
        self._upper = np.array([bounds[n][1] for n in self._names], dtype=np.float64)
        self._evaluations = 0
        self._best_loss = math.inf
        self._best_x = None
        self._trajectory = []

        x0 = np.array([initial[n] for n in self._names], dtype=np.float64)
        options = {
            'maxiter': self.config.max_iterations,
            'maxfun': self.config.max_evaluations,
            'ftol': self.config.ftol,
            'gtol': self.config.gtol,
            'eps': self.config.eps,
            'maxcor': self.config.history_size,
        }

        self.logger.info(
            f"Starting {self.ALGORITHM_NAME} calibration of {len(self._names)} parameters: "
            f"{', '.join(self._names)}"
        )
        self.logger.info(
            f"  Max iterations: {options['maxiter']}, max evaluations: {options['maxfun']}, "
            f"ftol: {options['ftol']}, gtol: {options['gtol']}, eps: {options['eps']}"
        )

        self.start_timing()
        self.state = DriverState.ITERATING
        try:
            res = minimize(
                self._wrap(objective),
                x0=x0,
                method=CalibrationDefaults.OPTIMIZER_METHOD,
                bounds=list(zip(self._lower, self._upper)),
                callback=self._callback,
                options=options,
            )
        except Exception as e:
            self.state = DriverState.FAILED
            self.logger.error(
                f"{self.ALGORITHM_NAME} failed after {self._evaluations} evaluations "
                f"({self.format_elapsed_time()}): {e}"
            )
            raise

        elapsed = self.elapsed_seconds()

        if self._best_x is None:
            self.state = DriverState.FAILED
            raise OptimizationError(f"{self.ALGORITHM_NAME} finished without a finite evaluation: {res.message}")

        converged = bool(res.success) and int(res.status) == 0
        self.state = DriverState.CONVERGED if converged else DriverState.MAX_ITERATIONS
        message = str(res.message)

        result = CalibrationResult(
            best_parameters=self._to_vector(self._best_x),
            final_loss=self._best_loss,
            converged=converged,
            evaluation_count=self._evaluations,
            wall_clock_seconds=elapsed,
            state=self.state,
            message=message,
            iterations=int(getattr(res, 'nit', len(self._trajectory))),
            trajectory=list(self._trajectory),
            initial_parameters=dict(initial),
        )
        self._log_summary(result)
        return result

    def _log_summary(self, result: CalibrationResult) -> None:
        self.logger.info("=" * 60)
        self.logger.info(f"{self.ALGORITHM_NAME} finished: {result.state.value} ({result.message})")
        self.logger.info(
            f"  Best loss: {result.final_loss:.6g} | Evaluations: {result.evaluation_count} "
            f"| Iterations: {result.iterations} | Elapsed: {self.format_elapsed_time()}"
        )
        for name, value in result.best_parameters.items():
            self.logger.info(f"  {name}: {result.initial_parameters[name]:.6g} -> {value:.6g}")
        self.logger.info("=" * 60)
