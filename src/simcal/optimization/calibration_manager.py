# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Calibration Manager

Coordinates one calibration run end to end:

1. load observations, auxiliary forcing series and parameter declarations;
2. create the simulation adapter and scope it with ``managed_adapter``;
3. push unscaled forcings, reset the evaluation counter;
4. run the L-BFGS-B driver over the objective evaluator;
5. write the calibration summary after successful termination.

The adapter is shut down exactly once on every exit path, before any error
leaves :meth:`CalibrationManager.run_calibration`.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from simcal.core.config.models import SimcalConfig
from simcal.core.exceptions import ObservationError, simcal_error_handler
from simcal.core.mixins import TimingMixin
from simcal.data.forcing import AuxiliaryForcingSeries, load_forcing_series
from simcal.data.observations import ObservationStore
from simcal.reporting.summary_writer import SummaryWriter
from simcal.simulation import AdapterRegistry, managed_adapter

from .driver import CalibrationResult, OptimizationDriver
from .objective import EvaluationCounter, ObjectiveEvaluator
from .parameters import ParameterSet, ScalingApplication
from .run_log import CsvRunLog, RunLogger


class CalibrationManager(TimingMixin):
    """Runs a calibration described by a :class:`SimcalConfig`.

    Args:
        config: Validated configuration.
        logger: Logger instance.
        adapter: Optional pre-built adapter; otherwise one is created from
            ``config.model`` through the AdapterRegistry.
    """

    def __init__(self, config: SimcalConfig, logger: Optional[logging.Logger] = None,
                 adapter=None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._adapter = adapter

        self.experiment_dir = Path(config.experiment_dir)
        self.run_log_dir = self.experiment_dir / config.run_log.directory
        self.summary_writer = SummaryWriter(self.experiment_dir, self.logger)
        self.counter = EvaluationCounter()

        self.parameters: Optional[ParameterSet] = None
        self.observations: Optional[ObservationStore] = None
        self.forcings: Dict[str, AuxiliaryForcingSeries] = {}
        self.run_logger: Optional[RunLogger] = None

    @property
    def summary_path(self) -> Path:
        return self.summary_writer.summary_path

    @property
    def run_log_path(self) -> Path:
        """Directory holding the parameter and comparison streams."""
        return self.run_log_dir

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def load_inputs(self) -> None:
        """Load parameters, observations and forcings declared in the config."""
        with self.time_limit("loading calibration inputs"), \
                simcal_error_handler("loading calibration inputs", self.logger,
                                     error_type=ObservationError):
            self.parameters = ParameterSet.from_config(self.config.calibration.parameters)
            self.observations = ObservationStore.from_config(self.config.observations)
            self.forcings = {
                name: load_forcing_series(name, cfg.path, cfg.year_column, cfg.value_column)
                for name, cfg in self.config.forcings.items()
            }

        scaled = {
            spec.application.forcing_variable
            for spec in self.parameters
            if isinstance(spec.application, ScalingApplication)
        }
        overlap = sorted(scaled & set(self.forcings))
        if overlap:
            self.logger.warning(
                f"Forcings {overlap} are declared both as static inputs and as scaled "
                f"parameter series; the scaled series replaces the static one on every evaluation"
            )

        self.logger.info(
            f"Calibrating {len(self.parameters)} parameters against "
            f"'{self.config.calibration.target}' ({self.config.target_variable()})"
        )

    def create_adapter(self):
        if self._adapter is not None:
            return self._adapter
        return AdapterRegistry.create(
            self.config.model.name, self.config.model.settings, self.logger
        )

    def create_run_logger(self) -> RunLogger:
        run_log = CsvRunLog(self.run_log_dir, self.parameters.names)
        run_logger = RunLogger(run_log, strict=self.config.run_log.strict, logger=self.logger)
        if run_logger.has_records():
            self.logger.info(f"Appending to existing run log in {self.run_log_dir} (run {run_log.run_id})")
        else:
            self.logger.info(f"Starting new run log in {self.run_log_dir} (run {run_log.run_id})")
        return run_logger

    def _apply_static_forcings(self, adapter) -> None:
        for name, series in self.forcings.items():
            units = self.config.forcings[name].units
            adapter.set_time_series(name, series.years.tolist(), series.values.tolist(), units)
            self.logger.debug(f"Applied static forcing '{name}' ({len(series)} years)")

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run_calibration(self) -> CalibrationResult:
        """Run the full calibration and write the summary files."""
        if self.parameters is None:
            self.load_inputs()

        self.experiment_dir.mkdir(parents=True, exist_ok=True)
        self.run_logger = self.create_run_logger()
        self.counter.reset()
        target = self.observations[self.config.calibration.target]

        self.start_timing()
        with managed_adapter(self.create_adapter(), self.logger) as adapter:
            self._apply_static_forcings(adapter)
            evaluator = ObjectiveEvaluator(
                parameters=self.parameters,
                adapter=adapter,
                observations=target,
                target_variable=self.config.target_variable(),
                run_logger=self.run_logger,
                counter=self.counter,
                logger=self.logger,
            )
            driver = OptimizationDriver(self.config.optimization, self.logger)
            result = driver.optimize(
                self.parameters.initial_vector(), self.parameters.bounds(), evaluator
            )

        if self.run_logger.failure_count:
            self.logger.warning(
                f"{self.run_logger.failure_count} run log writes failed; "
                f"the run log in {self.run_log_dir} is incomplete"
            )

        self.summary_writer.write(self.parameters, result, extra={
            'experiment_id': self.config.paths.experiment_id,
            'run_id': self.run_logger.run_log.run_id,
            'target': self.config.calibration.target,
            'target_variable': self.config.target_variable(),
            'run_log_dir': str(self.run_log_dir),
        })
        self.logger.info(f"Calibration complete in {self.format_elapsed_time()}")
        return result
