# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Command handlers for the SIMCAL CLI.

Each handler takes the parsed namespace and returns an exit code.
"""

import functools
from argparse import Namespace
from typing import Any, ClassVar, Dict, Optional

from simcal.core.exceptions import (
    ConfigurationError,
    ObservationError,
    OptimizationError,
    SimcalError,
    SimulationFailure,
)

from .argument_parser import DEFAULT_CONFIG_PATH
from .console import Console, console as global_console
from .exit_codes import ExitCode

_EXIT_CODES = (
    (ConfigurationError, ExitCode.CONFIG_ERROR),
    (ObservationError, ExitCode.DATA_ERROR),
    (SimulationFailure, ExitCode.SIMULATION_ERROR),
    (OptimizationError, ExitCode.OPTIMIZATION_ERROR),
)


def exit_code_for(error: SimcalError) -> ExitCode:
    for error_type, code in _EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return ExitCode.GENERAL_ERROR


def cli_exception_handler(func):
    """Turn SIMCAL errors raised by a handler into an error message and exit code."""
    @functools.wraps(func)
    def wrapper(args: Namespace) -> int:
        try:
            return func(args)
        except SimcalError as e:
            BaseCommand._console.error(str(e))
            return exit_code_for(e)
    return wrapper


class BaseCommand:
    """Shared helpers for command handlers."""

    _console: ClassVar[Console] = global_console

    @classmethod
    def set_console(cls, console: Console) -> None:
        """Set the console instance for all commands (useful in tests)."""
        cls._console = console

    @staticmethod
    def get_config_path(args: Namespace) -> str:
        return getattr(args, 'config', None) or DEFAULT_CONFIG_PATH

    @staticmethod
    def build_overrides(args: Namespace) -> Dict[str, Any]:
        """Dotted-key config overrides from command-line flags."""
        overrides: Dict[str, Any] = {
            'paths.output_dir': getattr(args, 'output_dir', None),
            'paths.experiment_id': getattr(args, 'experiment_id', None),
            'optimization.max_iterations': getattr(args, 'max_iterations', None),
        }
        if getattr(args, 'strict_logging', False):
            overrides['run_log.strict'] = True
        return {key: value for key, value in overrides.items() if value is not None}

    @staticmethod
    def load_config(args: Namespace, overrides: Optional[Dict[str, Any]] = None):
        from simcal.core.config import SimcalConfig
        return SimcalConfig.from_file(BaseCommand.get_config_path(args), overrides=overrides)


class CalibrationCommands(BaseCommand):
    """Handlers for ``calibrate`` and ``validate``."""

    @staticmethod
    @cli_exception_handler
    def calibrate(args: Namespace) -> int:
        """
        Execute: simcal calibrate

        Returns:
            Exit code (0 when the driver terminated normally, converged or not)
        """
        from simcal.core.logging_manager import LoggingManager
        from simcal.optimization import CalibrationManager

        config = BaseCommand.load_config(args, BaseCommand.build_overrides(args))
        logging_manager = LoggingManager.from_config(config, debug_mode=getattr(args, 'debug', False))
        try:
            manager = CalibrationManager(config, logging_manager.logger)
            result = manager.run_calibration()
        finally:
            logging_manager.close()

        console = BaseCommand._console
        console.rule('Calibration result')
        console.table(
            ['parameter', 'initial', 'calibrated'],
            [
                (name, f"{result.initial_parameters[name]:.6g}", f"{value:.6g}")
                for name, value in result.best_parameters.items()
            ],
        )
        console.info(
            f"State: {result.state.value} | Loss: {result.final_loss:.6g} | "
            f"Evaluations: {result.evaluation_count} | Elapsed: {result.wall_clock_duration}"
        )
        if result.converged:
            console.success(f"Converged. Summary written to {manager.summary_path}")
        else:
            console.warning(
                f"Stopped before convergence ({result.message}). "
                f"Best point written to {manager.summary_path}"
            )
        return ExitCode.SUCCESS

    @staticmethod
    @cli_exception_handler
    def validate(args: Namespace) -> int:
        """
        Execute: simcal validate

        Loads the configuration and every input series it references.
        """
        from simcal.optimization import CalibrationManager

        config = BaseCommand.load_config(args)
        manager = CalibrationManager(config)
        manager.load_inputs()

        console = BaseCommand._console
        console.success(f"Configuration is valid: {BaseCommand.get_config_path(args)}")
        console.info(f"  Model: {config.model.name}")
        console.info(f"  Target: {config.calibration.target} ({config.target_variable()})")
        console.info(f"  Parameters: {', '.join(manager.parameters.names)}")
        console.info(f"  Output: {config.experiment_dir}")
        return ExitCode.SUCCESS
