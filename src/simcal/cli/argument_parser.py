# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Argument parser for the SIMCAL command line.

Commands:
    simcal calibrate [--config PATH] [--output-dir DIR] [--experiment-id ID]
                     [--max-iterations N] [--strict-logging] [--debug]
    simcal validate [--config PATH]
"""

import argparse
from typing import List, Optional

from simcal.simcal_version import __version__

DEFAULT_CONFIG_PATH = 'simcal_config.yaml'


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


class CLIParser:
    """
    Builds the ``simcal`` parser.

    Attributes:
        common_parser: Parent parser with global options (--config, --debug)
        parser: Main argument parser with all subcommands registered
    """

    def __init__(self):
        self.common_parser = self._create_common_parser()
        self.parser = self._create_parser()

    def _create_common_parser(self) -> argparse.ArgumentParser:
        """Create a parent parser with common arguments."""
        # SUPPRESS keeps subcommand defaults from overwriting global flags
        parser = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
        parser.add_argument('--config', type=str,
                            help=f'Path to configuration file (default: ./{DEFAULT_CONFIG_PATH})')
        parser.add_argument('--debug', action='store_true',
                            help='Enable debug output')
        return parser

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog='simcal',
            description='SIMCAL - calibrate simulation model parameters against observations',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            parents=[self.common_parser],
            epilog="""
Examples:
  simcal calibrate
  simcal calibrate --config my_config.yaml --max-iterations 50
  simcal calibrate --experiment-id run_2 --strict-logging
  simcal validate --config my_config.yaml
"""
        )
        parser.add_argument('--version', action='version',
                            version=f'SIMCAL {__version__}')

        subparsers = parser.add_subparsers(
            dest='command',
            required=True,
            help='Command',
            metavar='<command>'
        )
        self._register_calibrate_command(subparsers)
        self._register_validate_command(subparsers)
        return parser

    def _register_calibrate_command(self, subparsers) -> None:
        from .commands import CalibrationCommands

        calibrate_parser = subparsers.add_parser(
            'calibrate',
            help='Run a calibration',
            description='Run a bounded L-BFGS-B calibration described by a configuration file',
            parents=[self.common_parser]
        )
        calibrate_parser.add_argument('--output-dir', type=str, dest='output_dir',
                                      help='Override paths.output_dir')
        calibrate_parser.add_argument('--experiment-id', type=str, dest='experiment_id',
                                      help='Override paths.experiment_id')
        calibrate_parser.add_argument('--max-iterations', type=_positive_int, dest='max_iterations',
                                      help='Override optimization.max_iterations')
        calibrate_parser.add_argument('--strict-logging', action='store_true', dest='strict_logging',
                                      help='Abort the run when an evaluation record cannot be written')
        calibrate_parser.set_defaults(func=CalibrationCommands.calibrate)

    def _register_validate_command(self, subparsers) -> None:
        from .commands import CalibrationCommands

        validate_parser = subparsers.add_parser(
            'validate',
            help='Validate a configuration file',
            description='Load and validate a configuration file and its input series without calibrating',
            parents=[self.common_parser]
        )
        validate_parser.set_defaults(func=CalibrationCommands.validate)

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        return self.parser.parse_args(args)
