# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Logging setup for SIMCAL runs.

Configures the ``simcal`` logger with a console handler and, optionally, a
per-run log file under ``<output_dir>/<experiment_id>/logs``.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from simcal.core.constants import OutputFiles

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s'
CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
DATE_FORMAT = '%H:%M:%S'


class LoggingManager:
    """Owns the handlers attached to the ``simcal`` logger for one run."""

    LOGGER_NAME = 'simcal'

    def __init__(
        self,
        level: str = 'INFO',
        experiment_dir: Optional[Path] = None,
        log_to_file: bool = True,
        debug_mode: bool = False,
    ):
        self.level = 'DEBUG' if debug_mode else level.upper()
        self.experiment_dir = Path(experiment_dir) if experiment_dir else None
        self.log_file: Optional[Path] = None

        self.logger = logging.getLogger(self.LOGGER_NAME)
        self._previous_state = (self.logger.level, self.logger.propagate)
        self.logger.setLevel(self.level)
        self.logger.propagate = False
        self._handlers = []

        self._add_console_handler()
        if log_to_file and self.experiment_dir is not None:
            self._add_file_handler()

    @classmethod
    def from_config(cls, config, debug_mode: bool = False) -> 'LoggingManager':
        """Build from a SimcalConfig."""
        return cls(
            level=config.logging.level,
            experiment_dir=config.experiment_dir,
            log_to_file=config.logging.log_to_file,
            debug_mode=debug_mode,
        )

    def _add_console_handler(self) -> None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        self.logger.addHandler(handler)
        self._handlers.append(handler)

    def _add_file_handler(self) -> None:
        log_dir = self.experiment_dir / OutputFiles.LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        self.log_file = log_dir / f"simcal_{self.experiment_dir.name}_{timestamp}.log"

        handler = logging.FileHandler(self.log_file)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        self.logger.addHandler(handler)
        self._handlers.append(handler)

    def close(self) -> None:
        """Detach and close the handlers added by this manager, restoring the logger."""
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self._handlers = []
        level, propagate = self._previous_state
        self.logger.setLevel(level)
        self.logger.propagate = propagate
