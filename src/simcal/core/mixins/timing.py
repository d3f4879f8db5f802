# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Timing mixin for SIMCAL modules.

Provides wall-clock tracking for long-running calibrations.
"""

import logging
import time
from contextlib import contextmanager
from typing import ContextManager, Optional


class TimingMixin:
    """
    Mixin providing timing utilities.

    Requires self.logger to be available.
    """

    _timing_start: Optional[float] = None

    @contextmanager
    def time_limit(self, task_name: str) -> ContextManager[None]:
        """
        Context manager to time a task and log the duration.
        """
        start_time = time.time()
        logger = getattr(self, 'logger', logging.getLogger(__name__))
        logger.debug(f"Starting task: {task_name}")
        try:
            yield
        finally:
            duration = time.time() - start_time
            logger.info(f"Completed task: {task_name} in {duration:.2f} seconds")

    def start_timing(self) -> None:
        """Mark the start of a timed run."""
        self._timing_start = time.perf_counter()

    def elapsed_seconds(self) -> float:
        """Seconds since start_timing(), 0.0 if timing was never started."""
        if self._timing_start is None:
            return 0.0
        return time.perf_counter() - self._timing_start

    def format_elapsed_time(self) -> str:
        """Elapsed time as H:MM:SS."""
        total = int(self.elapsed_seconds())
        hours, remainder = divmod(total, 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours}:{minutes:02d}:{seconds:02d}"
