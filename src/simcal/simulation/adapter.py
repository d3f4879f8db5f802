# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Simulation Core Adapter interface.

The adapter is the calibration engine's only view of the simulation model.
It is stateful: parameters and forcing series persist across ``reset()`` and
``run_to()`` until they are overwritten. One adapter instance belongs to one
calibration run and must never be driven by two evaluations at once.

Use :func:`managed_adapter` to guarantee ``shutdown()`` on every exit path::

    with managed_adapter(BoxModelAdapter(), logger) as adapter:
        driver.optimize(initial, bounds, evaluator)
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import pandas as pd


class SimulationAdapter(ABC):
    """Abstract simulation core.

    Subclasses implement the ``_do_*`` hooks; the public methods add the
    shutdown guard shared by every adapter.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._shut_down = False

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def _ensure_open(self) -> None:
        if self._shut_down:
            raise RuntimeError(f"{self.__class__.__name__} has been shut down")

    def set_parameter(self, name: str, value: float, units: str) -> None:
        """Set a scalar model parameter."""
        self._ensure_open()
        self._do_set_parameter(name, float(value), units)

    def set_time_series(self, name: str, years: Sequence[int], values: Sequence[float],
                        units: str) -> None:
        """Replace a forcing input series."""
        self._ensure_open()
        self._do_set_time_series(name, list(years), list(values), units)

    def reset(self) -> None:
        """Return the model state to its initial conditions, keeping parameters."""
        self._ensure_open()
        self._do_reset()

    def run_to(self, end_year: int) -> None:
        """Advance the model to ``end_year`` inclusive."""
        self._ensure_open()
        self._do_run_to(int(end_year))

    def fetch(self, variable: str, years: Sequence[int]) -> pd.Series:
        """Simulated values of ``variable`` for exactly ``years``, indexed by year."""
        self._ensure_open()
        return self._do_fetch(variable, list(years))

    def shutdown(self) -> None:
        """Release simulator resources. Idempotent."""
        if self._shut_down:
            return
        try:
            self._do_shutdown()
        finally:
            self._shut_down = True

    @abstractmethod
    def _do_set_parameter(self, name: str, value: float, units: str) -> None:
        pass

    @abstractmethod
    def _do_set_time_series(self, name: str, years: list, values: list, units: str) -> None:
        pass

    @abstractmethod
    def _do_reset(self) -> None:
        pass

    @abstractmethod
    def _do_run_to(self, end_year: int) -> None:
        pass

    @abstractmethod
    def _do_fetch(self, variable: str, years: list) -> pd.Series:
        pass

    def _do_shutdown(self) -> None:
        pass


@contextmanager
def managed_adapter(
    adapter: SimulationAdapter,
    logger: Optional[logging.Logger] = None,
) -> Iterator[SimulationAdapter]:
    """Scope an adapter to a block, shutting it down exactly once on exit.

    Errors raised inside the block propagate after shutdown. A failure of
    ``shutdown()`` itself is logged and does not replace the original error.
    """
    logger = logger or logging.getLogger(__name__)
    try:
        yield adapter
    except BaseException:
        try:
            adapter.shutdown()
        except Exception as shutdown_error:
            logger.error(f"Adapter shutdown failed after error: {shutdown_error}")
        raise
    else:
        adapter.shutdown()
        logger.debug(f"{adapter.__class__.__name__} shut down")
