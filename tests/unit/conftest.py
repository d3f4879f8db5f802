"""
Unit test fixtures and configuration.

Fixtures specific to unit tests (fast, isolated tests).
"""

from unittest.mock import MagicMock

import pandas as pd
import pytest

from simcal.simulation import SimulationAdapter


# ============================================================================
# Common Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_logger():
    """Create a mock logger for unit tests."""
    return MagicMock()


class RecordingAdapter(SimulationAdapter):
    """In-memory adapter that records calls and returns a configurable output.

    ``fetch`` returns ``outputs[variable]`` for the requested years; an output
    may be a callable taking the adapter, so it can depend on parameters.
    """

    def __init__(self, outputs=None, logger=None):
        super().__init__(logger)
        self.outputs = outputs or {}
        self.parameters = {}
        self.series = {}
        self.calls = []
        self.shutdown_calls = 0

    def _do_set_parameter(self, name, value, units):
        self.calls.append(('set_parameter', name, value, units))
        self.parameters[name] = value

    def _do_set_time_series(self, name, years, values, units):
        self.calls.append(('set_time_series', name, years, values, units))
        self.series[name] = dict(zip(years, values))

    def _do_reset(self):
        self.calls.append(('reset',))

    def _do_run_to(self, end_year):
        self.calls.append(('run_to', end_year))

    def _do_fetch(self, variable, years):
        self.calls.append(('fetch', variable, years))
        data = self.outputs[variable]
        if callable(data):
            data = data(self)
        return pd.Series([data[y] for y in years], index=years, dtype=float)

    def _do_shutdown(self):
        self.shutdown_calls += 1


@pytest.fixture
def recording_adapter():
    """Adapter returning CO2 370.0 and 371.0 for years 2000 and 2001."""
    return RecordingAdapter(outputs={'atmos_co2': {2000: 370.0, 2001: 371.0}})


@pytest.fixture
def adapter_factory():
    """The RecordingAdapter class, for tests that need custom outputs."""
    return RecordingAdapter
