"""
Fixtures for optimization/calibration unit tests.

Provides parameter sets, observations and run loggers for testing the
calibration engine without running expensive simulations.
"""

import pytest

from simcal.data import AuxiliaryForcingSeries, ObservationSeries
from simcal.optimization import (
    InMemoryRunLog,
    ParameterSet,
    ParameterSpec,
    RunLogger,
    ScalingApplication,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "optimization: Optimization/calibration tests")


# ============================================================================
# Parameter fixtures
# ============================================================================

@pytest.fixture
def luc_series():
    """Single-year land-use emissions series."""
    return AuxiliaryForcingSeries.from_pairs('luc_emissions', [(1850, 2.0)])


@pytest.fixture
def direct_parameters():
    """One DIRECT parameter."""
    return ParameterSet([
        ParameterSpec('airborne_fraction', 0.45, 0.0, 1.0, units='1'),
    ])


@pytest.fixture
def mixed_parameters(luc_series):
    """A DIRECT parameter followed by a SCALING one."""
    return ParameterSet([
        ParameterSpec('airborne_fraction', 0.45, 0.0, 1.0, units='1'),
        ParameterSpec('luc_scalar', 1.0, 0.5, 2.0, units='GtC/yr',
                      application=ScalingApplication('luc_emissions', luc_series)),
    ])


# ============================================================================
# Observation / run log fixtures
# ============================================================================

@pytest.fixture
def co2_observations():
    """CO2 observed at 370 and 372 ppm in 2000 and 2001."""
    return ObservationSeries.from_pairs('co2', [(2000, 370.0), (2001, 372.0)])


@pytest.fixture
def memory_run_logger(direct_parameters):
    """Best-effort run logger over an in-memory run log."""
    return RunLogger(InMemoryRunLog(direct_parameters.names, run_id='test'))
