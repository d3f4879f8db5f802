"""
Root conftest.py - fixtures shared across all tests.

Provides a small, self-consistent box-model calibration case: forcing files,
observations generated by the box model itself with known parameters, and a
writer for matching configuration files.
"""

from pathlib import Path
import logging
import sys

import pandas as pd
import pytest
import yaml

# Make the src/ layout importable without an installed package
SIMCAL_SRC_DIR = Path(__file__).parent.parent.resolve() / "src"
if str(SIMCAL_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SIMCAL_SRC_DIR))

from simcal.simulation import BoxModelAdapter  # noqa: E402

TRUE_PARAMETERS = {
    'airborne_fraction': 0.5,
    'uptake_timescale': 120.0,
}
TRUE_LUC_SCALAR = 1.2
START_YEAR = 1959
INITIAL_CO2 = 316.0
OBSERVED_YEARS = list(range(1960, 2001, 5))


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast, isolated tests")
    config.addinivalue_line("markers", "integration: end-to-end calibration runs")
    config.addinivalue_line("markers", "cli: command-line interface tests")
    config.addinivalue_line("markers", "quick: very fast tests")


def write_series_csv(path: Path, pairs, year_column='year', value_column='value') -> Path:
    """Write (year, value) pairs as a two-column CSV."""
    df = pd.DataFrame(list(pairs), columns=[year_column, value_column])
    df.to_csv(path, index=False)
    return path


def ffi_pairs():
    return [(year, 2.5 + 0.1 * (year - 1960)) for year in range(1960, 2001)]


def luc_pairs():
    return [(year, 1.0) for year in range(1960, 2001)]


def simulate_observations():
    """CO2 observations produced by the box model with TRUE_PARAMETERS."""
    adapter = BoxModelAdapter(start_year=START_YEAR, initial_co2=INITIAL_CO2)
    ffi = ffi_pairs()
    luc = luc_pairs()
    adapter.set_time_series('ffi_emissions', [y for y, _ in ffi], [v for _, v in ffi], 'GtC/yr')
    adapter.set_time_series('luc_emissions', [y for y, _ in luc],
                            [v * TRUE_LUC_SCALAR for _, v in luc], 'GtC/yr')
    for name, value in TRUE_PARAMETERS.items():
        adapter.set_parameter(name, value, '')
    adapter.run_to(OBSERVED_YEARS[-1])
    simulated = adapter.fetch('atmos_co2', OBSERVED_YEARS)
    adapter.shutdown()
    return list(zip(OBSERVED_YEARS, simulated.tolist()))


def base_config_dict():
    """Configuration mapping using paths relative to the case directory."""
    return {
        'model': {
            'name': 'box',
            'settings': {'start_year': START_YEAR, 'initial_co2': INITIAL_CO2},
        },
        'observations': {
            'co2': {'path': 'co2_observations.csv', 'variable': 'atmos_co2', 'units': 'ppmv CO2'},
        },
        'forcings': {
            'ffi_emissions': {'path': 'ffi_emissions.csv', 'units': 'GtC/yr'},
        },
        'calibration': {
            'target': 'co2',
            'parameters': [
                {'name': 'airborne_fraction', 'initial': 0.45, 'sd': 0.1,
                 'physical_lower': 0.0, 'physical_upper': 1.0, 'units': '1'},
                {'name': 'uptake_timescale', 'initial': 150.0, 'lower': 50.0,
                 'upper': 300.0, 'units': 'yr'},
                {'name': 'luc_scalar', 'kind': 'scaling', 'initial': 1.0, 'lower': 0.5,
                 'upper': 2.0, 'units': 'GtC/yr', 'forcing_variable': 'luc_emissions',
                 'series': {'path': 'luc_emissions.csv'}},
            ],
        },
        'optimization': {'max_iterations': 15, 'max_evaluations': 400},
        'logging': {'level': 'DEBUG', 'log_to_file': False},
        'paths': {'output_dir': 'output', 'experiment_id': 'test_run'},
    }


class BoxModelCase:
    """A calibration case directory with data files and a config writer."""

    def __init__(self, root: Path):
        self.root = root
        self.ffi_path = write_series_csv(root / 'ffi_emissions.csv', ffi_pairs())
        self.luc_path = write_series_csv(root / 'luc_emissions.csv', luc_pairs())
        self.observations = simulate_observations()
        self.observation_path = write_series_csv(root / 'co2_observations.csv', self.observations)

    def config_dict(self):
        return base_config_dict()

    def write_config(self, config=None, name='simcal_config.yaml') -> Path:
        path = self.root / name
        with open(path, 'w') as f:
            yaml.safe_dump(config or self.config_dict(), f, sort_keys=False)
        return path

    @property
    def experiment_dir(self) -> Path:
        return self.root / 'output' / 'test_run'


@pytest.fixture
def box_model_case(tmp_path):
    """Data files and config writer for a small box-model calibration."""
    return BoxModelCase(tmp_path)


@pytest.fixture
def write_series(tmp_path):
    """Write (year, value) pairs to a CSV in tmp_path; returns the path."""
    def _write(name, pairs, **kwargs):
        return write_series_csv(tmp_path / name, pairs, **kwargs)
    return _write


@pytest.fixture
def test_logger():
    """Create a test logger."""
    logger = logging.getLogger('test_simcal')
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture(autouse=True)
def _clear_simcal_env(monkeypatch):
    """Keep SIMCAL_* variables of the calling shell out of config loading."""
    for key in ('SIMCAL_OUTPUT_DIR', 'SIMCAL_EXPERIMENT_ID', 'SIMCAL_LOG_LEVEL'):
        monkeypatch.delenv(key, raising=False)
