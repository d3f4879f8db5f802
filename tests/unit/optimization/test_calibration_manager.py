"""Unit tests for CalibrationManager orchestration."""

from unittest.mock import MagicMock

import pandas as pd
import pytest
import yaml

from simcal.core.config import SimcalConfig
from simcal.core.exceptions import ConfigurationError, ObservationError, SimulationFailure
from simcal.optimization import CalibrationManager, DriverState
from simcal.simulation import BoxModelAdapter

pytestmark = [pytest.mark.unit, pytest.mark.optimization]


@pytest.fixture
def config(box_model_case):
    return SimcalConfig.from_file(box_model_case.write_config())


class CountingBoxModel(BoxModelAdapter):
    """Box model that counts shutdown calls and can fail on a given run."""

    def __init__(self, fail_on_run=None, **kwargs):
        super().__init__(**kwargs)
        self.shutdown_calls = 0
        self.fail_on_run = fail_on_run

    def _do_run_to(self, end_year):
        if self.fail_on_run is not None and self.run_count + 1 >= self.fail_on_run:
            raise SimulationFailure("forced failure")
        super()._do_run_to(end_year)

    def _do_shutdown(self):
        self.shutdown_calls += 1


def counting_adapter(**kwargs):
    return CountingBoxModel(start_year=1959, initial_co2=316.0, **kwargs)


class TestLoadInputs:

    def test_loads_parameters_observations_and_forcings(self, config):
        manager = CalibrationManager(config)
        manager.load_inputs()

        assert manager.parameters.names == ['airborne_fraction', 'uptake_timescale', 'luc_scalar']
        assert manager.parameters.get('airborne_fraction').bounds == pytest.approx((0.25, 0.65))
        assert 'co2' in manager.observations
        assert list(manager.forcings) == ['ffi_emissions']

    def test_missing_observation_file(self, box_model_case):
        box_model_case.observation_path.unlink()
        config = SimcalConfig.from_file(box_model_case.write_config())
        with pytest.raises(ObservationError, match="not found"):
            CalibrationManager(config).load_inputs()

    def test_overlapping_static_and_scaled_forcing_warns(self, box_model_case, mock_logger):
        raw = box_model_case.config_dict()
        raw['forcings']['luc_emissions'] = {'path': 'luc_emissions.csv', 'units': 'GtC/yr'}
        config = SimcalConfig.from_file(box_model_case.write_config(raw))

        CalibrationManager(config, mock_logger).load_inputs()
        warnings = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert any("luc_emissions" in w for w in warnings)


class TestRunCalibration:

    def test_end_to_end(self, config, box_model_case):
        adapter = counting_adapter()
        manager = CalibrationManager(config, adapter=adapter)
        result = manager.run_calibration()

        assert result.state in (DriverState.CONVERGED, DriverState.MAX_ITERATIONS)
        assert adapter.shutdown_calls == 1
        assert manager.counter.value == result.evaluation_count

        initial_loss = manager.run_logger.run_log.read_parameter_stream()['loss'].iloc[0]
        assert result.final_loss <= initial_loss

        params = manager.run_logger.run_log.read_parameter_stream()
        assert len(params) == result.evaluation_count
        assert params['step'].tolist() == list(range(1, result.evaluation_count + 1))

        summary = pd.read_csv(manager.summary_path)
        assert summary['name'].tolist() == manager.parameters.names
        assert list(summary.columns[:5]) == [
            'name', 'initial_value', 'lower_bound', 'upper_bound', 'final_value'
        ]
        for _, row in summary.iterrows():
            assert row['lower_bound'] <= row['final_value'] <= row['upper_bound']

        with open(manager.summary_writer.result_path) as f:
            payload = yaml.safe_load(f)
        assert payload['experiment_id'] == 'test_run'
        assert payload['evaluation_count'] == result.evaluation_count

    def test_adapter_shut_down_once_on_failure(self, config):
        adapter = counting_adapter(fail_on_run=3)
        manager = CalibrationManager(config, adapter=adapter)

        with pytest.raises(SimulationFailure, match="forced failure"):
            manager.run_calibration()

        assert adapter.shutdown_calls == 1
        assert not manager.summary_path.exists()
        params = manager.run_logger.run_log.read_parameter_stream()
        assert params['status'].iloc[-1] == 'simulation_failed'
        assert params['step'].iloc[-1] == 3

    def test_adapter_created_from_registry(self, config):
        manager = CalibrationManager(config)
        manager.load_inputs()
        adapter = manager.create_adapter()
        assert isinstance(adapter, BoxModelAdapter)
        assert adapter.start_year == 1959
        adapter.shutdown()

    def test_unknown_model_name(self, box_model_case):
        raw = box_model_case.config_dict()
        raw['model']['name'] = 'fair'
        config = SimcalConfig.from_file(box_model_case.write_config(raw))
        with pytest.raises(ConfigurationError, match="Unknown simulation model"):
            CalibrationManager(config).run_calibration()

    def test_repeated_runs_append_to_run_log(self, config):
        first = CalibrationManager(config, adapter=counting_adapter())
        first_result = first.run_calibration()
        second = CalibrationManager(config, adapter=counting_adapter())
        second_result = second.run_calibration()

        params = second.run_logger.run_log.read_parameter_stream()
        assert len(params) == first_result.evaluation_count + second_result.evaluation_count
        header_lines = [
            line for line in second.run_logger.run_log.parameter_path.read_text().splitlines()
            if line.startswith('run_id,')
        ]
        assert len(header_lines) == 1

    def test_static_forcings_pushed_once(self, config):
        adapter = MagicMock(wraps=counting_adapter())
        manager = CalibrationManager(config, adapter=adapter)
        manager.run_calibration()

        static_calls = [
            c for c in adapter.set_time_series.call_args_list if c.args[0] == 'ffi_emissions'
        ]
        assert len(static_calls) == 1
        adapter.shutdown.assert_called_once()

    def test_restart_over_interrupted_run_log(self, config):
        manager = CalibrationManager(config, adapter=counting_adapter())
        manager.run_log_path.mkdir(parents=True)
        (manager.run_log_path / 'parameter_log.csv').write_text('\n')

        result = manager.run_calibration()

        params = manager.run_logger.run_log.read_parameter_stream()
        assert len(params) == result.evaluation_count
        assert manager.run_logger.failure_count == 0
