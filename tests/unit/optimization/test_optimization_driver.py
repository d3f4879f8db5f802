"""Unit tests for the L-BFGS-B OptimizationDriver."""

import pytest

from simcal.core.config import OptimizationConfig
from simcal.core.exceptions import ConfigurationError, OptimizationError, SimulationFailure
from simcal.optimization import DriverState, OptimizationDriver

pytestmark = [pytest.mark.unit, pytest.mark.optimization]


def quadratic(vector):
    return (vector['x'] - 1.0) ** 2 + (vector['y'] + 2.0) ** 2


def rosenbrock(vector):
    x, y = vector['x'], vector['y']
    return 100.0 * (y - x ** 2) ** 2 + (1.0 - x) ** 2


BOUNDS = {'x': (-5.0, 5.0), 'y': (-5.0, 5.0)}


class TestConvergence:

    def test_quadratic_converges_to_minimum(self, test_logger):
        driver = OptimizationDriver(logger=test_logger)
        result = driver.optimize({'x': 0.0, 'y': 0.0}, BOUNDS, quadratic)

        assert result.converged
        assert result.state is DriverState.CONVERGED
        assert driver.state is DriverState.CONVERGED
        assert result.best_parameters['x'] == pytest.approx(1.0, abs=1e-3)
        assert result.best_parameters['y'] == pytest.approx(-2.0, abs=1e-3)
        assert result.final_loss == pytest.approx(0.0, abs=1e-6)
        assert result.evaluation_count > 0
        assert result.wall_clock_seconds >= 0.0

    def test_minimum_outside_bounds_lands_on_bound(self):
        result = OptimizationDriver().optimize(
            {'x': 0.0}, {'x': (0.0, 5.0)}, lambda v: (v['x'] - 10.0) ** 2
        )
        assert result.best_parameters['x'] == pytest.approx(5.0)

    def test_objective_never_sees_out_of_bounds_values(self):
        seen = []

        def objective(vector):
            seen.append(vector['x'])
            return (vector['x'] + 3.0) ** 2

        OptimizationDriver().optimize({'x': 0.5}, {'x': (0.0, 1.0)}, objective)
        assert seen
        assert all(0.0 <= x <= 1.0 for x in seen)

    def test_objective_receives_all_names_in_order(self):
        seen = []

        def objective(vector):
            seen.append(list(vector))
            return quadratic(vector)

        OptimizationDriver().optimize({'x': 0.0, 'y': 0.0}, BOUNDS, objective)
        assert all(names == ['x', 'y'] for names in seen)

    def test_result_serializes(self):
        result = OptimizationDriver().optimize({'x': 0.0, 'y': 0.0}, BOUNDS, quadratic)
        data = result.to_dict()
        assert data['state'] == 'converged'
        assert data['initial_parameters'] == {'x': 0.0, 'y': 0.0}
        assert set(data['best_parameters']) == {'x', 'y'}


class TestLimits:

    def test_max_iterations_is_fail_soft(self):
        config = OptimizationConfig(max_iterations=1)
        driver = OptimizationDriver(config)
        result = driver.optimize({'x': -1.5, 'y': 2.0}, BOUNDS, rosenbrock)

        assert not result.converged
        assert result.state is DriverState.MAX_ITERATIONS
        assert result.final_loss <= rosenbrock({'x': -1.5, 'y': 2.0})
        assert result.evaluation_count >= 1

    def test_max_evaluations_is_fail_soft(self):
        config = OptimizationConfig(max_evaluations=5)
        result = OptimizationDriver(config).optimize({'x': -1.5, 'y': 2.0}, BOUNDS, rosenbrock)
        assert result.state is DriverState.MAX_ITERATIONS
        assert not result.converged


class TestFailures:

    def test_objective_error_sets_failed_and_propagates(self):
        calls = {'n': 0}

        def objective(vector):
            calls['n'] += 1
            if calls['n'] == 3:
                raise SimulationFailure("solver diverged", step=3)
            return quadratic(vector)

        driver = OptimizationDriver()
        with pytest.raises(SimulationFailure, match="solver diverged"):
            driver.optimize({'x': 0.0, 'y': 0.0}, BOUNDS, objective)
        assert driver.state is DriverState.FAILED

    def test_no_finite_loss(self):
        driver = OptimizationDriver(OptimizationConfig(max_evaluations=3))
        with pytest.raises(OptimizationError, match="without a finite evaluation"):
            driver.optimize({'x': 0.0}, {'x': (-1.0, 1.0)}, lambda v: float('inf'))
        assert driver.state is DriverState.FAILED


class TestValidation:

    @pytest.mark.parametrize("initial,bounds,match", [
        ({}, {}, "empty"),
        ({'x': 0.0}, {}, "No bounds"),
        ({'x': 0.0}, {'x': (-1.0, 1.0), 'z': (0.0, 1.0)}, "unknown parameters"),
        ({'x': 0.0}, {'x': (1.0, -1.0)}, "exceeds upper bound"),
        ({'x': 2.0}, {'x': (-1.0, 1.0)}, "outside bounds"),
        ({'x': 0.0}, {'x': (float('-inf'), 1.0)}, "must be finite"),
    ])
    def test_invalid_inputs(self, initial, bounds, match):
        driver = OptimizationDriver()
        with pytest.raises(ConfigurationError, match=match):
            driver.optimize(initial, bounds, quadratic)
        assert driver.state is DriverState.INITIALIZED
