# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Reference box-model adapter.

A deterministic, annual-step carbon/climate model used for demonstrations,
smoke runs and tests of the calibration engine:

- one atmospheric carbon box, fed by fossil (``ffi_emissions``) and land-use
  (``luc_emissions``) emissions, relaxing towards the preindustrial level;
- one-layer energy balance driven by the logarithmic CO2 forcing.

For year ``y`` after ``start_year``::

    C[y] = C[y-1] + af * E[y] / 2.124 - (C[y-1] - C0) / tau_c
    F[y] = 5.35 * ln(C[y] / C0)
    T[y] = T[y-1] + (S * F[y] / F2x - T[y-1]) / tau_t

Outputs: ``atmos_co2`` (ppmv CO2) and ``temperature`` (K anomaly).
"""

import logging
import math
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from simcal.core.constants import CarbonConstants
from simcal.core.exceptions import ConfigurationError, SimulationFailure

from .adapter import SimulationAdapter
from .registry import AdapterRegistry

# name -> (default value, units)
BOX_MODEL_PARAMETERS: Dict[str, tuple] = {
    'airborne_fraction': (0.45, '1'),
    'uptake_timescale': (150.0, 'yr'),
    'climate_sensitivity': (3.0, 'K'),
    'thermal_timescale': (8.0, 'yr'),
    'preindustrial_co2': (276.09, 'ppmv CO2'),
}

BOX_MODEL_FORCINGS: Dict[str, str] = {
    'ffi_emissions': 'GtC/yr',
    'luc_emissions': 'GtC/yr',
}

BOX_MODEL_OUTPUTS: Dict[str, str] = {
    'atmos_co2': 'ppmv CO2',
    'temperature': 'K',
}


@AdapterRegistry.register_adapter('box')
class BoxModelAdapter(SimulationAdapter):
    """In-process box model implementing the SimulationAdapter contract.

    Args:
        start_year: First simulated year; its state is the initial condition.
        initial_co2: CO2 at ``start_year``; defaults to ``preindustrial_co2``.
        initial_temperature: Temperature anomaly at ``start_year``.
        logger: Optional logger.
    """

    def __init__(
        self,
        start_year: int = 1850,
        initial_co2: Optional[float] = None,
        initial_temperature: float = 0.0,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger)
        self.start_year = int(start_year)
        self.initial_co2 = initial_co2
        self.initial_temperature = float(initial_temperature)

        self._parameters = {name: default for name, (default, _) in BOX_MODEL_PARAMETERS.items()}
        self._forcings: Dict[str, Dict[int, float]] = {name: {} for name in BOX_MODEL_FORCINGS}

        self._years: List[int] = []
        self._co2: List[float] = []
        self._temperature: List[float] = []
        self.run_count = 0
        self._do_reset()

    @staticmethod
    def _check_units(kind: str, name: str, units: str, expected: str) -> None:
        if units and units != expected:
            raise ConfigurationError(
                f"{kind} '{name}' expects units '{expected}', got '{units}'"
            )

    def _do_set_parameter(self, name: str, value: float, units: str) -> None:
        if name not in BOX_MODEL_PARAMETERS:
            raise ConfigurationError(
                f"Unknown box model parameter '{name}'; known: {sorted(BOX_MODEL_PARAMETERS)}"
            )
        self._check_units('Parameter', name, units, BOX_MODEL_PARAMETERS[name][1])
        self._parameters[name] = value

    def _do_set_time_series(self, name: str, years: list, values: list, units: str) -> None:
        if name not in BOX_MODEL_FORCINGS:
            raise ConfigurationError(
                f"Unknown box model forcing '{name}'; known: {sorted(BOX_MODEL_FORCINGS)}"
            )
        self._check_units('Forcing', name, units, BOX_MODEL_FORCINGS[name])
        if len(years) != len(values):
            raise ConfigurationError(
                f"Forcing '{name}': {len(years)} years but {len(values)} values"
            )
        self._forcings[name] = {int(y): float(v) for y, v in zip(years, values)}

    def _do_reset(self) -> None:
        c0 = self._parameters['preindustrial_co2']
        co2 = c0 if self.initial_co2 is None else float(self.initial_co2)
        self._years = [self.start_year]
        self._co2 = [co2]
        self._temperature = [self.initial_temperature]

    def _emissions(self, year: int) -> float:
        return sum(series.get(year, 0.0) for series in self._forcings.values())

    def _do_run_to(self, end_year: int) -> None:
        if end_year < self.start_year:
            raise SimulationFailure(
                f"Cannot run box model to {end_year}: start year is {self.start_year}"
            )

        af = self._parameters['airborne_fraction']
        tau_c = self._parameters['uptake_timescale']
        sensitivity = self._parameters['climate_sensitivity']
        tau_t = self._parameters['thermal_timescale']
        c0 = self._parameters['preindustrial_co2']

        if tau_c <= 0 or tau_t <= 0:
            raise SimulationFailure(
                f"Box model timescales must be positive (uptake={tau_c}, thermal={tau_t})"
            )
        if c0 <= 0:
            raise SimulationFailure(f"preindustrial_co2 must be positive, got {c0}")

        co2 = self._co2[-1]
        temperature = self._temperature[-1]
        for year in range(self._years[-1] + 1, end_year + 1):
            co2 = co2 + af * self._emissions(year) / CarbonConstants.GTC_PER_PPM - (co2 - c0) / tau_c
            if not math.isfinite(co2) or co2 <= 0:
                raise SimulationFailure(f"Box model CO2 became non-physical ({co2}) in {year}")
            forcing = CarbonConstants.CO2_FORCING_COEFFICIENT * math.log(co2 / c0)
            temperature = temperature + (sensitivity * forcing / CarbonConstants.FORCING_2XCO2
                                         - temperature) / tau_t
            if not math.isfinite(temperature):
                raise SimulationFailure(f"Box model temperature became non-finite in {year}")
            self._years.append(year)
            self._co2.append(co2)
            self._temperature.append(temperature)

        self.run_count += 1

    def _do_fetch(self, variable: str, years: list) -> pd.Series:
        if variable == 'atmos_co2':
            data = self._co2
        elif variable == 'temperature':
            data = self._temperature
        else:
            raise ConfigurationError(
                f"Unknown box model output '{variable}'; known: {sorted(BOX_MODEL_OUTPUTS)}"
            )

        lookup = dict(zip(self._years, data))
        missing = [y for y in years if y not in lookup]
        if missing:
            raise SimulationFailure(
                f"Box model has no '{variable}' output for years {missing[:5]}"
                f"{'...' if len(missing) > 5 else ''} (simulated "
                f"{self._years[0]}-{self._years[-1]})"
            )
        return pd.Series(
            np.array([lookup[y] for y in years], dtype=np.float64),
            index=pd.Index(years, name='year'),
            name=variable,
        )

    def _do_shutdown(self) -> None:
        self.logger.debug(f"Box model shut down after {self.run_count} runs")
