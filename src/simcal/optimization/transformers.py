# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Parameter transform layer.

Applies a parameter vector to a simulation adapter: DIRECT parameters are
set as scalars, SCALING parameters multiply their auxiliary forcing series,
which is then pushed into the adapter as a forcing input.
"""

import logging
from typing import Mapping, Optional

from simcal.core.exceptions import SimcalError, SimulationFailure

from .parameters import DirectApplication, ParameterSet, ParameterSpec, ScalingApplication


class ParameterTransformLayer:
    """Applies parameter vectors in the fixed declaration order of a ParameterSet."""

    def __init__(self, parameters: ParameterSet, logger: Optional[logging.Logger] = None):
        self.parameters = parameters
        self.logger = logger or logging.getLogger(__name__)

    def apply(self, vector: Mapping[str, float], adapter, step: Optional[int] = None) -> None:
        """Push every declared parameter of ``vector`` into ``adapter``.

        Raises:
            ConfigurationError: ``vector`` is missing a declared name or names
                an undeclared one. Raised before any adapter call.
            SimulationFailure: the adapter rejected a parameter.
        """
        self.parameters.validate_vector(vector)

        for spec in self.parameters:
            value = float(vector[spec.name])
            try:
                self._apply_one(spec, value, adapter)
            except SimcalError:
                raise
            except Exception as e:
                raise SimulationFailure(
                    f"Adapter rejected value {value}: {e}", step=step, parameter=spec.name
                ) from e

    def _apply_one(self, spec: ParameterSpec, value: float, adapter) -> None:
        application = spec.application
        if isinstance(application, DirectApplication):
            adapter.set_parameter(spec.name, value, spec.units)
        elif isinstance(application, ScalingApplication):
            series = application.series
            adapter.set_time_series(
                application.forcing_variable,
                series.years.tolist(),
                series.scaled(value).tolist(),
                spec.units,
            )
        else:
            raise TypeError(f"Unsupported parameter application {application!r}")
        self.logger.debug(f"Applied {spec.kind.value} parameter {spec.name}={value}")
