# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Calibration parameter declarations.

A :class:`ParameterSpec` describes one logical parameter: its starting
value, box bounds, units and how it is applied to the simulation adapter.
The application is a tagged variant:

- :class:`DirectApplication` - the value is set as a scalar parameter;
- :class:`ScalingApplication` - the value multiplies an auxiliary forcing
  series that is then pushed into the adapter as a forcing input.

A :class:`ParameterSet` is the ordered, name-unique collection of specs for
one calibration. Its insertion order is the order in which parameters are
applied, and the order of the optimizer's parameter array.

Bounds:
    Bounds are either explicit or derived from a standard deviation as
    ``mean ± n_sigma * sd``. Either way they can be clipped to a physical
    domain; a fractional parameter, for example, never leaves [0, 1] even
    when the statistical interval would.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from simcal.core.exceptions import ConfigurationError, require, require_not_none
from simcal.data.forcing import AuxiliaryForcingSeries, load_forcing_series

ParameterVector = Dict[str, float]
"""Ordered mapping of parameter name to candidate value."""

Bounds = Dict[str, Tuple[float, float]]


class ParameterKind(Enum):
    DIRECT = 'direct'
    SCALING = 'scaling'


@dataclass(frozen=True)
class DirectApplication:
    """Set the parameter value on the adapter as a scalar."""

    kind = ParameterKind.DIRECT


@dataclass(frozen=True)
class ScalingApplication:
    """Multiply ``series`` by the parameter value and push it as ``forcing_variable``."""

    forcing_variable: str
    series: AuxiliaryForcingSeries = field(compare=False)

    kind = ParameterKind.SCALING

    def __post_init__(self):
        require_not_none(self.series, f"Series scaled into '{self.forcing_variable}'")


ParameterApplication = Union[DirectApplication, ScalingApplication]


def _clip_to_domain(
    lower: float,
    upper: float,
    physical_domain: Optional[Tuple[Optional[float], Optional[float]]],
) -> Tuple[float, float]:
    if physical_domain is None:
        return lower, upper
    phys_lo, phys_hi = physical_domain
    if phys_lo is not None:
        lower = max(lower, phys_lo)
    if phys_hi is not None:
        upper = min(upper, phys_hi)
    return lower, upper


@dataclass(frozen=True)
class ParameterSpec:
    """One calibration parameter.

    Invariant: ``lower_bound <= initial_value <= upper_bound``, all finite.
    """

    name: str
    initial_value: float
    lower_bound: float
    upper_bound: float
    units: str = ''
    application: ParameterApplication = field(default_factory=DirectApplication)

    def __post_init__(self):
        require(bool(self.name), "Parameter name must not be empty")
        for label in ('initial_value', 'lower_bound', 'upper_bound'):
            value = getattr(self, label)
            require(math.isfinite(value), f"Parameter '{self.name}': {label} must be finite, got {value}")
            object.__setattr__(self, label, float(value))
        require(
            self.lower_bound <= self.upper_bound,
            f"Parameter '{self.name}': lower bound {self.lower_bound} exceeds "
            f"upper bound {self.upper_bound}",
        )
        require(
            self.lower_bound <= self.initial_value <= self.upper_bound,
            f"Parameter '{self.name}': initial value {self.initial_value} outside "
            f"bounds [{self.lower_bound}, {self.upper_bound}]",
        )

    @property
    def kind(self) -> ParameterKind:
        return self.application.kind

    @property
    def bounds(self) -> Tuple[float, float]:
        return self.lower_bound, self.upper_bound

    def contains(self, value: float) -> bool:
        """True when ``value`` lies inside the closed bounds."""
        return self.lower_bound <= value <= self.upper_bound

    @classmethod
    def from_statistics(
        cls,
        name: str,
        mean: float,
        sd: float,
        n_sigma: float = 2.0,
        physical_domain: Optional[Tuple[Optional[float], Optional[float]]] = None,
        units: str = '',
        application: Optional[ParameterApplication] = None,
    ) -> 'ParameterSpec':
        """Spec with bounds ``mean ± n_sigma * sd`` clipped to ``physical_domain``."""
        require(sd > 0, f"Parameter '{name}': sd must be positive, got {sd}")
        lower, upper = _clip_to_domain(mean - n_sigma * sd, mean + n_sigma * sd, physical_domain)
        return cls(name, mean, lower, upper, units, application or DirectApplication())

    @classmethod
    def from_config(cls, cfg) -> 'ParameterSpec':
        """Build from a :class:`~simcal.core.config.ParameterConfig`.

        SCALING parameters load their auxiliary series here.
        """
        if cfg.kind == ParameterKind.SCALING.value:
            series = load_forcing_series(
                cfg.forcing_variable, cfg.series.path,
                cfg.series.year_column, cfg.series.value_column,
            )
            application: ParameterApplication = ScalingApplication(cfg.forcing_variable, series)
        else:
            application = DirectApplication()

        domain = (cfg.physical_lower, cfg.physical_upper)
        if cfg.sd is not None and cfg.lower is None:
            return cls.from_statistics(cfg.name, cfg.initial, cfg.sd, cfg.n_sigma,
                                       domain, cfg.units, application)

        lower, upper = _clip_to_domain(cfg.lower, cfg.upper, domain)
        return cls(cfg.name, cfg.initial, lower, upper, cfg.units, application)


class ParameterSet(Sequence[ParameterSpec]):
    """Ordered, name-unique collection of parameter specs."""

    def __init__(self, specs: Sequence[ParameterSpec]):
        specs = list(specs)
        if not specs:
            raise ConfigurationError("At least one calibration parameter is required")
        names = [s.name for s in specs]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate parameter names: {duplicates}")
        self._specs: Tuple[ParameterSpec, ...] = tuple(specs)
        self._by_name: Dict[str, ParameterSpec] = {s.name: s for s in specs}

    @classmethod
    def from_config(cls, parameter_configs) -> 'ParameterSet':
        return cls([ParameterSpec.from_config(p) for p in parameter_configs])

    def __getitem__(self, index):
        return self._specs[index]

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self._specs)

    def __contains__(self, name) -> bool:
        return name in self._by_name

    def get(self, name: str) -> ParameterSpec:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(f"Undeclared parameter '{name}'") from None

    @property
    def names(self) -> List[str]:
        return [s.name for s in self._specs]

    def initial_vector(self) -> ParameterVector:
        return {s.name: s.initial_value for s in self._specs}

    def bounds(self) -> Bounds:
        return {s.name: s.bounds for s in self._specs}

    def validate_vector(self, vector: Mapping[str, float]) -> None:
        """Raise ConfigurationError unless ``vector`` holds exactly the declared names."""
        missing = [n for n in self.names if n not in vector]
        if missing:
            raise ConfigurationError(f"Parameter vector is missing declared parameters: {missing}")
        extra = sorted(set(vector) - set(self._by_name))
        if extra:
            raise ConfigurationError(f"Parameter vector names undeclared parameters: {extra}")

    def to_array(self, vector: Mapping[str, float]) -> np.ndarray:
        self.validate_vector(vector)
        return np.array([float(vector[n]) for n in self.names], dtype=np.float64)

    def from_array(self, x: Sequence[float]) -> ParameterVector:
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (len(self._specs),):
            raise ConfigurationError(
                f"Expected {len(self._specs)} parameter values, got shape {x.shape}"
            )
        return {name: float(value) for name, value in zip(self.names, x)}
