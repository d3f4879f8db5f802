# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Calibration configuration models.

Contains the simulation model selection, observation and forcing inputs,
and the declared calibration parameters.
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .base import FROZEN_CONFIG

ParameterKindType = Literal['direct', 'scaling']


class ModelConfig(BaseModel):
    """Simulation adapter selection"""
    model_config = FROZEN_CONFIG

    name: str = Field(default='box', alias='MODEL_NAME')
    settings: Dict[str, Any] = Field(default_factory=dict, alias='MODEL_SETTINGS')


class SeriesFileConfig(BaseModel):
    """A (year, value) series stored in a CSV file"""
    model_config = FROZEN_CONFIG

    path: Path
    year_column: str = 'year'
    value_column: str = 'value'


class ObservationConfig(SeriesFileConfig):
    """An observed series and the simulated variable it is compared with"""

    variable: Optional[str] = None
    units: str = ''


class ForcingConfig(SeriesFileConfig):
    """An unscaled forcing series pushed into the adapter once before calibration"""

    units: str = ''


class ParameterConfig(BaseModel):
    """A calibration parameter declaration.

    Bounds are either given explicitly (``lower``/``upper``) or derived
    from a standard deviation as ``initial ± n_sigma * sd``; in both cases
    they are clipped to ``physical_lower``/``physical_upper`` when set.
    """
    model_config = FROZEN_CONFIG

    name: str
    initial: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    sd: Optional[float] = Field(default=None, gt=0)
    n_sigma: float = Field(default=2.0, gt=0)
    physical_lower: Optional[float] = None
    physical_upper: Optional[float] = None
    units: str = ''
    kind: ParameterKindType = 'direct'
    forcing_variable: Optional[str] = None
    series: Optional[SeriesFileConfig] = None

    @field_validator('kind', mode='before')
    @classmethod
    def normalize_kind(cls, v):
        return str(v).lower()

    @model_validator(mode='after')
    def check_bounds_and_kind(self):
        explicit = self.lower is not None or self.upper is not None
        if explicit and (self.lower is None or self.upper is None):
            raise ValueError(f"parameter '{self.name}': lower and upper must be given together")
        if not explicit and self.sd is None:
            raise ValueError(f"parameter '{self.name}': either lower/upper or sd is required")
        if self.kind == 'scaling':
            if not self.forcing_variable:
                raise ValueError(f"scaling parameter '{self.name}' requires forcing_variable")
            if self.series is None:
                raise ValueError(f"scaling parameter '{self.name}' requires series")
        elif self.forcing_variable is not None or self.series is not None:
            raise ValueError(
                f"direct parameter '{self.name}' must not declare forcing_variable or series"
            )
        return self


class CalibrationConfig(BaseModel):
    """Calibration target and parameters"""
    model_config = FROZEN_CONFIG

    target: str = Field(alias='CALIBRATION_TARGET')
    parameters: List[ParameterConfig] = Field(alias='CALIBRATION_PARAMETERS')

    @field_validator('parameters')
    @classmethod
    def validate_parameters(cls, v):
        if not v:
            raise ValueError("at least one calibration parameter is required")
        names = [p.name for p in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate parameter names: {duplicates}")
        return v
