# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Hierarchical configuration models for SIMCAL.

Key design features:
- Type-safe hierarchical structure (config.optimization.max_iterations)
- Factory method: SimcalConfig.from_file()
- Immutable configs (frozen=True) to prevent mutation during a run
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, model_validator

from .base import FROZEN_CONFIG
from .calibration import (
    CalibrationConfig,
    ForcingConfig,
    ModelConfig,
    ObservationConfig,
    ParameterConfig,
    SeriesFileConfig,
)
from .optimization import OptimizationConfig
from .system import LoggingConfig, PathsConfig, RunLogConfig


class SimcalConfig(BaseModel):
    """Root configuration of a calibration run"""
    model_config = FROZEN_CONFIG

    model: ModelConfig = Field(default_factory=ModelConfig)
    observations: Dict[str, ObservationConfig]
    forcings: Dict[str, ForcingConfig] = Field(default_factory=dict)
    calibration: CalibrationConfig
    optimization: OptimizationConfig = Field(default_factory=OptimizationConfig)
    run_log: RunLogConfig = Field(default_factory=RunLogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    @model_validator(mode='after')
    def check_target_is_observed(self):
        if not self.observations:
            raise ValueError("at least one observation series is required")
        if self.calibration.target not in self.observations:
            raise ValueError(
                f"calibration target '{self.calibration.target}' is not one of the "
                f"declared observations {sorted(self.observations)}"
            )
        return self

    @property
    def experiment_dir(self) -> Path:
        return self.paths.output_dir / self.paths.experiment_id

    def target_variable(self) -> str:
        """Simulated variable compared against the calibration target."""
        obs = self.observations[self.calibration.target]
        return obs.variable or self.calibration.target

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> 'SimcalConfig':
        """Load and validate a YAML configuration file.

        See :func:`simcal.core.config.factories.from_file_factory`.
        """
        from simcal.core.config.factories import from_file_factory
        return from_file_factory(cls, path, overrides=overrides, use_env=use_env)

    def to_dict(self) -> Dict[str, Any]:
        """Plain, YAML-serializable representation."""
        return self.model_dump(mode='json')


__all__ = [
    'SimcalConfig',
    'ModelConfig',
    'ObservationConfig',
    'ForcingConfig',
    'ParameterConfig',
    'SeriesFileConfig',
    'CalibrationConfig',
    'OptimizationConfig',
    'RunLogConfig',
    'LoggingConfig',
    'PathsConfig',
    'FROZEN_CONFIG',
]
