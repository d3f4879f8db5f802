# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
System configuration models.

Contains PathsConfig (output locations) and LoggingConfig.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .base import FROZEN_CONFIG


class PathsConfig(BaseModel):
    """Output locations for a calibration experiment"""
    model_config = FROZEN_CONFIG

    output_dir: Path = Field(default=Path('simcal_output'), alias='OUTPUT_DIR')
    experiment_id: str = Field(default='calibration', alias='EXPERIMENT_ID')

    @field_validator('output_dir')
    @classmethod
    def expand_output_dir(cls, v):
        """Expand user home references."""
        return Path(v).expanduser()

    @field_validator('experiment_id')
    @classmethod
    def validate_experiment_id(cls, v):
        """Experiment IDs become directory names."""
        v = str(v).strip()
        if not v:
            raise ValueError("experiment_id must not be empty")
        if '/' in v or '\\' in v:
            raise ValueError(f"experiment_id must not contain path separators, got '{v}'")
        return v


class LoggingConfig(BaseModel):
    """Console and file logging settings"""
    model_config = FROZEN_CONFIG

    level: Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'] = Field(default='INFO', alias='LOG_LEVEL')
    log_to_file: bool = Field(default=True, alias='LOG_TO_FILE')

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return str(v).upper()


class RunLogConfig(BaseModel):
    """Run log (evaluation record) settings"""
    model_config = FROZEN_CONFIG

    strict: bool = Field(default=False, alias='STRICT_RUN_LOG')
    directory: str = Field(default='run_log', alias='RUN_LOG_DIR')
