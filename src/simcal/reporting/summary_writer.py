# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Calibration summary output.

Written once, after the driver terminates successfully:

- ``calibration_summary.csv``: one row per parameter with its initial value,
  bounds and calibrated value;
- ``calibration_result.yaml``: run diagnostics (state, loss, evaluation
  count, elapsed time, parameter vectors).
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import yaml

from simcal.core.constants import OutputFiles
from simcal.core.exceptions import simcal_error_handler

SUMMARY_COLUMNS = ['name', 'initial_value', 'lower_bound', 'upper_bound', 'final_value',
                   'units', 'kind']


def build_summary_frame(parameters, result) -> pd.DataFrame:
    """One row per declared parameter, in declaration order."""
    rows = [
        {
            'name': spec.name,
            'initial_value': spec.initial_value,
            'lower_bound': spec.lower_bound,
            'upper_bound': spec.upper_bound,
            'final_value': result.best_parameters[spec.name],
            'units': spec.units,
            'kind': spec.kind.value,
        }
        for spec in parameters
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


class SummaryWriter:
    """Writes the end-of-run summary files into ``output_dir``."""

    def __init__(self, output_dir: Path, logger: Optional[logging.Logger] = None):
        self.output_dir = Path(output_dir)
        self.logger = logger or logging.getLogger(__name__)

    @property
    def summary_path(self) -> Path:
        return self.output_dir / OutputFiles.SUMMARY

    @property
    def result_path(self) -> Path:
        return self.output_dir / OutputFiles.RESULT

    def write(self, parameters, result, extra: Optional[dict] = None) -> Path:
        """Write both summary files and return the CSV path."""
        with simcal_error_handler("writing calibration summary", self.logger):
            self.output_dir.mkdir(parents=True, exist_ok=True)
            build_summary_frame(parameters, result).to_csv(self.summary_path, index=False)

            payload = result.to_dict()
            if extra:
                payload.update(extra)
            with open(self.result_path, 'w') as f:
                yaml.safe_dump(payload, f, sort_keys=False)

        self.logger.info(f"Calibration summary written to {self.summary_path}")
        return self.summary_path
