# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""SIMCAL: parameter calibration of annual simulation models against observations."""

from .simcal_version import __version__
from .core.config import SimcalConfig
from .optimization import CalibrationManager, CalibrationResult

__all__ = ["SimcalConfig", "CalibrationManager", "CalibrationResult", "__version__"]
