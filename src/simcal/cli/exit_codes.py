# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Process exit codes returned by CLI command handlers."""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    CONFIG_ERROR = 3
    DATA_ERROR = 4
    SIMULATION_ERROR = 5
    OPTIMIZATION_ERROR = 6
    INTERRUPTED = 130
