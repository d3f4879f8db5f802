# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Command-line interface for SIMCAL."""

from .argument_parser import CLIParser
from .exit_codes import ExitCode

__all__ = ['CLIParser', 'ExitCode']
