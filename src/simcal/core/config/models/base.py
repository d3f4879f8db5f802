# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Common base configuration for config models.

This module provides the shared ConfigDict used across all configuration
model classes.
"""

from pydantic import ConfigDict

# Standard ConfigDict for all config models
FROZEN_CONFIG = ConfigDict(extra='forbid', populate_by_name=True, frozen=True)
