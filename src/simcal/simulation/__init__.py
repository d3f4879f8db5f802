# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Simulation adapters.

Importing this package registers the built-in adapters with
:class:`AdapterRegistry`.
"""

from .adapter import SimulationAdapter, managed_adapter
from .box_model import BoxModelAdapter
from .registry import AdapterRegistry

__all__ = [
    'SimulationAdapter',
    'managed_adapter',
    'AdapterRegistry',
    'BoxModelAdapter',
]
