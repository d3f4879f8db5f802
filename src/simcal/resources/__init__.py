# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Packaged resources (configuration template)."""

from importlib import resources
from pathlib import Path

CONFIG_TEMPLATE = 'config_template.yaml'


def get_config_template() -> Path:
    """Path to the packaged configuration template."""
    return Path(str(resources.files(__package__).joinpath(CONFIG_TEMPLATE)))
