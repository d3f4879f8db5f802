# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Factory methods for creating SIMCAL configurations.

Configuration is layered, lowest priority first:
1. Model defaults (pydantic field defaults)
2. YAML configuration file
3. Environment variables (SIMCAL_OUTPUT_DIR, SIMCAL_EXPERIMENT_ID, SIMCAL_LOG_LEVEL)
4. Explicit overrides (e.g. from the command line)

Relative input paths in the file are resolved against the directory that
contains the configuration file, so a config and its data can move together.
"""

import copy
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, Union

import yaml
from pydantic import ValidationError

from simcal.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from simcal.core.config.models import SimcalConfig

ENV_OVERRIDES = {
    'SIMCAL_OUTPUT_DIR': ('paths', 'output_dir'),
    'SIMCAL_EXPERIMENT_ID': ('paths', 'experiment_id'),
    'SIMCAL_LOG_LEVEL': ('logging', 'level'),
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _expand_dotted(overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Turn ``{'paths.output_dir': x}`` into ``{'paths': {'output_dir': x}}``."""
    nested: Dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split('.')
        cursor = nested
        for part in parts[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[parts[-1]] = value
    return nested


def _load_env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_key, (section, field) in ENV_OVERRIDES.items():
        value = os.getenv(env_key)
        if value:
            overrides.setdefault(section, {})[field] = value
    return overrides


def _resolve(path_value: Any, base_dir: Path) -> Any:
    if path_value is None:
        return path_value
    path = Path(path_value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path)


def _resolve_relative_paths(raw: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    """Resolve every input file path relative to ``base_dir``."""
    resolved = copy.deepcopy(raw)

    for section in ('observations', 'forcings'):
        for entry in (resolved.get(section) or {}).values():
            if isinstance(entry, dict) and 'path' in entry:
                entry['path'] = _resolve(entry['path'], base_dir)

    calibration = resolved.get('calibration') or {}
    for param in calibration.get('parameters') or []:
        series = param.get('series') if isinstance(param, dict) else None
        if isinstance(series, dict) and 'path' in series:
            series['path'] = _resolve(series['path'], base_dir)

    paths = resolved.get('paths') or {}
    if 'output_dir' in paths:
        paths['output_dir'] = _resolve(paths['output_dir'], base_dir)

    return resolved


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        location = '.'.join(str(part) for part in item.get('loc', ())) or '<root>'
        lines.append(f"  - {location}: {item.get('msg')}")
    return "Invalid configuration:\n" + "\n".join(lines)


def from_dict_factory(
    cls: Type['SimcalConfig'],
    raw: Dict[str, Any],
    overrides: Optional[Dict[str, Any]] = None,
) -> 'SimcalConfig':
    """Validate a configuration mapping, applying dotted-key overrides."""
    merged = raw
    if overrides:
        merged = _deep_merge(raw, _expand_dotted(overrides))
    try:
        return cls(**merged)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def from_file_factory(
    cls: Type['SimcalConfig'],
    path: Union[str, Path],
    overrides: Optional[Dict[str, Any]] = None,
    use_env: bool = True,
) -> 'SimcalConfig':
    """
    Create a SimcalConfig from a YAML file.

    Args:
        cls: SimcalConfig class
        path: Path to the YAML configuration file
        overrides: Dotted-key overrides (highest priority), e.g.
            ``{'optimization.max_iterations': 50}``
        use_env: Whether to apply SIMCAL_* environment variables

    Returns:
        Validated SimcalConfig instance

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r') as f:
            file_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse configuration file {path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    config_dict = _resolve_relative_paths(file_config, path.parent.resolve())

    if use_env:
        env_overrides = _load_env_overrides()
        if env_overrides:
            config_dict = _deep_merge(config_dict, env_overrides)

    return from_dict_factory(cls, config_dict, overrides=overrides)
