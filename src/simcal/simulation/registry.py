# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Central registry for simulation adapters."""

import logging
from typing import Any, Dict, List, Optional, Type

from simcal.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """
    Registry of simulation adapter classes by model name.

    Usage:
        @AdapterRegistry.register_adapter('box')
        class BoxModelAdapter(SimulationAdapter):
            ...

        adapter = AdapterRegistry.create('box', settings, logger)
    """

    _adapters: Dict[str, Type] = {}

    @classmethod
    def register_adapter(cls, model_name: str):
        """Decorator to register an adapter class."""
        def decorator(adapter_cls):
            key = model_name.upper()
            logger.debug(f"Registering adapter for {key}: {adapter_cls}")
            cls._adapters[key] = adapter_cls
            return adapter_cls
        return decorator

    @classmethod
    def get_adapter(cls, model_name: str) -> Optional[Type]:
        return cls._adapters.get(model_name.upper())

    @classmethod
    def list_adapters(cls) -> List[str]:
        return sorted(cls._adapters)

    @classmethod
    def create(cls, model_name: str, settings: Optional[Dict[str, Any]] = None,
               adapter_logger: Optional[logging.Logger] = None):
        """Instantiate the adapter registered under ``model_name``."""
        adapter_cls = cls.get_adapter(model_name)
        if adapter_cls is None:
            raise ConfigurationError(
                f"Unknown simulation model '{model_name}'. "
                f"Registered models: {cls.list_adapters()}"
            )
        try:
            return adapter_cls(logger=adapter_logger, **(settings or {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid settings for model '{model_name}': {e}") from e
