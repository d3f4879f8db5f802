"""Tests for adapter scoping: shutdown exactly once on every exit path."""

from unittest.mock import MagicMock

import pytest

from simcal.core.exceptions import SimulationFailure
from simcal.simulation import managed_adapter

pytestmark = [pytest.mark.unit, pytest.mark.quick]


class TestManagedAdapter:

    def test_shutdown_once_on_success(self, recording_adapter):
        with managed_adapter(recording_adapter) as adapter:
            adapter.run_to(2001)
        assert recording_adapter.shutdown_calls == 1
        assert recording_adapter.is_shut_down

    def test_shutdown_once_on_error(self, recording_adapter):
        with pytest.raises(SimulationFailure, match="diverged"):
            with managed_adapter(recording_adapter):
                raise SimulationFailure("diverged")
        assert recording_adapter.shutdown_calls == 1

    def test_shutdown_once_on_keyboard_interrupt(self, recording_adapter):
        with pytest.raises(KeyboardInterrupt):
            with managed_adapter(recording_adapter):
                raise KeyboardInterrupt
        assert recording_adapter.shutdown_calls == 1

    def test_explicit_shutdown_inside_scope_is_idempotent(self, recording_adapter):
        with managed_adapter(recording_adapter) as adapter:
            adapter.shutdown()
        assert recording_adapter.shutdown_calls == 1

    def test_shutdown_failure_does_not_mask_original_error(self, mock_logger):
        adapter = MagicMock()
        adapter.shutdown.side_effect = OSError("socket already closed")

        with pytest.raises(SimulationFailure, match="diverged"):
            with managed_adapter(adapter, mock_logger):
                raise SimulationFailure("diverged")

        adapter.shutdown.assert_called_once()
        mock_logger.error.assert_called_once()
