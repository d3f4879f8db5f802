# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Core mixins for SIMCAL modules.

Usage:
    from simcal.core.mixins import TimingMixin

    class MyDriver(TimingMixin):
        def run(self):
            self.start_timing()
            ...
            self.logger.info(f"Elapsed: {self.format_elapsed_time()}")
"""

from .timing import TimingMixin

__all__ = [
    "TimingMixin",
]
