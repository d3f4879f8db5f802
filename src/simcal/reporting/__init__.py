# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""Calibration output files consumed by downstream reporting."""

from .summary_writer import SUMMARY_COLUMNS, SummaryWriter, build_summary_frame

__all__ = ['SummaryWriter', 'build_summary_frame', 'SUMMARY_COLUMNS']
