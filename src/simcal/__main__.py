# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

import sys

from simcal.main_cli import main

sys.exit(main())
