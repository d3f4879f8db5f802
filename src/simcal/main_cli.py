# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
SIMCAL CLI entry point.
"""

import sys


def main(argv=None):
    """
    Main entry point for the SIMCAL CLI.

    Returns:
        Process exit code
    """
    from simcal.cli.argument_parser import CLIParser
    from simcal.cli.exit_codes import ExitCode
    from simcal.core.exceptions import SimcalError

    try:
        parser = CLIParser()
        args = parser.parse_args(argv)
        return int(args.func(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return ExitCode.INTERRUPTED
    except SimcalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return ExitCode.GENERAL_ERROR


if __name__ == "__main__":
    sys.exit(main())
