from __future__ import annotations

"""
Main Entry Point.

Console script target. Delegates to the CLI controller and turns any
exception that escapes it into a logged critical error and exit code 1
instead of a bare traceback.
"""

import logging
import sys
import traceback
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line application.

    Args:
        argv: Arguments without the program name; None reads sys.argv.

    Returns:
        int: Process exit code.
    """
    from codecontext.interface.cli.app import main as cli_main

    try:
        return cli_main(argv)
    except Exception as e:
        stack_trace = traceback.format_exc()
        logging.getLogger("codecontext.supervisor").critical(f"FATAL EXCEPTION: {e}\n{stack_trace}")
        print(f"CRITICAL ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
