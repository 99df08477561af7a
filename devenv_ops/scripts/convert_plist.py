#!/usr/bin/env python3
"""Convert a binary plist to XML next to the original."""

import argparse
import sys
from pathlib import Path

from devenv_ops.lib.exceptions import DevEnvError
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.plist_convert import convert_plist


def main() -> int:
    """Write <name>.raw.plist for the given file.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Convert a binary plist to XML")
    parser.add_argument("plist", type=Path, help="Property list file")
    args = parser.parse_args()

    try:
        output, converted = convert_plist(args.plist)
        if converted:
            LOGGER.info("Converted binary plist to %s", output)
        else:
            LOGGER.info("Not a binary plist, copied to %s", output)
        return 0

    except FileNotFoundError as e:
        LOGGER.error("%s", e)
        return 1
    except DevEnvError as e:
        LOGGER.error("plist conversion failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
