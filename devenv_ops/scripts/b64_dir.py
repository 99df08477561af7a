#!/usr/bin/env python3
"""Base64-encode every file of a directory."""

import argparse
import sys
from pathlib import Path

from devenv_ops.lib.b64_encoder import encode_directory
from devenv_ops.lib.logging_config import LOGGER


def main() -> int:
    """Write <file>.b64 for each regular file in the directory.

    Returns:
        Exit code (0 for success, 1 if any file failed)
    """
    parser = argparse.ArgumentParser(description="Base64-encode files in a directory")
    parser.add_argument("directory", type=Path, help="Directory to encode")
    args = parser.parse_args()

    try:
        result = encode_directory(args.directory)
    except (NotADirectoryError, PermissionError) as e:
        LOGGER.error("%s", e)
        return 1

    LOGGER.info(
        "Encoded: %d, skipped: %d, errors: %d",
        len(result.encoded),
        len(result.skipped),
        len(result.errors),
    )
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
