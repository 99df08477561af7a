"""Base64-encode every regular file of a directory."""

import base64
import logging
import os
from pathlib import Path

from .models import EncodeResult

logger = logging.getLogger(__name__)

ENCODED_SUFFIX = ".b64"


def encode_directory(directory: Path) -> EncodeResult:
    """Write ``<file>.b64`` next to each regular file in directory (non-recursive).

    Directories, symlinks and files already ending in .b64 are skipped. A file
    that cannot be read or written is recorded as an error and the run goes on.

    Raises:
        NotADirectoryError: If directory is not a directory
        PermissionError: If directory cannot be read
    """
    if not directory.is_dir():
        raise NotADirectoryError(f"'{directory}' is not a valid directory")
    if not os.access(directory, os.R_OK):
        raise PermissionError(f"cannot read directory '{directory}'")

    result = EncodeResult()
    for path in sorted(directory.iterdir()):
        if path.is_symlink() or not path.is_file():
            continue
        if path.name.endswith(ENCODED_SUFFIX):
            logger.info("Skipping already encoded file: %s", path.name)
            result.skipped.append(path)
            continue

        target = path.with_name(path.name + ENCODED_SUFFIX)
        try:
            target.write_bytes(base64.b64encode(path.read_bytes()))
        except OSError as e:
            logger.error("Failed to encode %s: %s", path.name, e)
            result.errors.append(path)
            continue

        logger.info("Encoded %s -> %s", path.name, target.name)
        result.encoded.append(target)

    return result
