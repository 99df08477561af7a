"""Convert binary property lists to XML with ``plutil``."""

import shutil
from collections.abc import Callable
from pathlib import Path

from .models import CommandResult
from .process import check_result, run_command

BINARY_PLIST_MAGIC = b"bplist00"

Runner = Callable[..., CommandResult]


def raw_output_path(input_path: Path) -> Path:
    """Return ``<name>.raw.plist`` next to the input, dropping a trailing .plist."""
    name = input_path.name
    if name.endswith(".plist"):
        name = name[: -len(".plist")]
    return input_path.with_name(f"{name}.raw.plist")


def is_binary_plist(path: Path) -> bool:
    """Return True when the file starts with the binary plist magic."""
    with path.open("rb") as handle:
        return handle.read(len(BINARY_PLIST_MAGIC)) == BINARY_PLIST_MAGIC


def convert_plist(input_path: Path, runner: Runner = run_command) -> tuple[Path, bool]:
    """Write an XML copy of a plist as <name>.raw.plist.

    Binary plists go through ``plutil -convert xml1``; anything else is copied
    unchanged so the output name is the same either way.

    Args:
        input_path: Plist to convert
        runner: Process runner (injectable for tests)

    Returns:
        (output path, True if a binary plist was converted)

    Raises:
        FileNotFoundError: If input_path does not exist
        CommandError: If plutil fails
    """
    if not input_path.is_file():
        raise FileNotFoundError(f"file not found: {input_path}")

    output_path = raw_output_path(input_path)
    if is_binary_plist(input_path):
        check_result(
            runner(["plutil", "-convert", "xml1", str(input_path), "-o", str(output_path)]),
            hint=f"Run `plutil -lint {input_path}` to see whether the file is a valid plist.",
        )
        return output_path, True

    shutil.copyfile(input_path, output_path)
    return output_path, False
