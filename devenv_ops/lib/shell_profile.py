"""Append configuration blocks to a shell rc file once."""

from pathlib import Path


def has_marker(rc_path: Path, marker: str) -> bool:
    """Return True when rc_path exists and contains marker."""
    if not rc_path.exists():
        return False
    return marker in rc_path.read_text(encoding="utf-8")


def append_block(rc_path: Path, marker: str, comment: str, lines: list[str]) -> bool:
    """Append a commented block unless marker is already in the file.

    Args:
        rc_path: Shell rc file (created if missing)
        marker: Text whose presence means the block is already configured
        comment: Heading written as ``# <comment>``
        lines: Lines of the block

    Returns:
        True if the block was appended
    """
    if has_marker(rc_path, marker):
        return False
    rc_path.parent.mkdir(parents=True, exist_ok=True)
    with rc_path.open("a", encoding="utf-8") as handle:
        handle.write("\n# " + comment + "\n")
        for line in lines:
            handle.write(line + "\n")
    return True
