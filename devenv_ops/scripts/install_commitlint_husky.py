#!/usr/bin/env python3
"""Set up Commitlint and Husky git hooks in a project."""

import argparse
import sys
from pathlib import Path

from rich.console import Console

from devenv_ops.lib.config import NodeToolingConfig
from devenv_ops.lib.exceptions import DevEnvError
from devenv_ops.lib.logging_config import LOGGER
from devenv_ops.lib.menu import render_error
from devenv_ops.lib.node_tooling import setup_commitlint_husky
from devenv_ops.lib.process import run_command
from devenv_ops.lib.tools import ToolChecker


def main() -> int:
    """Install Commitlint + Husky and write the hook files.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Set up Commitlint and Husky")
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    args = parser.parse_args()

    console = Console()
    try:
        written = setup_commitlint_husky(
            args.project_dir, ToolChecker(), run_command, NodeToolingConfig()
        )
        for hook in written:
            console.print(f"Created {hook}")
        console.print("[green]Commitlint and Husky are set up.[/green]")
        console.print('Try a commit message such as: git commit -m "feat: add login page"')
        return 0

    except (OSError, ValueError) as e:
        LOGGER.error("Could not update project files: %s", e)
        return 1
    except DevEnvError as e:
        LOGGER.error("Commitlint + Husky setup failed: %s", e)
        render_error(console, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
