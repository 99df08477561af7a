"""Node-based developer tooling: Commitlint, Husky and Snyk."""

import json
import stat
from pathlib import Path

from .config import HOMEBREW_INSTALL_URL, NodeToolingConfig
from .exceptions import ToolAbsentError
from .logging_config import LOGGER
from .process import check_result
from .tools import Runner, ToolChecker

COMMITLINT_CONFIG = """module.exports = {
  extends: ['@commitlint/config-conventional']
};
"""

HOOK_TEMPLATES = {
    "commit-msg": '#!/bin/sh\nnpx --no-install commitlint --edit "$1"\n',
    "pre-commit": (
        "#!/bin/sh\n"
        "# This hook runs before creating a commit (commonly used for lint/test).\n"
    ),
    "prepare-commit-msg": (
        "#!/bin/sh\n"
        "# This hook runs before the commit message editor is fired.\n"
        "# It can be used to modify the commit message before user edits it.\n"
    ),
    "post-commit": "#!/bin/sh\n# This hook runs after a commit is created.\n",
    "pre-push": (
        "#!/bin/sh\n"
        "# This hook runs before pushing commits to remote.\n"
        "# Commonly used for running tests, lint, or build verification.\n"
    ),
}

HOMEBREW_HINT = f'Install it with:\n/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"'


def require_homebrew(checker: ToolChecker) -> None:
    """Raise ToolAbsentError with the install command when brew is missing."""
    if not checker.is_installed("brew"):
        raise ToolAbsentError("Homebrew", hint=HOMEBREW_HINT)
    LOGGER.info("Homebrew is installed")


def ensure_node(checker: ToolChecker, runner: Runner) -> str:
    """Install Node.js with Homebrew when missing and return ``node -v``."""
    if not checker.is_installed("node"):
        LOGGER.info("Node.js is not installed, installing with Homebrew...")
        check_result(runner(["brew", "install", "node"], capture=False))
    version = checker.version("node", "-v")
    LOGGER.info("Node.js version: %s", version)
    return version


def require_npm(checker: ToolChecker) -> str:
    """Return ``npm -v``; raise ToolAbsentError when npm is missing."""
    if not checker.is_installed("npm"):
        raise ToolAbsentError("npm", hint="Please verify your Node.js installation.")
    version = checker.version("npm", "-v")
    LOGGER.info("npm version: %s", version)
    return version


def ensure_global_package(
    checker: ToolChecker,
    runner: Runner,
    command: str,
    packages: list[str],
    sudo: bool = False,
) -> bool:
    """Install npm packages globally unless command is already on PATH.

    Returns:
        True if an install ran
    """
    if checker.is_installed(command):
        LOGGER.info("%s is already installed", command)
        return False
    args = ["npm", "install", "-g", *packages]
    if sudo:
        args = ["sudo", *args]
    LOGGER.info("Installing %s globally...", " ".join(packages))
    check_result(runner(args, capture=False))
    return True


def write_commitlint_config(project_dir: Path) -> bool:
    """Create commitlint.config.cjs unless present. Returns True if written."""
    path = project_dir / "commitlint.config.cjs"
    if path.exists():
        LOGGER.info("commitlint.config.cjs already exists, skipping")
        return False
    path.write_text(COMMITLINT_CONFIG, encoding="utf-8")
    return True


def ensure_package_json(project_dir: Path) -> str:
    """Make sure package.json exists and runs husky on prepare.

    Returns:
        "created", "updated" or "unchanged"
    """
    path = project_dir / "package.json"
    if not path.exists():
        package = {
            "name": project_dir.resolve().name,
            "version": "1.0.0",
            "description": "Project with commitlint and husky setup",
            "main": "index.js",
            "scripts": {
                "test": 'echo "Error: no test specified" && exit 1',
                "prepare": "husky",
            },
            "repository": {"type": "git", "url": "."},
            "keywords": ["commitlint", "husky"],
            "author": "",
            "license": "MIT",
            "devDependencies": {},
            "type": "commonjs",
        }
        path.write_text(json.dumps(package, indent=2) + "\n", encoding="utf-8")
        LOGGER.info("package.json created for project: %s", package["name"])
        return "created"

    package = json.loads(path.read_text(encoding="utf-8"))
    scripts = package.setdefault("scripts", {})
    if "prepare" in scripts:
        return "unchanged"
    scripts["prepare"] = "husky"
    path.write_text(json.dumps(package, indent=2) + "\n", encoding="utf-8")
    LOGGER.info("prepare script added to package.json")
    return "updated"


def init_husky(project_dir: Path, runner: Runner) -> bool:
    """Run ``npx husky init`` when .husky/ is absent. Returns True if it ran."""
    husky_dir = project_dir / ".husky"
    if husky_dir.is_dir():
        LOGGER.info(".husky/ directory already exists")
        return False
    LOGGER.info("Initializing husky in the project...")
    check_result(runner(["npx", "husky", "init"], capture=False, cwd=str(project_dir)))
    husky_dir.mkdir(exist_ok=True)
    return True


def _is_default_pre_commit(path: Path) -> bool:
    content = path.read_text(encoding="utf-8")
    return "npm test" in content and len(content.splitlines()) <= 3


def write_hooks(project_dir: Path, hooks: list[str]) -> list[Path]:
    """Write hook templates that are missing and make every hook executable.

    The ``npm test`` pre-commit that ``husky init`` generates is replaced by
    the template.

    Returns:
        Hook files that were written
    """
    husky_dir = project_dir / ".husky"
    husky_dir.mkdir(exist_ok=True)
    written: list[Path] = []

    for hook in hooks:
        path = husky_dir / hook
        template = HOOK_TEMPLATES.get(hook, "#!/bin/sh\n")
        replace_default = hook == "pre-commit" and path.exists() and _is_default_pre_commit(path)
        if not path.exists() or replace_default:
            path.write_text(template, encoding="utf-8")
            written.append(path)
            LOGGER.info("Created husky %s hook", hook)
        else:
            LOGGER.info(".husky/%s already exists, skipping", hook)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    return written


def setup_commitlint_husky(
    project_dir: Path,
    checker: ToolChecker,
    runner: Runner,
    config: NodeToolingConfig | None = None,
) -> list[Path]:
    """Install Commitlint + Husky globally and wire them into project_dir.

    Returns:
        Hook files that were written

    Raises:
        ToolAbsentError: If Homebrew or npm is missing
        CommandError: If an install command fails
    """
    config = config or NodeToolingConfig()
    require_homebrew(checker)
    ensure_node(checker, runner)
    require_npm(checker)

    ensure_global_package(
        checker,
        runner,
        "commitlint",
        [
            f"@commitlint/cli@{config.commitlint_version}",
            f"@commitlint/config-conventional@{config.commitlint_version}",
        ],
        sudo=True,
    )
    ensure_global_package(
        checker, runner, "husky", [f"husky@{config.husky_version}"], sudo=True
    )

    write_commitlint_config(project_dir)
    ensure_package_json(project_dir)
    init_husky(project_dir, runner)
    return write_hooks(project_dir, config.hooks)


def setup_snyk(checker: ToolChecker, runner: Runner) -> None:
    """Install Snyk globally if needed, then run ``snyk test``.

    Raises:
        ToolAbsentError: If Homebrew or npm is missing
        CommandError: If an install or the test run fails
    """
    require_homebrew(checker)
    ensure_node(checker, runner)
    require_npm(checker)
    if not ensure_global_package(checker, runner, "snyk", ["snyk"]):
        LOGGER.info("Snyk version: %s", checker.version("snyk", "-v"))
    check_result(runner(["snyk", "test"], capture=False))
