"""Provisioning plans for the Flutter toolchain and Homebrew Ruby."""

import os
import re
import shutil
import tempfile
import time
from collections.abc import Callable, MutableMapping
from pathlib import Path

from .config import (
    HOMEBREW_INSTALL_URL,
    XCODE_APP,
    FlutterEnvConfig,
    homebrew_prefix,
    is_apple_silicon,
)
from .download import download_file
from .exceptions import DevEnvError, ToolAbsentError
from .logging_config import LOGGER
from .process import check_result, run_command
from .provisioning import ProvisioningPlan, ProvisioningTask
from .shell_profile import append_block
from .tools import Runner, ToolChecker

CLI_TOOLS_IN_PROGRESS = Path("/tmp/.com.apple.dt.CommandLineTools.installondemand.in-progress")
JVM_LINK = Path("/Library/Java/JavaVirtualMachines/openjdk-17.jdk")
VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+")
LICENSE_ANSWERS = "y\n" * 50


def cli_tools_label(listing: str) -> str:
    """Return the last Command Line Tools product label from ``softwareupdate -l``."""
    label = ""
    for line in listing.splitlines():
        if re.search(r"\*.*Command Line", line):
            label = line[line.index("Command Line"):].strip()
    return label


class Toolchain:
    """Homebrew-based install steps shared by the provisioning plans."""

    def __init__(
        self,
        shell_rc: Path,
        runner: Runner = run_command,
        checker: ToolChecker | None = None,
        environ: MutableMapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize toolchain.

        Args:
            shell_rc: Shell rc file that receives PATH configuration
            runner: Process runner
            checker: Tool presence checker (built on runner if None)
            environ: Environment inherited by child processes (os.environ if None)
            sleep: Sleep function used while polling
        """
        self.shell_rc = shell_rc
        self.runner = runner
        self.checker = checker or ToolChecker(runner)
        self.environ = os.environ if environ is None else environ
        self.sleep = sleep
        self.prefix = homebrew_prefix()

    def export_path(self, *directories: Path) -> None:
        """Prepend directories to PATH for the rest of this process."""
        current = self.environ.get("PATH", "").split(os.pathsep)
        for directory in reversed(directories):
            entry = str(directory)
            if entry not in current:
                current.insert(0, entry)
        self.environ["PATH"] = os.pathsep.join(part for part in current if part)

    def _brew(self, *args: str) -> None:
        check_result(self.runner(["brew", *args], capture=False))

    def _tolerate(self, args: list[str], what: str, input_text: str | None = None) -> None:
        result = self.runner(args, input_text=input_text)
        if not result.ok:
            LOGGER.warning("%s did not succeed (%s), continuing", what, result.returncode)

    # Homebrew

    def install_homebrew(self) -> None:
        env = dict(self.environ)
        env["NONINTERACTIVE"] = "1"
        check_result(
            self.runner(
                ["/bin/bash", "-c", f'/bin/bash -c "$(curl -fsSL {HOMEBREW_INSTALL_URL})"'],
                capture=False,
                env=env,
            ),
            hint="See https://brew.sh for manual installation.",
        )
        self.configure_homebrew()

    def configure_homebrew(self) -> None:
        brew = self.prefix / "bin/brew"
        append_block(self.shell_rc, "brew shellenv", "Homebrew", [f'eval "$({brew} shellenv)"'])
        self.export_path(self.prefix / "bin", self.prefix / "sbin")

    def homebrew_task(self) -> ProvisioningTask:
        return ProvisioningTask(
            step_id="homebrew",
            label="Homebrew",
            action=self.install_homebrew,
            precheck=lambda: self.checker.is_installed("brew"),
        )

    def homebrew_update_task(self) -> ProvisioningTask:
        return ProvisioningTask(
            step_id="homebrew-update",
            label="Homebrew update",
            action=lambda: self._brew("update"),
        )

    # Ruby

    @property
    def ruby_bin(self) -> Path:
        return self.prefix / "opt/ruby/bin"

    def configure_ruby(self) -> None:
        ruby_home = self.prefix / "opt/ruby"
        appended = append_block(
            self.shell_rc,
            str(self.ruby_bin),
            "Ruby configuration",
            [
                f'export PATH="{self.ruby_bin}:$PATH"',
                f'export LDFLAGS="-L{ruby_home}/lib"',
                f'export CPPFLAGS="-I{ruby_home}/include"',
            ],
        )
        if appended:
            LOGGER.info("Ruby PATH added to %s", self.shell_rc)
        self.export_path(self.ruby_bin)

    def install_ruby(self) -> None:
        self._brew("install", "ruby")
        self.configure_ruby()

    def verify_ruby(self) -> str:
        """Return ``ruby --version`` for the Ruby now first on PATH."""
        version = self.checker.version("ruby")
        if not version:
            raise ToolAbsentError(
                "ruby",
                hint=f"Restart the terminal or run: source {self.shell_rc}",
            )
        LOGGER.info("Ruby: %s", version)
        return version

    def ruby_plan(self) -> ProvisioningPlan:
        """Homebrew Ruby with bundler, always (re)installing the latest formula."""

        def install_and_verify() -> None:
            self.install_ruby()
            self.verify_ruby()

        return ProvisioningPlan(
            "Ruby installation",
            [
                self.homebrew_task(),
                self.homebrew_update_task(),
                ProvisioningTask("ruby", "Ruby (Homebrew)", install_and_verify),
                ProvisioningTask(
                    "bundler",
                    "Bundler",
                    lambda: check_result(
                        self.runner(["gem", "install", "bundler", "--no-document"], capture=False)
                    ),
                ),
            ],
        )


class FlutterToolchain(Toolchain):
    """Flutter, Android SDK and iOS build toolchain."""

    def __init__(
        self,
        config: FlutterEnvConfig,
        runner: Runner = run_command,
        checker: ToolChecker | None = None,
        environ: MutableMapping[str, str] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        download: Callable[[str, Path], Path] = download_file,
        xcode_app: Path = XCODE_APP,
    ) -> None:
        super().__init__(config.shell_rc, runner, checker, environ, sleep)
        self.config = config
        self.download = download
        self.xcode_app = xcode_app

    @property
    def cmdline_tools_dir(self) -> Path:
        return self.config.android_home / "cmdline-tools"

    def export_environment(self) -> None:
        """Expose every toolchain directory to child processes of this run."""
        self.environ["JAVA_HOME"] = str(self.config.java_home)
        self.environ["ANDROID_HOME"] = str(self.config.android_home)
        self.environ["ANDROID_SDK_ROOT"] = str(self.config.android_home)
        self.export_path(
            self.config.flutter_home / "bin",
            self.cmdline_tools_dir / "latest/bin",
            self.config.android_home / "platform-tools",
            self.config.android_home / "emulator",
            self.config.java_home / "bin",
            self.ruby_bin,
            self.prefix / "bin",
            self.prefix / "sbin",
        )

    # Xcode

    def accept_xcode_license(self) -> None:
        self._tolerate(["sudo", "xcodebuild", "-license", "accept"], "Xcode license acceptance")

    def cli_tools_present(self) -> bool:
        return self.runner(["xcode-select", "-p"]).ok

    def wait_for_cli_tools(self, interval: float = 5, attempts: int = 360) -> None:
        for _ in range(attempts):
            if self.cli_tools_present():
                return
            self.sleep(interval)
        raise DevEnvError(
            "Xcode Command Line Tools did not finish installing",
            hint="Complete the installer dialog, then re-run this command.",
        )

    def install_cli_tools(self) -> None:
        CLI_TOOLS_IN_PROGRESS.touch()
        try:
            label = cli_tools_label(self.runner(["softwareupdate", "-l"]).stdout)
            if label:
                check_result(
                    self.runner(
                        ["sudo", "softwareupdate", "-i", label, "--verbose"], capture=False
                    )
                )
            else:
                LOGGER.warning("A dialog will appear. Click 'Install' and wait for it to complete")
                self.runner(["xcode-select", "--install"])
                self.wait_for_cli_tools()
        finally:
            CLI_TOOLS_IN_PROGRESS.unlink(missing_ok=True)
        self.accept_xcode_license()

    def configure_xcode_app(self) -> None:
        check_result(
            self.runner(
                ["sudo", "xcode-select", "--switch", str(self.xcode_app / "Contents/Developer")]
            )
        )
        self.accept_xcode_license()
        self._tolerate(["sudo", "xcodebuild", "-runFirstLaunch"], "Xcode first launch")

    # Java

    def configure_java(self) -> None:
        append_block(
            self.shell_rc,
            "JAVA_HOME",
            "Java configuration",
            [f'export JAVA_HOME="{self.config.java_home}"', 'export PATH="$JAVA_HOME/bin:$PATH"'],
        )
        self.environ["JAVA_HOME"] = str(self.config.java_home)
        self.export_path(self.config.java_home / "bin")

    def install_java(self) -> None:
        self._brew("install", "openjdk@17")
        jdk = self.prefix / "opt/openjdk@17/libexec/openjdk.jdk"
        check_result(self.runner(["sudo", "ln", "-sfn", str(jdk), str(JVM_LINK)]))
        self.configure_java()

    # CocoaPods

    def require_pod(self) -> None:
        if not self.checker.is_installed("pod"):
            raise ToolAbsentError(
                "pod",
                hint=f"CocoaPods is installed but not on PATH yet; run: source {self.shell_rc}",
            )
        LOGGER.info("CocoaPods version: %s", self.checker.version("pod"))

    def install_cocoapods(self) -> None:
        self._brew("install", "cocoapods")
        self.require_pod()

    def install_ios_tools(self) -> None:
        self._tolerate(["brew", "install", *self.config.ios_tools], "iOS build tools install")

    # Android

    def configure_android(self) -> None:
        home = self.config.android_home
        append_block(
            self.shell_rc,
            "ANDROID_HOME",
            "Android SDK configuration",
            [
                f'export ANDROID_HOME="{home}"',
                f'export ANDROID_SDK_ROOT="{home}"',
                'export PATH="$ANDROID_HOME/cmdline-tools/latest/bin:'
                '$ANDROID_HOME/platform-tools:$ANDROID_HOME/emulator:$PATH"',
            ],
        )
        self.environ["ANDROID_HOME"] = str(home)
        self.environ["ANDROID_SDK_ROOT"] = str(home)
        self.export_path(
            self.cmdline_tools_dir / "latest/bin", home / "platform-tools", home / "emulator"
        )

    def install_cmdline_tools(self) -> None:
        self.cmdline_tools_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory() as tmp:
            archive = self.download(self.config.cmdline_tools_url, Path(tmp) / "tools.zip")
            check_result(
                self.runner(["unzip", "-o", "-q", str(archive), "-d", str(self.cmdline_tools_dir)])
            )
        (self.cmdline_tools_dir / "cmdline-tools").rename(self.cmdline_tools_dir / "latest")
        self.configure_android()

    def install_android_packages(self) -> None:
        self._tolerate(["sdkmanager", "--licenses"], "Android license acceptance", LICENSE_ANSWERS)
        check_result(self.runner(["sdkmanager", "--update"], capture=False))
        check_result(self.runner(["sdkmanager", *self.config.android_packages], capture=False))

    # Flutter

    def installed_flutter_version(self) -> str:
        """Return the x.y.z version of the SDK at flutter_home, or "unknown"."""
        flutter = self.config.flutter_home / "bin/flutter"
        if not flutter.exists():
            return "unknown"
        result = self.runner([str(flutter), "--version"])
        first_line = result.stdout.splitlines()[0] if result.ok and result.stdout else ""
        match = VERSION_PATTERN.search(first_line)
        return match.group(0) if match else "unknown"

    def flutter_current(self) -> bool:
        return (
            self.config.flutter_home.is_dir()
            and self.installed_flutter_version() == self.config.flutter_version
        )

    def configure_flutter(self) -> None:
        append_block(
            self.shell_rc,
            "flutter/bin",
            "Flutter configuration",
            [f'export PATH="{self.config.flutter_home}/bin:$PATH"'],
        )
        self.export_path(self.config.flutter_home / "bin")

    def install_flutter(self) -> None:
        home = self.config.flutter_home
        if home.exists():
            LOGGER.warning(
                "Flutter directory exists but version mismatch (%s vs %s), removing",
                self.installed_flutter_version(),
                self.config.flutter_version,
            )
            shutil.rmtree(home)

        if not is_apple_silicon():
            raise DevEnvError(
                "the Flutter SDK download only supports Apple Silicon (arm64) Macs",
                hint="For Intel Macs, follow the official Flutter installation guide.",
            )

        home.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory() as tmp:
            archive = self.download(self.config.flutter_url, Path(tmp) / "flutter.zip")
            check_result(self.runner(["unzip", "-o", "-q", str(archive), "-d", str(home.parent)]))
        self.configure_flutter()

    def configure_flutter_sdk(self) -> None:
        check_result(self.runner(["flutter", "config", "--no-analytics"]))
        self._tolerate(
            ["flutter", "doctor", "--android-licenses"], "Flutter license acceptance", LICENSE_ANSWERS
        )
        check_result(self.runner(["flutter", "precache", "--android"], capture=False))
        check_result(self.runner(["flutter", "precache", "--ios"], capture=False))

    def flutter_plan(self) -> ProvisioningPlan:
        """Build the ordered Flutter environment plan.

        The xcode-app step is only included when Xcode.app is installed.
        """
        tasks = [
            self.homebrew_task(),
            self.homebrew_update_task(),
            ProvisioningTask(
                "xcode-cli",
                "Xcode Command Line Tools",
                self.install_cli_tools,
                precheck=self.cli_tools_present,
                on_present=self.accept_xcode_license,
            ),
        ]
        if self.xcode_app.is_dir():
            tasks.append(ProvisioningTask("xcode-app", "Xcode app", self.configure_xcode_app))
        else:
            LOGGER.warning(
                "Xcode app not found at %s; install it from the App Store, then run: "
                "sudo xcode-select --switch %s",
                self.xcode_app,
                self.xcode_app / "Contents/Developer",
            )

        tasks += [
            ProvisioningTask(
                "java17",
                "Java 17 (OpenJDK)",
                self.install_java,
                precheck=lambda: self.checker.brew_has("openjdk@17"),
                on_present=self.configure_java,
            ),
            ProvisioningTask(
                "ruby",
                "Ruby (Homebrew)",
                self.install_ruby,
                precheck=lambda: self.checker.brew_has("ruby"),
                on_present=self.configure_ruby,
            ),
            ProvisioningTask(
                "cocoapods",
                "CocoaPods",
                self.install_cocoapods,
                precheck=lambda: self.checker.brew_has("cocoapods"),
                on_present=self.require_pod,
            ),
            ProvisioningTask(
                "cocoapods-setup",
                "CocoaPods setup",
                lambda: check_result(self.runner(["pod", "setup", "--verbose"], capture=False)),
            ),
            ProvisioningTask("ios-tools", "iOS build tools", self.install_ios_tools),
            ProvisioningTask(
                "android-cmdtools",
                "Android cmdline-tools",
                self.install_cmdline_tools,
                precheck=lambda: (self.cmdline_tools_dir / "latest").is_dir(),
                on_present=self.configure_android,
            ),
            ProvisioningTask(
                "android-packages", "Android SDK packages", self.install_android_packages
            ),
            ProvisioningTask(
                "flutter",
                f"Flutter SDK {self.config.flutter_version}",
                self.install_flutter,
                precheck=self.flutter_current,
                on_present=self.configure_flutter,
            ),
            ProvisioningTask("flutter-config", "Flutter configuration", self.configure_flutter_sdk),
        ]
        return ProvisioningPlan("Flutter development environment", tasks)

    def versions_report(self) -> dict[str, str]:
        """Return installed tool versions keyed by display name."""
        xcode_select = self.runner(["xcode-select", "-p"])
        report = {
            "Xcode Command Line Tools": xcode_select.stdout.strip()
            if xcode_select.ok
            else "Not installed",
        }
        if self.xcode_app.is_dir():
            report["Xcode"] = self.checker.version("xcodebuild", "-version") or "Installed"
        report["Java"] = self.checker.version("java", "-version") or "Not installed"
        report["Ruby"] = self.checker.version("ruby") or "Not installed"
        report["CocoaPods"] = self.checker.version("pod") or "Not installed"
        report["Flutter"] = self.checker.version("flutter") or "Not installed"
        report["Android SDK"] = str(self.config.android_home)
        return report
