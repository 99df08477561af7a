"""Configuration dataclasses for devenv_ops tools."""

import platform
from dataclasses import dataclass, field
from pathlib import Path

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
XCODE_APP = Path("/Applications/Xcode.app")


def is_apple_silicon() -> bool:
    """Return True on arm64 Macs."""
    return platform.machine() == "arm64"


def homebrew_prefix() -> Path:
    """Return the Homebrew prefix for the current architecture."""
    return Path("/opt/homebrew") if is_apple_silicon() else Path("/usr/local")


@dataclass
class KeychainConfig:
    """Keychains scanned by the export tool and where exports are written."""

    login_keychain: Path = field(
        default_factory=lambda: Path.home() / "Library/Keychains/login.keychain-db"
    )
    system_keychain: Path = Path("/Library/Keychains/System.keychain")
    output_dir: Path = Path("exported_certs")


@dataclass
class FlutterEnvConfig:
    """Flutter + Android + iOS toolchain installation settings."""

    flutter_version: str = "3.38.2"
    cmdline_tools_version: str = "11076708"
    android_home: Path = field(default_factory=lambda: Path.home() / "Library/Android/sdk")
    flutter_home: Path = field(default_factory=lambda: Path.home() / "flutter")
    ledger_path: Path = field(default_factory=lambda: Path.home() / ".flutter_env_install.log")
    shell_rc: Path = field(default_factory=lambda: Path.home() / ".zshrc")
    java_home: Path = Path("/Library/Java/JavaVirtualMachines/openjdk-17.jdk/Contents/Home")
    android_packages: list[str] = field(
        default_factory=lambda: [
            "platform-tools",
            "platforms;android-34",
            "platforms;android-35",
            "platforms;android-36",
            "build-tools;35.0.0",
        ]
    )
    ios_tools: list[str] = field(
        default_factory=lambda: ["libimobiledevice", "ideviceinstaller", "ios-deploy"]
    )

    @property
    def cmdline_tools_url(self) -> str:
        return (
            "https://dl.google.com/android/repository/"
            f"commandlinetools-mac-{self.cmdline_tools_version}_latest.zip"
        )

    @property
    def flutter_url(self) -> str:
        return (
            "https://storage.googleapis.com/flutter_infra_release/releases/stable/macos/"
            f"flutter_macos_arm64_{self.flutter_version}-stable.zip"
        )


@dataclass
class RubyConfig:
    """Homebrew Ruby installation settings."""

    shell_rc: Path = field(default_factory=lambda: Path.home() / ".zshrc")
    ledger_path: Path = field(default_factory=lambda: Path.home() / ".devenv_ops/ruby.log")


@dataclass
class SimulatorConfig:
    """Simulator batch creation settings."""

    devices: list[str] = field(
        default_factory=lambda: [
            "iPhone SE (3rd generation)",
            "iPhone 14",
            "iPhone 14 Plus",
            "iPhone 14 Pro",
            "iPhone 14 Pro Max",
            "iPhone 15 Pro",
            "iPhone 16",
            "iPhone 16 Plus",
            "iPhone 16 Pro",
            "iPhone 16 Pro Max",
        ]
    )
    list_timeout: float = 10
    devicetype_timeout: float = 5
    create_timeout: float = 30
    create_pause: float = 0.3


@dataclass
class NodeToolingConfig:
    """Pinned versions and hooks for the Commitlint + Husky setup."""

    commitlint_version: str = "19.8.1"
    husky_version: str = "9.1.7"
    hooks: list[str] = field(
        default_factory=lambda: [
            "commit-msg",
            "pre-commit",
            "pre-push",
            "post-commit",
            "prepare-commit-msg",
        ]
    )


@dataclass
class ScannerConfig:
    """Patterns and keywords used by the SQLite security scanner."""

    patterns: dict[str, str] = field(
        default_factory=lambda: {
            "email": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
            # + / 00 / 0 prefix, separators allowed, 7-15 digits (E.164)
            "phone_universal": r"(?:\+|00|0)[1-9](?:[ .\-\(\)]*\d){6,14}",
        }
    )
    min_phone_digits: int = 7
    snippet_length: int = 121
    keywords: list[str] = field(
        default_factory=lambda: [
            "token", "access_token", "refresh_token", "auth", "session", "jwt", "cookie",
            "password", "passwd", "secret", "key", "apiKey", "client_id", "client_secret",
            "email", "phone", "username", "fullname", "address", "birthday", "dob", "gender",
            "identity", "passport", "license", "ssn", "biometric",
            "card", "credit", "debit", "cvv", "cvc", "bank", "account", "balance", "transaction",
            "wallet", "vnpay", "momo", "stripe", "paypal", "zalopay", "shopeepay",
            "aws", "s3", "bucket", "firebase", "google_api", "database_url", "endpoint", "host",
            "user_id", "profile", "credential", "private", "history", "location", "gps",
        ]
    )  # fmt: skip
