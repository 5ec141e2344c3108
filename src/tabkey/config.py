"""Configuration management for tabkey.

Handles loading, saving, and validating TOML configuration stored in:
- macOS: ~/.config/tabkey/config.toml
- Linux: ~/.config/tabkey/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\tabkey\\config.toml
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tomllib
import tomli_w

VALID_QUALITIES = ("major", "minor")


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for tabkey.
    """
    if sys.platform == "darwin" or sys.platform == "linux":
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "tabkey"
        return Path.home() / ".config" / "tabkey"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "tabkey"
        return Path.home() / "AppData" / "Roaming" / "tabkey"
    else:
        return Path.home() / ".config" / "tabkey"


def get_config_path() -> Path:
    """Get the path to the config.toml file."""
    return get_config_dir() / "config.toml"


@dataclass
class TabkeyConfig:
    """Configuration for tabkey.

    Attributes:
        base_url: Document store base URL (songs and tables)
        timeout: HTTP request timeout in seconds
        tables_file: Local JSON file with tables; used instead of the store when set
        default_quality: Key signature quality shown by default ("major"/"minor")
        log_dir: Directory for session logs
        log_level: Log level name
    """

    # Document store
    base_url: str = "http://localhost:8081"
    timeout: int = 30
    tables_file: Optional[Path] = None

    # Display
    default_quality: str = "major"

    # Logging
    log_dir: Path = field(default_factory=lambda: get_config_dir() / "logs")
    log_level: str = "INFO"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "TabkeyConfig":
        """Load configuration from TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            TabkeyConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If a value is invalid
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()

        if "store" in data:
            store = data["store"]
            config.base_url = store.get("base_url", config.base_url)
            config.timeout = int(store.get("timeout", config.timeout))
            if store.get("tables_file"):
                config.tables_file = Path(store["tables_file"])

        if "display" in data:
            config.default_quality = data["display"].get("default_quality", config.default_quality)

        if "logging" in data:
            log = data["logging"]
            if log.get("log_dir"):
                config.log_dir = Path(log["log_dir"])
            config.log_level = log.get("level", config.log_level)

        # Environment variables take precedence
        env_url = os.environ.get("TABKEY_BASE_URL")
        if env_url:
            config.base_url = env_url

        env_tables = os.environ.get("TABKEY_TABLES_FILE")
        if env_tables:
            config.tables_file = Path(env_tables)

        config.validate()
        return config

    def validate(self) -> None:
        """Check values that cannot be expressed by types alone.

        Raises:
            ValueError: If a value is invalid
        """
        if self.default_quality not in VALID_QUALITIES:
            raise ValueError(
                f"Invalid default_quality: {self.default_quality} (expected one of {VALID_QUALITIES})"
            )
        if self.timeout <= 0:
            raise ValueError(f"Invalid timeout: {self.timeout}")

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        store = {"base_url": self.base_url, "timeout": self.timeout}
        # TOML has no null; an unset tables file is simply omitted
        if self.tables_file is not None:
            store["tables_file"] = str(self.tables_file)

        data = {
            "store": store,
            "display": {"default_quality": self.default_quality},
            "logging": {"log_dir": str(self.log_dir), "level": self.log_level},
        }

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a configuration value by attribute name.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if not hasattr(self, key):
            return default

        value = getattr(self, key)
        if isinstance(value, Path):
            return str(value)
        return value

    def set(self, key: str, value: str) -> None:
        """Set a configuration value by attribute name, preserving its type.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If the key is unknown or the value is invalid
        """
        if key.startswith("_") or not hasattr(self, key) or callable(getattr(self, key)):
            raise ValueError(f"Invalid config key: {key}")

        current = getattr(self, key)
        if isinstance(current, bool):
            new_value = value.lower() in ("true", "1", "yes")
        elif isinstance(current, int):
            new_value = int(value)
        elif isinstance(current, Path) or key == "tables_file":
            new_value = Path(value) if value else None
        else:
            new_value = value

        setattr(self, key, new_value)
        self.validate()


def ensure_config_exists() -> TabkeyConfig:
    """Ensure config file exists, creating default if needed.

    Returns:
        TabkeyConfig instance
    """
    config_path = get_config_path()

    if config_path.exists():
        try:
            return TabkeyConfig.load(config_path)
        except (tomllib.TOMLDecodeError, ValueError):
            # Corrupted config is replaced by a fresh default
            pass

    config = TabkeyConfig()
    config.save(config_path)
    return config
