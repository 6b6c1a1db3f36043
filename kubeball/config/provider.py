"""Runtime settings provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

DEFAULT_CONFIG_PATH = Path("~/.kubectl-ball/config.yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Runtime settings for one invocation."""
    config_path: Path
    kubectl: str
    picker: str
    log_level: str


class SettingsProvider(Protocol):
    """Protocol for settings providers."""

    def get_settings(self) -> Settings:
        """Get runtime settings."""
        ...


class EnvConfigProvider:
    """Environment-based settings provider."""

    def __init__(self, environ: Optional[dict] = None):
        self.environ = os.environ if environ is None else environ

    def _config_path(self) -> Path:
        override = self.environ.get("KUBEBALL_CONFIG")
        if override:
            return Path(override).expanduser()

        # Resolve against HOME from the given environment, not the process
        home = self.environ.get("HOME")
        if home:
            return Path(home) / ".kubectl-ball" / "config.yaml"
        return DEFAULT_CONFIG_PATH.expanduser()

    def get_settings(self) -> Settings:
        """Get settings from environment variables."""
        log_level = self.environ.get("LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            log_level = "WARNING"

        return Settings(
            config_path=self._config_path(),
            kubectl=self.environ.get("KUBEBALL_KUBECTL", "kubectl"),
            picker=self.environ.get("KUBEBALL_PICKER", "fzf"),
            log_level=log_level,
        )
