"""
Storage Module - Black Box Interface

Purpose: Persist the selected clusters and namespace between invocations
Interface: ConfigStore.load(), ConfigStore.save(), ConfigStore.exists()
Hidden: YAML encoding, atomic file replacement, directory creation

The store path is handed in by the caller, never read from the environment.
"""

from .store import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigSaveError,
    ConfigStore,
    Configuration,
)

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigSaveError",
    "ConfigStore",
    "Configuration",
]
