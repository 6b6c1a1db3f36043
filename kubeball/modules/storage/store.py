"""
Configuration store for kubeball.

Holds a single YAML record with two keys::

    clusters:
    - prod-eu
    - prod-us
    namespace: default

Every save rewrites the whole record. There is no locking; one invocation
at a time is assumed.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from kubeball.errors import KubeballError

logger = logging.getLogger("kubeball.storage")


class ConfigError(KubeballError):
    """Base class for configuration store errors."""


class ConfigNotFoundError(ConfigError):
    """The configuration file does not exist."""


class ConfigParseError(ConfigError):
    """The configuration file exists but cannot be understood."""


class ConfigSaveError(ConfigError):
    """The configuration file could not be written."""


@dataclass
class Configuration:
    """Persisted cluster selection."""

    clusters: List[str] = field(default_factory=list)
    namespace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {"clusters": list(self.clusters), "namespace": self.namespace}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        """
        Create from a parsed YAML mapping.

        Raises:
            ConfigParseError: If a field has the wrong type
        """
        clusters = data.get("clusters")
        if clusters is None:
            clusters = []
        if not isinstance(clusters, list) or not all(isinstance(c, str) for c in clusters):
            raise ConfigParseError("'clusters' must be a list of context names")

        namespace = data.get("namespace")
        if namespace is not None and not isinstance(namespace, str):
            raise ConfigParseError("'namespace' must be a string")

        return cls(clusters=clusters, namespace=namespace)


class ConfigStore:
    """Loads and saves the Configuration record at a fixed path."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize configuration store.

        Args:
            path: Location of the YAML record
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Configuration:
        """
        Load the stored configuration.

        Returns:
            Stored Configuration (empty if the file is empty)

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigParseError: If the file cannot be parsed
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigNotFoundError(f"No configuration at {self.path}")
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {self.path}: {e}")
        except OSError as e:
            raise ConfigParseError(f"Cannot read {self.path}: {e}")

        if data is None:
            logger.debug(f"Configuration file {self.path} is empty")
            return Configuration()
        if not isinstance(data, dict):
            raise ConfigParseError(f"Expected a mapping in {self.path}")

        config = Configuration.from_dict(data)
        logger.debug(f"Loaded {len(config.clusters)} clusters from {self.path}")
        return config

    def save(self, config: Configuration) -> None:
        """
        Overwrite the stored configuration.

        The record is written to a temporary file next to the target and
        moved into place, so readers never see a partial file.

        Raises:
            ConfigSaveError: If the file cannot be written
        """
        data = yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False)

        tmp_path = None
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ConfigSaveError(f"Cannot write {self.path}: {e}")

        logger.info(f"Saved {len(config.clusters)} clusters to {self.path}")
