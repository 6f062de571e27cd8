"""
Configuration loading for livegraph clients.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError


DEFAULT_REDIS_URL = "redis://localhost:6379"
DEFAULT_CHANNEL_PREFIX = "livegraph"


@dataclass
class LivegraphConfig:
    """
    Client configuration.

    Example livegraph.yaml:

        redis_url: redis://redis:6379
        channel_prefix: livegraph
    """
    redis_url: str = DEFAULT_REDIS_URL
    channel_prefix: str = DEFAULT_CHANNEL_PREFIX

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LivegraphConfig":
        """Create config from dictionary. LIVEGRAPH_REDIS_URL overrides redis_url."""
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping, got {type(data).__name__}")

        redis_url = os.getenv("LIVEGRAPH_REDIS_URL") or data.get("redis_url", DEFAULT_REDIS_URL)
        channel_prefix = data.get("channel_prefix", DEFAULT_CHANNEL_PREFIX)
        if not isinstance(channel_prefix, str) or not channel_prefix:
            raise ConfigError("channel_prefix must be a non-empty string")

        return cls(redis_url=redis_url, channel_prefix=channel_prefix)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "redis_url": self.redis_url,
            "channel_prefix": self.channel_prefix,
        }

    def save(self, path: Path | str = "livegraph.yaml") -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str = "livegraph.yaml") -> LivegraphConfig | None:
    """Load configuration from YAML file. Returns None if the file is missing."""
    path = Path(path)
    if not path.exists():
        return None

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return LivegraphConfig.from_dict(data or {})
