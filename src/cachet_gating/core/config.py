# src/cachet_gating/core/config.py
# Configuration management for cachet-gating.
"""
Configuration models and loading utilities.

The config file (.cachet-gate.yaml) stores:
- Cachet sources (base URL, token, TLS switch)
- Registry refresh cadence and source failure policy
- Default gating policy (poll interval, maximum wait)
- Report output directory
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from cachet_gating.gates.engine import DEFAULT_POLL_INTERVAL, GateOptions
from cachet_gating.models import SourceConfig
from cachet_gating.registry import (
    DEFAULT_REFRESH_INTERVAL,
    ResourceRegistry,
    SourceFailurePolicy,
)
from cachet_gating.source import DEFAULT_TIMEOUT

CONFIG_FILENAME = ".cachet-gate.yaml"


class GatingConfig(BaseModel):
    """cachet-gating configuration model."""

    version: str = Field(default="1.0", description="Config version")
    sources: list[SourceConfig] = Field(
        default_factory=list,
        description="Cachet endpoints to merge",
    )
    refresh_interval: float = Field(
        default=DEFAULT_REFRESH_INTERVAL,
        gt=0,
        description="Seconds between registry refreshes",
    )
    request_timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="HTTP timeout per source in seconds",
    )
    on_source_failure: SourceFailurePolicy = Field(
        default=SourceFailurePolicy.KEEP_STALE,
        description="keep_stale or mark_unknown",
    )
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0,
        description="Seconds between gating poll cycles",
    )
    max_wait: Optional[float] = Field(
        default=None,
        ge=0,
        description="Maximum gating wait in seconds; null waits forever",
    )
    report_dir: Path = Field(
        default=Path(".cachet/reports"),
        description="Directory for gating report artifacts",
    )

    def build_registry(self) -> ResourceRegistry:
        """Create a registry for the configured sources (not yet started)."""
        return ResourceRegistry(
            sources=self.sources,
            refresh_interval=self.refresh_interval,
            request_timeout=self.request_timeout,
            on_source_failure=self.on_source_failure,
        )

    def gate_options(self, require_resources: bool = True) -> GateOptions:
        return GateOptions(
            poll_interval=self.poll_interval,
            max_wait=self.max_wait,
            require_resources=require_resources,
        )


# Global config cache
_cached_config: Optional[GatingConfig] = None
_config_path: Optional[Path] = None


def load_config(path: Optional[Path] = None) -> Optional[GatingConfig]:
    """
    Load configuration from file.

    Searches for config in order:
    1. Specified path
    2. Current directory (.cachet-gate.yaml)
    3. Home directory (~/.cachet-gate.yaml)

    Returns None if no config found.
    """
    global _cached_config, _config_path

    if _cached_config and (path is None or path == _config_path):
        return _cached_config

    search_paths = []
    if path:
        search_paths.append(path)
    search_paths.extend([
        Path(CONFIG_FILENAME),
        Path.home() / CONFIG_FILENAME,
    ])

    config_file = None
    for p in search_paths:
        if p.exists():
            config_file = p
            break

    if not config_file:
        return None

    with open(config_file) as f:
        data = yaml.safe_load(f) or {}

    config = GatingConfig.model_validate(data)

    _cached_config = config
    _config_path = config_file

    return config


def resolve_config(
    path: Optional[Path] = None,
    source_urls: Optional[list[str]] = None,
    token: str = "",
    insecure: bool = False,
) -> GatingConfig:
    """
    Load config and apply command-line source overrides.

    Sources given on the command line replace the configured ones.
    """
    config = load_config(path) or GatingConfig()
    if source_urls:
        sources = [
            SourceConfig(base_url=url, auth_token=token, insecure_tls=insecure)
            for url in source_urls
        ]
        config = config.model_copy(update={"sources": sources})
    return config


def clear_config_cache() -> None:
    """Clear the cached configuration."""
    global _cached_config, _config_path
    _cached_config = None
    _config_path = None
