"""Centralized configuration using Pydantic Settings.

Single source of truth for snapping tolerance, coordinate reference,
routing defaults, rendering options and logging.

Configuration can be overridden via environment variables:
- SF_GRAPH_SNAP_TOLERANCE=1e-6
- SF_GRAPH_REFERENCE=planar
- SF_ROUTING_DEFAULT_PROFILE=foot
- SF_ROUTING_MAX_WORKERS=8
- SF_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphConfig(BaseSettings):
    """Graph building configuration.

    Environment variables prefixed with SF_GRAPH_.

    ``snap_tolerance`` is in coordinate units: the default of 1e-7 merges
    floating-point duplicates (about 1 cm in degrees) but keeps distinct
    intersections apart.
    """

    model_config = SettingsConfigDict(env_prefix="SF_GRAPH_")

    snap_tolerance: float = Field(default=1e-7, gt=0)
    reference: Literal["geographic", "planar"] = "geographic"
    bidirectional: bool = True


class RoutingConfig(BaseSettings):
    """Routing and flow aggregation configuration.

    Environment variables prefixed with SF_ROUTING_.
    """

    model_config = SettingsConfigDict(env_prefix="SF_ROUTING_")

    default_profile: str = "bicycle"
    max_workers: int = Field(default=4, ge=1)
    batch_size: int = Field(default=16, ge=1)
    profiles_file: Optional[Path] = None


class RenderingConfig(BaseSettings):
    """Flow map rendering configuration.

    Environment variables prefixed with SF_RENDER_.
    """

    model_config = SettingsConfigDict(env_prefix="SF_RENDER_")

    tiles: str = "cartodbpositron"
    zoom_start: int = 14
    min_line_weight: float = 1.0
    max_line_weight: float = 10.0
    color: str = "#d7301f"


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with SF_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="SF_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main configuration aggregating all sub-configs.

        config = get_config()
        print(config.graph.snap_tolerance)
        print(config.routing.default_profile)

    Environment variables prefixed with SF_.
    """

    model_config = SettingsConfigDict(env_prefix="SF_")

    graph: GraphConfig = Field(default_factory=GraphConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    rendering: RenderingConfig = Field(default_factory=RenderingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Apply the observability settings to the root logger."""
    config = config or get_config().observability
    logging.basicConfig(level=config.level.upper(), format=config.format)
