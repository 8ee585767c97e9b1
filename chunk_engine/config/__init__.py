"""Configuration package for chunk_engine."""

from chunk_engine.config.schemas import (
    SeparatorConfig,
    SeparatorRegistry,
    SplitterConfig,
    build_hierarchy,
    get_separators,
)
from chunk_engine.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
    "SeparatorConfig",
    "SeparatorRegistry",
    "SplitterConfig",
    "build_hierarchy",
    "get_separators",
]
