"""Pydantic schemas for splitter configuration and separator presets."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from chunk_engine.core.exceptions import ConfigurationError
from chunk_engine.core.separators import Separator, validate_hierarchy
from chunk_engine.llm.token_utils import as_estimator

logger = logging.getLogger(__name__)

OversizedPolicy = Literal["allow", "error"]


# ============ SEPARATORS ============


class SeparatorConfig(BaseModel):
    """One separator entry as written in a preset file."""

    pattern: str = Field(..., description="Literal text, or a regular expression when regex is true")
    level: Optional[int] = Field(None, description="Priority; defaults to the position in the list")
    keep_in_output: bool = Field(default=True)
    regex: bool = Field(default=False)
    name: str = Field(default="")

    def to_separator(self, default_level: int) -> Separator:
        return Separator(
            pattern=self.pattern,
            level=self.level if self.level is not None else default_level,
            keep_in_output=self.keep_in_output,
            is_regex=self.regex,
            name=self.name,
        )


def _coerce_separator(item: Any, position: int) -> Separator:
    if isinstance(item, Separator):
        return item
    if isinstance(item, SeparatorConfig):
        return item.to_separator(position)
    if isinstance(item, dict):
        return SeparatorConfig(**item).to_separator(position)
    if isinstance(item, str):
        return Separator(pattern=item, level=position)
    raise ConfigurationError(f"Cannot build a separator from {type(item).__name__}")


def build_hierarchy(items: Any) -> tuple[Separator, ...]:
    """Build an ordered, validated hierarchy from separators, dicts or literal strings."""
    return validate_hierarchy(_coerce_separator(item, i) for i, item in enumerate(items or ()))


# ============ SPLITTER CONFIG ============


class SplitterConfig(BaseModel):
    """Immutable splitter configuration, validated before any splitting."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    max_segment_size_in_tokens: int = Field(..., gt=0)
    max_overlap_size_in_tokens: int = Field(default=0, ge=0)
    separators: tuple[Separator, ...]
    estimator: Any
    oversized_policy: OversizedPolicy = "allow"
    index_key: Optional[str] = "index"

    @field_validator("separators", mode="before")
    @classmethod
    def _validate_separators(cls, value: Any) -> tuple[Separator, ...]:
        return build_hierarchy(value)

    @field_validator("estimator", mode="before")
    @classmethod
    def _validate_estimator(cls, value: Any) -> Any:
        return as_estimator(value)

    @model_validator(mode="after")
    def _check_overlap_below_segment(self) -> "SplitterConfig":
        if self.max_overlap_size_in_tokens >= self.max_segment_size_in_tokens:
            raise ValueError(
                f"max_overlap_size_in_tokens ({self.max_overlap_size_in_tokens}) must be smaller than "
                f"max_segment_size_in_tokens ({self.max_segment_size_in_tokens})"
            )
        return self

    @classmethod
    def create(cls, **kwargs: Any) -> "SplitterConfig":
        """Validate ``kwargs`` and raise :class:`ConfigurationError` on any violation."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigurationError(f"Invalid splitter configuration: {details}") from exc


# ============ SEPARATOR REGISTRY ============


class SeparatorRegistry:
    """Registry of named separator hierarchies loaded from YAML.

    Preset names are looked up case-insensitively.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._load_registry()
                    cls._instance = instance
        return cls._instance

    def _load_registry(self) -> None:
        """Load presets from separators.yaml next to this module."""
        config_path = Path(__file__).parent / "separators.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Separator registry not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        self._presets: dict[str, tuple[Separator, ...]] = {}
        self._descriptions: dict[str, str] = {}
        for name, preset in data.get("presets", {}).items():
            key = name.lower()
            self._presets[key] = build_hierarchy(preset.get("separators", []))
            self._descriptions[key] = preset.get("description", "")

        logger.info("Loaded %d separator presets from registry", len(self._presets))

    def get(self, name: str) -> tuple[Separator, ...]:
        """Return the hierarchy for a preset.

        Raises:
            ConfigurationError: If the preset is unknown.
        """
        key = (name or "").strip().lower()
        if key not in self._presets:
            raise ConfigurationError(f"Unknown separator preset: {name!r}. Available: {self.list_presets()}")
        return self._presets[key]

    def describe(self, name: str) -> str:
        self.get(name)
        return self._descriptions[name.strip().lower()]

    def list_presets(self) -> list[str]:
        return sorted(self._presets)


def get_separators(preset: str = "prose") -> tuple[Separator, ...]:
    """Convenience accessor for a named preset."""
    return SeparatorRegistry().get(preset)
