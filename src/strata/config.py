"""Configuration loader for realization settings, root styles, recipes and fonts.

A single YAML file (strata_config.yaml) configures a realization pass:

    realize:
      memoize: true
      max_workers: 4
    styles:
      - key: text.font
        value: Libertinus Serif
    recipes:
      - kind: heading
        priority: 20
        set:
          text.weight: medium
      - kind: strong
        handler: my_rules.py:shout
    fonts:
      - family: Libertinus Serif
        units_per_em: 1000
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .content import STRUCTURAL_KINDS, ElementKind
from .exceptions import ParseError, ValidationError
from .realize import DEFAULT_MAX_SHOW_DEPTH
from .recipes import RecipeRegistry, load_recipe
from .styles import StyleKey, StyleMap, Strength, lookup_key
from .world import FontMetrics, StaticWorld

CONFIG_FILENAME = "strata_config.yaml"
DEFAULT_FAMILY = "serif"


class RealizeConfig(BaseModel):
    """Settings of the realizer."""

    memoize: bool = True
    max_workers: int = Field(default=1, ge=1)
    max_show_depth: int = Field(default=DEFAULT_MAX_SHOW_DEPTH, ge=1)
    base_size: float = Field(default=11.0, gt=0)  # Font size in pt that 1em resolves to


class StyleSetting(BaseModel):
    """One root-level style entry."""

    key: str
    value: Any
    strength: Literal["weak", "strong"] = "weak"


class RecipeDefinition(BaseModel):
    """A show rule declared in configuration.

    Exactly one of `handler` ("module.function" or "file.py:function") and
    `set` (a style-only rule) must be given.
    """

    kind: str
    priority: int = 10
    where: dict[str, Any] = Field(default_factory=dict)
    handler: str | None = None
    set: dict[str, Any] | None = None
    name: str | None = None

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        """Ensure the kind names a non-structural element."""
        valid = sorted(k.value for k in ElementKind if k not in STRUCTURAL_KINDS)
        if v not in valid:
            raise ValueError(f"Invalid recipe kind '{v}'. Valid values: {', '.join(valid)}")
        return v

    @model_validator(mode="after")
    def check_transform(self) -> RecipeDefinition:
        """Require exactly one of handler and set."""
        if (self.handler is None) == (self.set is None):
            raise ValueError("A recipe needs exactly one of 'handler' or 'set'")
        return self


class FontDefinition(BaseModel):
    """Metrics of a font family made available to the world."""

    family: str
    units_per_em: int = Field(default=1000, gt=0)
    ascender: int = 800
    descender: int = -200
    cap_height: int = 700


class StrataConfig(BaseModel):
    """Top-level configuration."""

    realize: RealizeConfig = Field(default_factory=RealizeConfig)
    styles: list[StyleSetting] = Field(default_factory=list)
    recipes: list[RecipeDefinition] = Field(default_factory=list)
    fonts: list[FontDefinition] = Field(default_factory=list)


def load_config(config_path: Path | str) -> StrataConfig:
    """Load configuration from a YAML file.

    Raises:
        ParseError: If the file is missing or is not valid YAML
        ValidationError: If the structure is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ParseError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config YAML: {e}") from e

    if data is None:
        return StrataConfig()
    if not isinstance(data, dict):
        raise ParseError("Config must contain a dictionary at the root level")

    try:
        return StrataConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid config: {e}") from e


def discover_config(document_path: Path, config_path: Path | None = None) -> StrataConfig:
    """Find and load the configuration for a document.

    Search order:
    1. Explicit config_path argument
    2. Document directory / strata_config.yaml
    3. Current directory / strata_config.yaml

    Returns the default configuration when nothing is found.
    """
    if config_path is not None:
        return load_config(config_path)

    for candidate in (Path(document_path).parent / CONFIG_FILENAME, Path(CONFIG_FILENAME)):
        if candidate.exists():
            return load_config(candidate)

    return StrataConfig()


def _parse_entries(raw: Mapping[str, Any]) -> dict[StyleKey, Any]:
    parsed: dict[StyleKey, Any] = {}
    for path, value in raw.items():
        key = lookup_key(path)
        parsed[key] = key.parse(value)
    return parsed


def build_root_styles(config: StrataConfig) -> StyleMap:
    """Merge the configured style settings into one root scope.

    Settings are registered in file order; for duplicate keys a strong
    setting beats a weak one and otherwise the first setting wins.
    """
    root = StyleMap()
    for setting in config.styles:
        key = lookup_key(setting.key)
        single = StyleMap()
        single.set(key, key.parse(setting.value), Strength.parse(setting.strength))
        root = root.merge(single)
    return root


def build_registry(config: StrataConfig, registry: RecipeRegistry | None = None) -> RecipeRegistry:
    """Register the configured recipes, after any already in `registry`."""
    registry = registry if registry is not None else RecipeRegistry()
    for definition in config.recipes:
        kind = ElementKind(definition.kind)
        where = _parse_entries(definition.where) or None
        if definition.set is not None:
            styles = StyleMap()
            for key, value in _parse_entries(definition.set).items():
                styles.set(key, value)
            registry.show_set(
                kind, styles, priority=definition.priority, where=where, name=definition.name
            )
        elif definition.handler is not None:
            registry.show(
                kind,
                priority=definition.priority,
                where=where,
                name=definition.name or definition.handler,
            )(load_recipe(definition.handler))
    return registry


def build_world(config: StrataConfig) -> StaticWorld:
    """Create a world holding the configured fonts.

    A generic "serif" family is always available unless configured explicitly.
    """
    fonts = [FontMetrics(**font.model_dump()) for font in config.fonts]
    if not any(font.family.lower() == DEFAULT_FAMILY for font in fonts):
        fonts.append(FontMetrics(DEFAULT_FAMILY))
    return StaticWorld(fonts)
