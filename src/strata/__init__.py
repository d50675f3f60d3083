"""Strata: content realization and style cascade for document layout."""

from strata import elements
from strata.args import Args
from strata.content import ContentNode, ElementKind, ElementSpec, Param, construct, register_element
from strata.exceptions import (
    AggregateResolutionError,
    ConstructError,
    FontNotFoundError,
    InvariantViolationError,
    MissingArgumentError,
    ResolutionError,
    StrataError,
    TypeMismatchError,
    UnexpectedArgumentError,
)
from strata.realize import Realizer, Shown, finalize, realize, show
from strata.recipes import RecipeRegistry, RecipeTable, clear_registrations, show_rule, show_set
from strata.styles import StyleChain, StyleKey, StyleMap, Strength
from strata.values import Em, FontStyle, FontWeight, Span
from strata.world import FontMetrics, StaticWorld, World

__all__ = [
    "AggregateResolutionError",
    "Args",
    "ConstructError",
    "ContentNode",
    "ElementKind",
    "ElementSpec",
    "Em",
    "FontMetrics",
    "FontNotFoundError",
    "FontStyle",
    "FontWeight",
    "InvariantViolationError",
    "MissingArgumentError",
    "Param",
    "Realizer",
    "RecipeRegistry",
    "RecipeTable",
    "ResolutionError",
    "Shown",
    "Span",
    "StaticWorld",
    "StrataError",
    "Strength",
    "StyleChain",
    "StyleKey",
    "StyleMap",
    "TypeMismatchError",
    "UnexpectedArgumentError",
    "World",
    "clear_registrations",
    "construct",
    "elements",
    "finalize",
    "realize",
    "register_element",
    "show",
    "show_rule",
    "show_set",
]
