"""Show rules ("recipes") that rewrite content of a given element kind.

Recipes are registered on a RecipeRegistry, usually through the show_rule
decorator, and frozen into a RecipeTable before a realization pass. A recipe
id is its index in the table.
"""

# pyright: reportUnusedFunction=false

from __future__ import annotations

import importlib
import importlib.util
import sys
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, overload

from .content import STRUCTURAL_KINDS, ContentNode, ElementKind
from .exceptions import ValidationError
from .logger import checks_enabled, get_logger

if TYPE_CHECKING:
    from .styles import StyleChain, StyleKey, StyleMap
    from .world import World

RecipeTransform = Callable[[ContentNode, "World", "StyleChain"], ContentNode]

logger = get_logger()


# ============================================================================
# Recipes
# ============================================================================


@dataclass(frozen=True, slots=True)
class RecipeRegistration:
    """Registration entry for a show rule."""

    kind: ElementKind
    priority: int
    where: Mapping[StyleKey, Any] | None
    transform: RecipeTransform
    name: str


@dataclass(frozen=True)
class Recipe:
    """A show rule frozen into a table."""

    id: int
    kind: ElementKind
    priority: int
    transform: RecipeTransform = field(repr=False)
    name: str = ""
    where: Mapping[StyleKey, Any] | None = field(default=None, repr=False)

    def applicable(self, node: ContentNode, styles: StyleChain) -> bool:
        """Whether the kind matches and the style scope (if any) holds."""
        if node.kind != self.kind:
            return False
        return self.where is None or styles.satisfies(self.where)


class RecipeTable:
    """A frozen, read-only snapshot of registered recipes.

    Candidates for a kind are kept in priority order: higher priority first,
    and among equal priorities the more recently registered recipe first.
    """

    def __init__(self, registrations: tuple[RecipeRegistration, ...] = ()):
        self._recipes = tuple(
            Recipe(index, reg.kind, reg.priority, reg.transform, reg.name, reg.where)
            for index, reg in enumerate(registrations)
        )
        by_kind: dict[ElementKind, list[Recipe]] = {}
        for recipe in self._recipes:
            by_kind.setdefault(recipe.kind, []).append(recipe)
        self._by_kind = {
            kind: tuple(sorted(recipes, key=lambda r: (-r.priority, -r.id)))
            for kind, recipes in by_kind.items()
        }

    def __getitem__(self, recipe_id: int) -> Recipe:
        return self._recipes[recipe_id]

    def __len__(self) -> int:
        return len(self._recipes)

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes)

    def candidates(self, kind: ElementKind) -> tuple[Recipe, ...]:
        """Recipes targeting a kind, in priority order."""
        return self._by_kind.get(kind, ())

    def select(self, node: ContentNode, styles: StyleChain) -> Recipe | None:
        """Pick the highest-priority applicable recipe not guarded on the node."""
        for recipe in self.candidates(node.kind):
            if not recipe.applicable(node, styles):
                if checks_enabled():
                    logger.checks(node.kind.value, f"recipe '{recipe.name}' not in scope")
                continue
            if node.is_guarded(recipe.id):
                if checks_enabled():
                    logger.checks(node.kind.value, f"recipe '{recipe.name}' guarded, skipping")
                continue
            return recipe
        return None

    def processed(self, node: ContentNode) -> bool:
        """Whether a recipe for the node's own kind has already handled it.

        Such a node was rebuilt by that recipe from content that is already
        being shown, so it is not finalized a second time.
        """
        return any(self._recipes[guard].kind == node.kind for guard in node.guards)


# ============================================================================
# Registry
# ============================================================================


def _check_kind(kind: ElementKind) -> None:
    if kind in STRUCTURAL_KINDS:
        raise ValidationError(f"Cannot register a show rule for structural element '{kind.value}'")


def _style_transform(styles: StyleMap) -> RecipeTransform:
    frozen = styles.copy()

    def transform(node: ContentNode, world: World, chain: StyleChain) -> ContentNode:
        return node.styled_with_map(frozen)

    return transform


class RecipeRegistry:
    """Mutable collection of show rules, frozen with snapshot()."""

    def __init__(self) -> None:
        self._registrations: list[RecipeRegistration] = []

    @overload
    def show(self, kind: ElementKind, func: RecipeTransform) -> RecipeTransform: ...

    @overload
    def show(
        self,
        kind: ElementKind,
        *,
        priority: int = 10,
        where: Mapping[StyleKey, Any] | None = None,
        name: str | None = None,
    ) -> Callable[[RecipeTransform], RecipeTransform]: ...

    def show(
        self,
        kind: ElementKind,
        func: RecipeTransform | None = None,
        *,
        priority: int = 10,
        where: Mapping[StyleKey, Any] | None = None,
        name: str | None = None,
    ) -> RecipeTransform | Callable[[RecipeTransform], RecipeTransform]:
        """Register a show rule for an element kind.

        The function receives the (guarded) node, the world and the current
        style chain, and returns replacement content.

        Signature: (node: ContentNode, world: World, styles: StyleChain) -> ContentNode

        Args:
            kind: Element kind the rule applies to
            priority: Higher numbers win; ties go to the later registration
            where: Optional style scope; every key must resolve to the given value
            name: Name used in logs and errors (defaults to the function name)

        Examples:
            @registry.show(ElementKind.HEADING)
            def numbered(node, world, styles):
                return sequence("1. ", node)

            @registry.show(ElementKind.STRONG, where={TEXT_STYLE: FontStyle.ITALIC})
            def strong_in_italics(node, world, styles):
                return node.body
        """
        _check_kind(kind)

        def decorator(f: RecipeTransform) -> RecipeTransform:
            rule_name = name or getattr(f, "__name__", "recipe")
            self._registrations.append(RecipeRegistration(kind, priority, where, f, rule_name))
            return f

        if func is None:
            return decorator
        return decorator(func)

    def show_set(
        self,
        kind: ElementKind,
        styles: StyleMap,
        *,
        priority: int = 10,
        where: Mapping[StyleKey, Any] | None = None,
        name: str | None = None,
    ) -> None:
        """Register a style-only rule that wraps matching nodes in `styles`."""
        _check_kind(kind)
        rule_name = name or f"set {styles!r}"
        self._registrations.append(
            RecipeRegistration(kind, priority, where, _style_transform(styles), rule_name)
        )

    def clear(self) -> None:
        self._registrations.clear()

    def copy(self) -> RecipeRegistry:
        """An independent registry holding the same registrations."""
        registry = RecipeRegistry()
        registry._registrations = list(self._registrations)
        return registry

    def snapshot(self) -> RecipeTable:
        """Freeze the current registrations into a table."""
        return RecipeTable(tuple(self._registrations))

    def __len__(self) -> int:
        return len(self._registrations)


_default_registry = RecipeRegistry()


def default_registry() -> RecipeRegistry:
    """The process-wide registry used by the module-level decorators."""
    return _default_registry


@overload
def show_rule(kind: ElementKind, func: RecipeTransform) -> RecipeTransform: ...


@overload
def show_rule(
    kind: ElementKind,
    *,
    priority: int = 10,
    where: Mapping[StyleKey, Any] | None = None,
    name: str | None = None,
) -> Callable[[RecipeTransform], RecipeTransform]: ...


def show_rule(
    kind: ElementKind,
    func: RecipeTransform | None = None,
    *,
    priority: int = 10,
    where: Mapping[StyleKey, Any] | None = None,
    name: str | None = None,
) -> RecipeTransform | Callable[[RecipeTransform], RecipeTransform]:
    """Register a show rule on the default registry (see RecipeRegistry.show)."""
    if func is None:
        return _default_registry.show(kind, priority=priority, where=where, name=name)
    return _default_registry.show(kind, func)


def show_set(
    kind: ElementKind,
    styles: StyleMap,
    *,
    priority: int = 10,
    where: Mapping[StyleKey, Any] | None = None,
) -> None:
    """Register a style-only rule on the default registry."""
    _default_registry.show_set(kind, styles, priority=priority, where=where)


def clear_registrations() -> None:
    """Clear all registered show rules (called before loading user modules)."""
    _default_registry.clear()


# ============================================================================
# Loading user rules
# ============================================================================


def _import_file(path: Path, module_name: str) -> ModuleType:
    """Execute a Python file as a module registered under `module_name`."""
    if not path.is_file():
        raise ValidationError(f"Python file not found: {path}")
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ValidationError(f"Not an importable Python file: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[module_name]
        raise
    return module


def _split_handler(handler: str) -> tuple[str, str]:
    """Split a handler into (module or file, function name)."""
    if ".py:" in handler:
        source, sep, name = handler.rpartition(":")
    else:
        source, sep, name = handler.rpartition(".")
    if not sep or not source or not name:
        raise ValidationError(
            f"Invalid recipe handler '{handler}': expected 'package.module.function' "
            "or 'path/to/rules.py:function'"
        )
    return source, name


def load_recipe(handler: str) -> RecipeTransform:
    """Resolve a recipe handler to its transform function.

    `handler` is either "package.module.function" or "path/to/rules.py:function".
    Files are executed again on every call.

    Raises:
        ValidationError: If the module, file or function cannot be found, or
            the attribute is not callable
    """
    source, name = _split_handler(handler)
    if source.endswith(".py"):
        path = Path(source).resolve()
        module = _import_file(path, f"strata_recipes_{path.stem}")
    else:
        try:
            module = importlib.import_module(source)
        except ImportError as e:
            raise ValidationError(f"Cannot import recipe module '{source}': {e}") from e

    transform = getattr(module, name, None)
    if transform is None:
        raise ValidationError(f"Recipe handler '{handler}': no function '{name}' in {source}")
    if not callable(transform):
        raise ValidationError(f"Recipe handler '{handler}' is not callable")
    return transform  # type: ignore[no-any-return]


def load_rules(module: str | None = None, file: Path | None = None) -> RecipeRegistry:
    """Import a user module whose decorators register show rules.

    The default registry is cleared first, and a module that was already
    imported is reloaded so its decorators run again.

    Returns:
        The default registry, now holding the user's rules

    Raises:
        ValidationError: If the module or file cannot be imported
    """
    clear_registrations()
    if module:
        try:
            if module in sys.modules:
                importlib.reload(sys.modules[module])
            else:
                importlib.import_module(module)
        except ImportError as e:
            raise ValidationError(f"Cannot import rules module '{module}': {e}") from e
    elif file:
        _import_file(file.resolve(), "strata_user_rules")
    return _default_registry
