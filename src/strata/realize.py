"""Realization: show rules, built-in shows and finalize overlays.

Realizing a node happens in three steps:

1. show resolution applies the highest-priority applicable recipe that has
   not processed the node yet, repeatedly, until no recipe applies;
2. the node it settles on is shown with its kind's built-in show;
3. the original node's finalize hook overlays default styling around
   whatever steps 1 and 2 produced, exactly once. Nodes that rebuild an
   already-processed node are not finalized again.

The output is realized recursively until only layout primitives (text,
blocks, sequences and style scopes) remain.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .content import STRUCTURAL_KINDS, ContentNode, ElementKind, as_content
from .exceptions import AggregateResolutionError, ResolutionError
from .logger import debug_enabled, get_logger, rewrites_enabled
from .recipes import Recipe, RecipeTable
from .styles import StyleChain

if TYPE_CHECKING:
    from .config import RealizeConfig
    from .world import World

DEFAULT_MAX_SHOW_DEPTH = 64

logger = get_logger()


@dataclass(frozen=True)
class Shown:
    """Result of show resolution for one node.

    Attributes:
        settled: The node resolution settled on (no further recipe applies)
        realized: The settled node's built-in show output, or the node itself
            for layout primitives
        applied: Names of the recipes applied, in order
    """

    settled: ContentNode
    realized: ContentNode
    applied: tuple[str, ...] = ()


# ============================================================================
# Show Engine
# ============================================================================


def _resolution_error(
    node: ContentNode, error: Exception, recipe: Recipe | None = None
) -> ResolutionError:
    return ResolutionError(
        str(error) or type(error).__name__,
        location=node.span,
        kind=node.kind.value,
        recipe=None if recipe is None else recipe.name,
    )


def apply_recipe(
    recipe: Recipe, node: ContentNode, world: World, styles: StyleChain
) -> ContentNode:
    """Guard a node against a recipe, then let the recipe transform it.

    The recipe sees the node with its own id added to the guards and removed
    from every descendant. The result carries the accumulated guard set, as
    does every node inside it that rebuilds the input, so the recipe cannot
    process its own output again.

    Raises:
        ResolutionError: If the transform fails or returns something that is
            not content
    """
    guarded = node.unguard_parts(recipe.id).with_guard(recipe.id)
    if rewrites_enabled():
        logger.rewrites(node.kind.value, f"applying recipe '{recipe.name}' (#{recipe.id})")
    try:
        output = recipe.transform(guarded, world, styles)
    except ResolutionError:
        raise
    except Exception as e:
        raise _resolution_error(node, e, recipe) from e

    output = as_content(output)
    if not isinstance(output, ContentNode):
        raise ResolutionError(
            f"recipe returned {type(output).__name__}, expected content",
            location=node.span,
            kind=node.kind.value,
            recipe=recipe.name,
        )
    return output.guard_matching(node, guarded.guards).with_guards(guarded.guards)


def show(
    node: ContentNode,
    world: World,
    styles: StyleChain,
    recipes: RecipeTable,
) -> Shown:
    """Resolve a node through the show rules, then its built-in show.

    Args:
        node: The node to resolve
        world: Resource access handed to recipes and built-in shows
        styles: Style chain in effect at the node
        recipes: Frozen recipe table of the realization pass

    Raises:
        ResolutionError: If a recipe or the built-in show fails
    """
    current = node
    applied: list[str] = []
    while True:
        recipe = recipes.select(current, styles)
        if recipe is None:
            break
        current = apply_recipe(recipe, current, world, styles)
        applied.append(recipe.name)

    builtin = current.spec.show
    if builtin is None:
        return Shown(current, current, tuple(applied))
    try:
        realized = builtin(current, world, styles)
    except ResolutionError:
        raise
    except Exception as e:
        raise _resolution_error(current, e) from e
    return Shown(current, realized, tuple(applied))


# ============================================================================
# Finalize Engine
# ============================================================================


def finalize(
    node: ContentNode, world: World, styles: StyleChain, realized: ContentNode
) -> ContentNode:
    """Run the node's finalize hook over its realized content.

    Uses the node's own fields, not the realized replacement's. Kinds without
    a hook return `realized` unchanged.

    Raises:
        ResolutionError: If the hook fails
    """
    hook = node.spec.finalize
    if hook is None:
        return realized
    try:
        result = hook(node, world, styles, realized)
    except ResolutionError:
        raise
    except Exception as e:
        raise _resolution_error(node, e) from e
    if debug_enabled():
        logger.debug(f"{node.kind.value}: finalized {node!r}")
    return result


# ============================================================================
# Realizer
# ============================================================================


class Realizer:
    """Realize whole content trees against a frozen recipe table.

    Realization is a pure function of (content, style chain, recipe table,
    world), so results may be memoized per (subtree, chain). The memo is
    shared across threads and guarded by a lock.
    """

    def __init__(
        self,
        world: World,
        recipes: RecipeTable,
        *,
        memoize: bool = True,
        max_show_depth: int = DEFAULT_MAX_SHOW_DEPTH,
        max_workers: int = 1,
    ):
        self.world = world
        self.recipes = recipes
        self.memoize = memoize
        self.max_show_depth = max_show_depth
        self.max_workers = max_workers
        self.cache_hits = 0
        self._memo: dict[tuple[ContentNode, StyleChain], ContentNode] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls, world: World, config: RealizeConfig, recipes: RecipeTable
    ) -> Realizer:
        """Create a realizer from the `realize` section of the configuration."""
        return cls(
            world,
            recipes,
            memoize=config.memoize,
            max_show_depth=config.max_show_depth,
            max_workers=config.max_workers,
        )

    def show(self, node: ContentNode, styles: StyleChain) -> Shown:
        return show(node, self.world, styles, self.recipes)

    def finalize(
        self, node: ContentNode, styles: StyleChain, realized: ContentNode
    ) -> ContentNode:
        return finalize(node, self.world, styles, realized)

    def realize(self, content: ContentNode, styles: StyleChain | None = None) -> ContentNode:
        """Realize a content tree.

        A top-level sequence is realized child by child on a thread pool when
        the realizer has more than one worker.

        Raises:
            ResolutionError: If any part of the tree fails to realize
        """
        chain = styles if styles is not None else StyleChain()
        if self.max_workers > 1 and content.kind is ElementKind.SEQUENCE:
            children = self.realize_many(content.field("children"), chain)
            return content.with_field("children", tuple(children))
        return self._realize(content, chain, 0)

    def realize_many(
        self, contents: Sequence[ContentNode], styles: StyleChain | None = None
    ) -> list[ContentNode]:
        """Realize independent subtrees in parallel.

        Every subtree runs to completion or failure; failures are then raised
        together, in input order.

        Raises:
            AggregateResolutionError: If one or more subtrees failed
        """
        chain = styles if styles is not None else StyleChain()
        results: list[ContentNode | None] = [None] * len(contents)
        failures: list[tuple[int, ResolutionError]] = []

        with ThreadPoolExecutor(max_workers=max(self.max_workers, 1)) as pool:
            futures = {
                pool.submit(self._realize, content, chain, 0): index
                for index, content in enumerate(contents)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                except ResolutionError as e:
                    failures.append((index, e))

        if failures:
            failures.sort(key=lambda item: item[0])
            raise AggregateResolutionError([error for _, error in failures])
        return [result for result in results if result is not None]

    def _realize(self, content: ContentNode, styles: StyleChain, depth: int) -> ContentNode:
        if depth > self.max_show_depth:
            raise ResolutionError(
                f"maximum show rule depth ({self.max_show_depth}) exceeded",
                location=content.span,
                kind=content.kind.value,
            )

        if not self.memoize:
            return self._realize_uncached(content, styles, depth)

        key = (content, styles)
        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                self.cache_hits += 1
        if cached is not None:
            if debug_enabled():
                logger.debug(f"{content.kind.value}: memo hit")
            return cached

        result = self._realize_uncached(content, styles, depth)
        with self._lock:
            self._memo[key] = result
        return result

    def _realize_uncached(
        self, content: ContentNode, styles: StyleChain, depth: int
    ) -> ContentNode:
        if content.kind is ElementKind.STYLED:
            inner = styles.chain(content.field("styles"))
            return content.with_field("body", self._realize(content.field("body"), inner, depth))
        if content.kind is ElementKind.SEQUENCE:
            return content.map_children(lambda child: self._realize(child, styles, depth))

        shown = self.show(content, styles)
        settled = shown.settled
        depth += len(shown.applied)

        if content.spec.finalize is not None and not self.recipes.processed(content):
            # Finalize the original around whatever it was shown as, recipe
            # output included.
            output = self.finalize(content, styles, shown.realized)
            return self._realize(output, styles, depth + 1)

        if settled.kind in STRUCTURAL_KINDS:
            return self._realize(settled, styles, depth)
        if settled.spec.show is None:
            # Layout primitive: keep the node, realize what it contains.
            return settled.map_children(lambda child: self._realize(child, styles, depth))
        return self._realize(shown.realized, styles, depth + 1)


def realize(
    content: ContentNode,
    world: World,
    styles: StyleChain,
    recipes: RecipeTable,
) -> ContentNode:
    """Realize a content tree without memoization."""
    return Realizer(world, recipes, memoize=False).realize(content, styles)
