"""Tests for the heading element and its finalize overlay."""

# pyright: reportUnusedFunction=false

from __future__ import annotations

import dataclasses

import pytest

from strata import content as content_module
from strata.content import ContentNode, ElementKind, element_spec
from strata.elements import (
    BLOCK_ABOVE,
    BLOCK_BELOW,
    HEADING_DEFAULTS,
    TEXT_SIZE,
    TEXT_WEIGHT,
    block,
    finalize_heading,
    heading,
    sequence,
    strong,
    text,
)
from strata.outline import iter_styled
from strata.realize import Realizer, finalize, show
from strata.recipes import RecipeRegistry
from strata.styles import StyleChain, StyleMap, Strength
from strata.values import Em, FontWeight
from strata.world import StaticWorld, World


def _overlay(node: ContentNode) -> StyleMap:
    assert node.kind is ElementKind.STYLED
    styles: StyleMap = node.field("styles")
    return styles


@pytest.fixture
def finalize_calls(monkeypatch: pytest.MonkeyPatch) -> list[ContentNode]:
    """Record every call of the heading finalize hook."""
    calls: list[ContentNode] = []

    def counting(
        node: ContentNode, world: World, styles: StyleChain, realized: ContentNode
    ) -> ContentNode:
        calls.append(node)
        return finalize_heading(node, world, styles, realized)

    spec = dataclasses.replace(element_spec(ElementKind.HEADING), finalize=counting)
    monkeypatch.setitem(content_module._elements, ElementKind.HEADING, spec)
    return calls


class TestDefaultsTable:
    """Test the per-level default styling."""

    @pytest.mark.parametrize(
        ("level", "size", "above"),
        [
            (1, Em(1.4), Em(1.8)),
            (2, Em(1.2), Em(1.44)),
            (3, Em(1.0), Em(1.44)),
            (5, Em(1.0), Em(1.44)),
        ],
    )
    def test_overlay_values(
        self, level: int, size: Em, above: Em, world: StaticWorld, root: StyleChain
    ) -> None:
        node = heading("Intro", level)
        realized = block("Intro")
        overlay = _overlay(finalize(node, world, root, realized))

        assert overlay.defaults
        assert overlay.get_entry(TEXT_SIZE).value == size
        assert overlay.get_entry(TEXT_WEIGHT).value == FontWeight.BOLD
        assert overlay.get_entry(BLOCK_ABOVE).value == above
        assert overlay.get_entry(BLOCK_BELOW).value == Em(0.66)

    def test_strengths(self, world: StaticWorld, root: StyleChain) -> None:
        overlay = _overlay(finalize(heading("Intro", 2), world, root, block("Intro")))
        assert overlay.get_entry(TEXT_SIZE).strength is Strength.WEAK
        assert overlay.get_entry(TEXT_WEIGHT).strength is Strength.WEAK
        assert overlay.get_entry(BLOCK_ABOVE).strength is Strength.WEAK
        assert overlay.get_entry(BLOCK_BELOW).strength is Strength.STRONG

    def test_table_has_three_rows(self) -> None:
        assert sorted(HEADING_DEFAULTS) == [1, 2, 3]

    def test_wraps_realized_content(self, world: StaticWorld, root: StyleChain) -> None:
        realized = block("Replaced")
        result = finalize(heading("Intro"), world, root, realized)
        assert result.field("body") == realized

    def test_kinds_without_hook_pass_through(self, world: StaticWorld, root: StyleChain) -> None:
        realized = text("x")
        assert finalize(block("x"), world, root, realized) is realized

    def test_uses_heading_fields(
        self, registry: RecipeRegistry, world: StaticWorld, root: StyleChain
    ) -> None:
        """The overlay depends on the heading's level, not on what show produced."""
        node = heading("Intro", 1)
        shown = show(node, world, root, registry.snapshot())
        overlay = _overlay(finalize(shown.settled, world, root, text("flattened")))
        assert overlay.get_entry(TEXT_SIZE).value == Em(1.4)


class TestRealizedHeading:
    """Test headings through full realization."""

    def test_realized_structure(self, world: StaticWorld, root: StyleChain) -> None:
        realized = Realizer(world, RecipeRegistry().snapshot()).realize(heading("Intro", 2), root)
        overlay = _overlay(realized)
        assert overlay.get_entry(TEXT_SIZE).value == Em(1.2)
        assert realized.field("body") == block("Intro")

    def test_author_size_beats_default(self, world: StaticWorld, root: StyleChain) -> None:
        author = StyleMap()
        author.set(TEXT_SIZE, Em(0.9))
        realized = Realizer(world, RecipeRegistry().snapshot()).realize(heading("Intro"), root)
        chain = root.chain(author).chain(_overlay(realized))
        assert chain.get(TEXT_SIZE) == Em(0.9)
        assert chain.get(BLOCK_BELOW) == Em(0.66)

    def test_finalize_runs_once(
        self, finalize_calls: list[ContentNode], world: StaticWorld, root: StyleChain
    ) -> None:
        Realizer(world, RecipeRegistry().snapshot(), memoize=False).realize(heading("Intro"), root)
        assert len(finalize_calls) == 1

    def test_finalize_runs_once_after_identity_rule(
        self,
        finalize_calls: list[ContentNode],
        registry: RecipeRegistry,
        world: StaticWorld,
        root: StyleChain,
    ) -> None:
        @registry.show(ElementKind.HEADING)
        def rebuild(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
            return heading(node.field("body"), node.field("level"))

        Realizer(world, registry.snapshot(), memoize=False).realize(heading("Intro"), root)
        assert len(finalize_calls) == 1

    def test_finalize_runs_once_for_nested_rebuild(
        self,
        finalize_calls: list[ContentNode],
        registry: RecipeRegistry,
        world: StaticWorld,
        root: StyleChain,
    ) -> None:
        @registry.show(ElementKind.HEADING)
        def numbered(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
            return sequence("1. ", node)

        Realizer(world, registry.snapshot(), memoize=False).realize(heading("Intro"), root)
        assert len(finalize_calls) == 1

    def test_independent_realizations_each_finalize(
        self, finalize_calls: list[ContentNode], world: StaticWorld, root: StyleChain
    ) -> None:
        table = RecipeRegistry().snapshot()
        Realizer(world, table, memoize=False).realize(heading("Intro"), root)
        Realizer(world, table, memoize=False).realize(heading("Intro"), root)
        assert len(finalize_calls) == 2

    def test_replaced_heading_keeps_level_defaults(
        self,
        finalize_calls: list[ContentNode],
        registry: RecipeRegistry,
        world: StaticWorld,
        root: StyleChain,
    ) -> None:
        """A rule that swaps the heading for other content still gets its defaults."""

        @registry.show(ElementKind.HEADING)
        def as_strong(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
            return strong(node.field("body"))

        realized = Realizer(world, registry.snapshot()).realize(heading("Intro", 2), root)
        leaves = [
            (node, chain)
            for node, chain, _ in iter_styled(realized, root)
            if node.kind is ElementKind.TEXT
        ]
        assert len(leaves) == 1
        leaf, chain = leaves[0]
        assert leaf.field("text") == "Intro"
        assert chain.get(TEXT_SIZE) == Em(1.2)
        assert chain.get(TEXT_WEIGHT) == FontWeight.BOLD
        below = chain.get_entry(BLOCK_BELOW)
        assert below is not None
        assert below.value == Em(0.66)
        assert below.strength is Strength.STRONG
        assert len(finalize_calls) == 1
        assert finalize_calls[0].field("level") == 2

    def test_flattened_heading_is_finalized_around_body(
        self,
        finalize_calls: list[ContentNode],
        registry: RecipeRegistry,
        world: StaticWorld,
        root: StyleChain,
    ) -> None:
        @registry.show(ElementKind.HEADING)
        def flatten(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
            return node.field("body")

        realized = Realizer(world, registry.snapshot()).realize(heading("Intro"), root)
        assert _overlay(realized).get_entry(TEXT_SIZE).value == Em(1.4)
        assert realized.field("body").same_element(text("Intro"))
        assert len(finalize_calls) == 1
