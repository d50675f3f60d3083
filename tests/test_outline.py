"""Tests for per-node style resolution of realized content."""

from __future__ import annotations

import pytest

from strata.elements import TEXT_FONT, block, heading, sequence, strong, text
from strata.exceptions import FontNotFoundError
from strata.outline import describe, iter_styled, resolve_text
from strata.realize import realize
from strata.recipes import RecipeRegistry
from strata.styles import StyleChain, StyleMap
from strata.values import FontStyle, FontWeight
from strata.world import StaticWorld


class TestIterStyled:
    """Test walking realized content with its style chains."""

    def test_structural_nodes_are_skipped(self, root: StyleChain) -> None:
        doc = sequence(block("a"), strong("b"))
        kinds = [node.kind.value for node, _, _ in iter_styled(doc, root)]
        assert kinds == ["block", "text", "strong", "text"]

    def test_depth(self, root: StyleChain) -> None:
        doc = block(sequence("a", block("b")))
        depths = [(node.kind.value, depth) for node, _, depth in iter_styled(doc, root)]
        assert depths == [("block", 0), ("text", 1), ("block", 1), ("text", 2)]

    def test_scopes_are_entered(self, root: StyleChain) -> None:
        overlay = StyleMap()
        overlay.set(TEXT_FONT, "Libertinus Serif")
        doc = sequence(text("x").styled_with_map(overlay), "y")
        chains = {node.field("text"): chain for node, chain, _ in iter_styled(doc, root)}
        assert chains["x"].get(TEXT_FONT) == "Libertinus Serif"
        assert chains["y"].get(TEXT_FONT) is None


class TestResolveText:
    """Test resolving text properties."""

    def test_defaults(self, world: StaticWorld, root: StyleChain) -> None:
        resolved = resolve_text(text("x"), root, world, 10.0)
        assert resolved.size == 10.0
        assert resolved.weight == FontWeight.REGULAR
        assert resolved.style is FontStyle.NORMAL
        assert resolved.font == "serif"
        assert resolved.cap_height == pytest.approx(7.0)

    def test_font_metrics(self, world: StaticWorld, root: StyleChain) -> None:
        overlay = StyleMap()
        overlay.set(TEXT_FONT, "libertinus serif")
        resolved = resolve_text(text("x"), root.chain(overlay), world, 10.0)
        assert resolved.font == "Libertinus Serif"
        assert resolved.cap_height == pytest.approx(6.5)

    def test_unknown_font(self, world: StaticWorld, root: StyleChain) -> None:
        overlay = StyleMap()
        overlay.set(TEXT_FONT, "Missing Sans")
        with pytest.raises(FontNotFoundError):
            resolve_text(text("x"), root.chain(overlay), world, 10.0)


class TestDescribe:
    """Test the outline rendering."""

    def test_heading_outline(self, world: StaticWorld, root: StyleChain) -> None:
        realized = realize(heading("Intro", 2), world, root, RecipeRegistry().snapshot())
        assert describe(realized, world, root) == [
            "block above=1.44em below=0.66em",
            '  text "Intro" size=13.2pt weight=bold style=normal font=serif',
        ]

    def test_first_level_heading(self, world: StaticWorld, root: StyleChain) -> None:
        realized = realize(heading("Title"), world, root, RecipeRegistry().snapshot())
        lines = describe(realized, world, root, base_size=10.0)
        assert lines[0] == "block above=1.8em below=0.66em"
        assert "size=14pt" in lines[1]

    def test_plain_block(self, world: StaticWorld, root: StyleChain) -> None:
        lines = describe(block("Body"), world, root)
        assert lines == [
            "block above=1.2em below=1.2em",
            '  text "Body" size=11pt weight=regular style=normal font=serif',
        ]
