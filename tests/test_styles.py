"""Tests for style maps, style chains and the cascade."""

from __future__ import annotations

import pytest

from strata.elements import BLOCK_ABOVE, BLOCK_BELOW, TEXT_SIZE, TEXT_WEIGHT
from strata.exceptions import ValidationError
from strata.styles import StyleChain, StyleMap, Strength, lookup_key
from strata.values import Em, FontWeight


def _map(*entries: tuple, defaults: bool = False) -> StyleMap:
    style_map = StyleMap(defaults=defaults)
    for entry in entries:
        style_map.set(*entry)
    return style_map


class TestStyleMap:
    """Test style map entries."""

    def test_set_overwrites(self) -> None:
        style_map = _map((TEXT_SIZE, Em(1.0)), (TEXT_SIZE, Em(2.0), Strength.STRONG))
        assert len(style_map) == 1
        entry = style_map.get_entry(TEXT_SIZE)
        assert entry is not None
        assert entry.value == Em(2.0)
        assert entry.strong

    def test_entries_keep_insertion_order(self) -> None:
        style_map = _map((TEXT_WEIGHT, FontWeight.BOLD), (TEXT_SIZE, Em(1.2)))
        assert [e.key for e in style_map.entries()] == [TEXT_WEIGHT, TEXT_SIZE]

    def test_merge_first_registered_weak_wins(self) -> None:
        first = _map((TEXT_SIZE, Em(1.1)))
        second = _map((TEXT_SIZE, Em(1.9)))
        assert first.merge(second).get_entry(TEXT_SIZE).value == Em(1.1)

    def test_merge_strong_beats_weak(self) -> None:
        first = _map((TEXT_SIZE, Em(1.1)))
        second = _map((TEXT_SIZE, Em(1.9), Strength.STRONG))
        assert first.merge(second).get_entry(TEXT_SIZE).value == Em(1.9)

    def test_merge_first_registered_strong_wins(self) -> None:
        first = _map((TEXT_SIZE, Em(1.1), Strength.STRONG))
        second = _map((TEXT_SIZE, Em(1.9), Strength.STRONG))
        assert first.merge(second).get_entry(TEXT_SIZE).value == Em(1.1)

    def test_merge_does_not_mutate(self) -> None:
        first = _map((TEXT_SIZE, Em(1.1)))
        first.merge(_map((TEXT_WEIGHT, FontWeight.BOLD)))
        assert TEXT_WEIGHT not in first


class TestStyleChain:
    """Test cascade lookups."""

    def test_empty_chain(self, root: StyleChain) -> None:
        assert root.get(TEXT_SIZE) is None
        assert root.get_or_default(TEXT_SIZE) == Em(1.0)

    def test_innermost_wins(self, root: StyleChain) -> None:
        chain = root.chain(_map((TEXT_SIZE, Em(1.1)))).chain(_map((TEXT_SIZE, Em(0.9))))
        assert chain.get(TEXT_SIZE) == Em(0.9)

    def test_lookup_walks_outward(self, root: StyleChain) -> None:
        chain = root.chain(_map((TEXT_WEIGHT, FontWeight.BOLD))).chain(_map((TEXT_SIZE, Em(2.0))))
        assert chain.get(TEXT_WEIGHT) == FontWeight.BOLD
        assert chain.depth == 2

    def test_strong_beats_inner_weak(self, root: StyleChain) -> None:
        chain = root.chain(_map((TEXT_SIZE, Em(1.1), Strength.STRONG))).chain(
            _map((TEXT_SIZE, Em(0.9)))
        )
        assert chain.get(TEXT_SIZE) == Em(1.1)

    def test_outer_value_beats_finalize_default(self, root: StyleChain) -> None:
        """An outer setting of any strength beats a weak finalize default."""
        overlay = _map((TEXT_SIZE, Em(1.4)), defaults=True)
        for strength in Strength:
            chain = root.chain(_map((TEXT_SIZE, Em(0.8), strength))).chain(overlay)
            assert chain.get(TEXT_SIZE) == Em(0.8)

    def test_finalize_default_applies_without_outer_value(self, root: StyleChain) -> None:
        overlay = _map((TEXT_SIZE, Em(1.4)), defaults=True)
        assert root.chain(overlay).get(TEXT_SIZE) == Em(1.4)

    def test_strong_default_beats_outer_weak(self, root: StyleChain) -> None:
        """A strong finalize entry overrides an outer weak entry regardless of order."""
        outer = _map((BLOCK_BELOW, Em(0.1)))
        overlay = _map((BLOCK_BELOW, Em(0.66), Strength.STRONG), defaults=True)
        assert root.chain(outer).chain(overlay).get(BLOCK_BELOW) == Em(0.66)
        assert root.chain(overlay).chain(outer).get(BLOCK_BELOW) == Em(0.66)

    def test_strong_explicit_beats_strong_default(self, root: StyleChain) -> None:
        outer = _map((BLOCK_BELOW, Em(2.0), Strength.STRONG))
        overlay = _map((BLOCK_BELOW, Em(0.66), Strength.STRONG), defaults=True)
        assert root.chain(outer).chain(overlay).get(BLOCK_BELOW) == Em(2.0)

    def test_chain_is_persistent(self, root: StyleChain) -> None:
        base = root.chain(_map((TEXT_SIZE, Em(1.1))))
        base.chain(_map((TEXT_SIZE, Em(3.0))))
        assert base.get(TEXT_SIZE) == Em(1.1)

    def test_empty_map_is_not_pushed(self, root: StyleChain) -> None:
        assert root.chain(StyleMap()) is root

    def test_chain_copies_pushed_map(self, root: StyleChain) -> None:
        style_map = _map((TEXT_SIZE, Em(1.1)))
        chain = root.chain(style_map)
        style_map.set(TEXT_SIZE, Em(5.0))
        assert chain.get(TEXT_SIZE) == Em(1.1)

    def test_equal_chains_hash_equal(self, root: StyleChain) -> None:
        a = root.chain(_map((TEXT_SIZE, Em(1.1))))
        b = StyleChain().chain(_map((TEXT_SIZE, Em(1.1))))
        assert a == b
        assert hash(a) == hash(b)

    def test_satisfies(self, root: StyleChain) -> None:
        chain = root.chain(_map((TEXT_WEIGHT, FontWeight.BOLD)))
        assert chain.satisfies({TEXT_WEIGHT: FontWeight.BOLD})
        assert not chain.satisfies({TEXT_WEIGHT: FontWeight.REGULAR})
        assert chain.satisfies({BLOCK_ABOVE: Em(1.2)})


class TestStyleKeys:
    """Test key lookup and value parsing."""

    def test_lookup_by_path(self) -> None:
        assert lookup_key("text.size") is TEXT_SIZE
        assert lookup_key("block.below") is BLOCK_BELOW

    def test_unknown_path(self) -> None:
        with pytest.raises(ValidationError, match="Unknown style key 'text.colour'"):
            lookup_key("text.colour")

    def test_parse_values(self) -> None:
        assert TEXT_SIZE.parse("1.4em") == Em(1.4)
        assert TEXT_WEIGHT.parse("bold") == FontWeight.BOLD
        assert TEXT_WEIGHT.parse(600) == FontWeight(600)

    def test_parse_invalid_value(self) -> None:
        with pytest.raises(ValidationError, match="text.size"):
            TEXT_SIZE.parse("12pt")

    def test_parse_strength(self) -> None:
        assert Strength.parse("STRONG") is Strength.STRONG
        with pytest.raises(ValidationError, match="Invalid strength"):
            Strength.parse("medium")
