"""Section headings."""

from __future__ import annotations

from strata.args import Args
from strata.content import (
    ContentNode,
    ElementKind,
    ElementSpec,
    Param,
    as_content,
    construct,
    register_element,
)
from strata.elements.layout import BLOCK_ABOVE, BLOCK_BELOW, block
from strata.elements.text import TEXT_SIZE, TEXT_WEIGHT
from strata.styles import StyleChain, StyleMap, Strength
from strata.values import Em, FontWeight, Span
from strata.world import World

# level -> (text size, space above); levels past the table use the last row
HEADING_DEFAULTS: dict[int, tuple[Em, Em]] = {
    1: (Em(1.4), Em(1.8)),
    2: (Em(1.2), Em(1.44)),
    3: (Em(1.0), Em(1.44)),
}
HEADING_BELOW = Em(0.66)


def _at_least_one(level: int) -> str | None:
    return None if level >= 1 else f"must be at least 1, found {level}"


def show_heading(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
    """Headings are laid out as a block around their body."""
    return block(node.field("body"), span=node.span)


def finalize_heading(
    node: ContentNode, world: World, styles: StyleChain, realized: ContentNode
) -> ContentNode:
    """Apply the default heading look to the realized content.

    The overlay is a defaults scope: size, weight and space above are weak
    and lose to anything the author sets, while the space below is strong
    so that a weak outer spacing cannot collapse it.
    """
    level: int = node.field("level")
    size, above = HEADING_DEFAULTS[min(level, max(HEADING_DEFAULTS))]

    overlay = StyleMap(defaults=True)
    overlay.set(TEXT_SIZE, size)
    overlay.set(TEXT_WEIGHT, FontWeight.BOLD)
    overlay.set(BLOCK_ABOVE, above)
    overlay.set(BLOCK_BELOW, HEADING_BELOW, Strength.STRONG)
    return realized.styled_with_map(overlay)


register_element(
    ElementSpec(
        ElementKind.HEADING,
        (
            Param("level", int, "integer", default=1, check=_at_least_one),
            Param("body", ContentNode, "content", required=True, cast=as_content),
        ),
        show=show_heading,
        finalize=finalize_heading,
    )
)


def heading(
    body: ContentNode | str, level: int | None = None, *, span: Span | None = None
) -> ContentNode:
    """Build a heading; `level` defaults to 1."""
    named = {} if level is None else {"level": level}
    return construct(ElementKind.HEADING, Args([body], named, span=span))
