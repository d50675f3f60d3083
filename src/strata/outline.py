"""Hand-off of realized content to layout: per-node style resolution.

Layout walks realized content together with the style chain in effect at
each node. These helpers do that walk and resolve the properties a layout
engine asks for, and render a readable outline of the result.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .content import ContentNode, ElementKind
from .elements import BLOCK_ABOVE, BLOCK_BELOW, TEXT_FONT, TEXT_SIZE, TEXT_STYLE, TEXT_WEIGHT
from .styles import StyleChain
from .values import Em, FontStyle, FontWeight
from .world import World


def iter_styled(
    content: ContentNode, styles: StyleChain | None = None, depth: int = 0
) -> Iterator[tuple[ContentNode, StyleChain, int]]:
    """Yield every non-structural node with its style chain and nesting depth.

    Style scopes are entered as they are encountered; sequences and style
    scopes themselves are not yielded.
    """
    chain = styles if styles is not None else StyleChain()
    if content.kind is ElementKind.STYLED:
        yield from iter_styled(content.field("body"), chain.chain(content.field("styles")), depth)
        return
    if content.kind is ElementKind.SEQUENCE:
        for child in content.children():
            yield from iter_styled(child, chain, depth)
        return
    yield content, chain, depth
    for child in content.children():
        yield from iter_styled(child, chain, depth + 1)


@dataclass(frozen=True)
class ResolvedText:
    """Text with every property a layout engine needs."""

    text: str
    size: float  # pt
    weight: FontWeight
    style: FontStyle
    font: str
    cap_height: float  # pt


def resolve_text(
    node: ContentNode, styles: StyleChain, world: World, base_size: float
) -> ResolvedText:
    """Resolve the properties of a text node.

    Raises:
        FontNotFoundError: If the world does not know the font family
    """
    size: Em = styles.get_or_default(TEXT_SIZE)
    family: str = styles.get_or_default(TEXT_FONT)
    metrics = world.font(family)
    absolute = size.at(base_size)
    return ResolvedText(
        text=node.field("text"),
        size=absolute,
        weight=styles.get_or_default(TEXT_WEIGHT),
        style=styles.get_or_default(TEXT_STYLE),
        font=metrics.family,
        cap_height=metrics.to_em(metrics.cap_height) * absolute,
    )


def describe(
    content: ContentNode,
    world: World,
    styles: StyleChain | None = None,
    base_size: float = 11.0,
) -> list[str]:
    """Render realized content as an indented outline, one node per line."""
    lines: list[str] = []
    for node, chain, depth in iter_styled(content, styles):
        indent = "  " * depth
        if node.kind is ElementKind.TEXT:
            resolved = resolve_text(node, chain, world, base_size)
            lines.append(
                f'{indent}text "{resolved.text}" size={resolved.size:g}pt '
                f"weight={resolved.weight} style={resolved.style.value} font={resolved.font}"
            )
        elif node.kind is ElementKind.BLOCK:
            above = chain.get_or_default(BLOCK_ABOVE)
            below = chain.get_or_default(BLOCK_BELOW)
            lines.append(f"{indent}block above={above} below={below}")
        else:
            lines.append(f"{indent}{node.kind.value}")
    return lines
