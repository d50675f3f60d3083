"""Block containers and styled scopes."""

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
from strata.styles import StyleMap, style_key
from strata.values import Em, Span

BLOCK_ABOVE = style_key(ElementKind.BLOCK, "above", Em(1.2), Em.parse)
BLOCK_BELOW = style_key(ElementKind.BLOCK, "below", Em(1.2), Em.parse)


def _own_copy(value: object) -> object:
    # A node hashes its fields once, so it must not share the caller's map.
    return value.copy() if isinstance(value, StyleMap) else value


register_element(
    ElementSpec(
        ElementKind.BLOCK,
        (Param("body", ContentNode, "content", required=True, cast=as_content),),
    )
)
register_element(
    ElementSpec(
        ElementKind.STYLED,
        (
            Param("styles", StyleMap, "style map", required=True, cast=_own_copy),
            Param("body", ContentNode, "content", required=True, cast=as_content),
        ),
    )
)


def block(body: ContentNode | str, *, span: Span | None = None) -> ContentNode:
    """A generic block-level container."""
    return construct(ElementKind.BLOCK, Args([body], span=span))


def styled(body: ContentNode | str, styles: StyleMap) -> ContentNode:
    """Wrap content in a style scope (equivalent to body.styled_with_map)."""
    return as_content(body).styled_with_map(styles)
