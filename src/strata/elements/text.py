"""Text, sequences and inline emphasis."""

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
from strata.styles import StyleChain, StyleMap, style_key
from strata.values import Em, FontStyle, FontWeight, Span
from strata.world import World

TEXT_SIZE = style_key(ElementKind.TEXT, "size", Em(1.0), Em.parse)
TEXT_WEIGHT = style_key(ElementKind.TEXT, "weight", FontWeight.REGULAR, FontWeight.parse)
TEXT_STYLE = style_key(ElementKind.TEXT, "style", FontStyle.NORMAL, FontStyle)
TEXT_FONT = style_key(ElementKind.TEXT, "font", "serif", str)


def _body_param() -> Param:
    return Param("body", ContentNode, "content", required=True, cast=as_content)


def show_strong(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
    """Strong emphasis sets the body in bold."""
    overlay = StyleMap()
    overlay.set(TEXT_WEIGHT, FontWeight.BOLD)
    return node.field("body").styled_with_map(overlay)


def show_emph(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
    """Emphasis toggles the body between italic and upright."""
    current = styles.get_or_default(TEXT_STYLE)
    overlay = StyleMap()
    overlay.set(
        TEXT_STYLE, FontStyle.NORMAL if current is FontStyle.ITALIC else FontStyle.ITALIC
    )
    return node.field("body").styled_with_map(overlay)


register_element(
    ElementSpec(ElementKind.TEXT, (Param("text", str, "string", required=True),))
)
register_element(
    ElementSpec(
        ElementKind.SEQUENCE,
        (Param("children", ContentNode, "content", variadic=True, cast=as_content),),
    )
)
register_element(ElementSpec(ElementKind.STRONG, (_body_param(),), show=show_strong))
register_element(ElementSpec(ElementKind.EMPH, (_body_param(),), show=show_emph))


def text(value: str, *, span: Span | None = None) -> ContentNode:
    return construct(ElementKind.TEXT, Args([value], span=span))


def sequence(*children: ContentNode | str, span: Span | None = None) -> ContentNode:
    return construct(ElementKind.SEQUENCE, Args(children, span=span))


def strong(body: ContentNode | str, *, span: Span | None = None) -> ContentNode:
    return construct(ElementKind.STRONG, Args([body], span=span))


def emph(body: ContentNode | str, *, span: Span | None = None) -> ContentNode:
    return construct(ElementKind.EMPH, Args([body], span=span))
