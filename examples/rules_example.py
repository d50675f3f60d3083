"""Example show rules for Strata documents.

This file demonstrates how to use show rules to:
- Decorate headings while keeping their default look
- Replace strong emphasis in text that is already bold

Rules must be pure: realization may memoize their results and run them on
several threads.

Usage:
    strata render examples/document.yaml --rules-file examples/rules_example.py
"""

from strata.content import ContentNode, ElementKind
from strata.elements import TEXT_WEIGHT, sequence
from strata.recipes import show_rule
from strata.styles import StyleChain
from strata.values import FontWeight
from strata.world import World


@show_rule(ElementKind.HEADING, priority=100)
def section_marks(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
    """Prefix top-level headings with a section sign.

    The heading is returned inside the new content, so it is still shown and
    finalized as a heading; this rule does not run on it again.
    """
    if node.field("level") > 1:
        return node
    return sequence("§ ", node)


@show_rule(ElementKind.STRONG, where={TEXT_WEIGHT: FontWeight.BOLD})
def strong_in_bold(node: ContentNode, world: World, styles: StyleChain) -> ContentNode:
    """Strong text that is already bold is set between markers instead."""
    return sequence("_", node.field("body"), "_")
