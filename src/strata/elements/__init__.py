"""Built-in element kinds.

Importing this package registers every kind, its style keys and its
built-in show and finalize behaviour.
"""

from strata.elements.heading import HEADING_DEFAULTS, finalize_heading, heading, show_heading
from strata.elements.layout import BLOCK_ABOVE, BLOCK_BELOW, block, styled
from strata.elements.text import (
    TEXT_FONT,
    TEXT_SIZE,
    TEXT_STYLE,
    TEXT_WEIGHT,
    emph,
    sequence,
    strong,
    text,
)

__all__ = [
    "BLOCK_ABOVE",
    "BLOCK_BELOW",
    "HEADING_DEFAULTS",
    "TEXT_FONT",
    "TEXT_SIZE",
    "TEXT_STYLE",
    "TEXT_WEIGHT",
    "block",
    "emph",
    "finalize_heading",
    "heading",
    "sequence",
    "show_heading",
    "strong",
    "styled",
    "text",
]
