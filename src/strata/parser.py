"""YAML parser for Strata documents.

Document format:
- a string is a text node;
- a list is a sequence;
- a single-key mapping `{kind: args}` constructs an element of that kind.
  A mapping as `args` supplies named arguments, anything else is the single
  positional argument. Nested values follow the same rules.

The document may also be wrapped in a top-level `content:` key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .args import Args
from .content import STRUCTURAL_KINDS, ContentNode, ElementKind, as_content, construct
from .exceptions import ConstructError, ParseError
from .values import Span


class DocumentParser:
    """Parser for Strata document YAML files.

    Nodes are built from the composed YAML node graph so that every element
    carries the span it was written at.
    """

    def __init__(self, source: str = "<string>"):
        self.source = source
        self._loader: yaml.SafeLoader | None = None

    def parse_file(self, file_path: Path | str) -> ContentNode:
        """Parse a YAML file into content."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")
        self.source = str(path)
        return self.parse_string(path.read_text(encoding="utf-8"))

    def parse_string(self, text: str) -> ContentNode:
        """Parse YAML text into content."""
        loader = yaml.SafeLoader(text)
        self._loader = loader
        try:
            try:
                root = loader.get_single_node()
            except yaml.YAMLError as e:
                raise ParseError(f"Failed to parse YAML: {e}") from e

            if root is None:
                raise ParseError("Document is empty")
            if isinstance(root, yaml.MappingNode) and self._key_names(root) == ["content"]:
                root = root.value[0][1]
            return self._build(root)
        finally:
            self._loader = None
            loader.dispose()

    def _span(self, node: yaml.Node) -> Span:
        mark = node.start_mark
        return Span(self.source, mark.line + 1, mark.column + 1)

    def _scalar(self, node: yaml.ScalarNode) -> Any:
        assert self._loader is not None
        return self._loader.construct_object(node, deep=True)

    def _key_names(self, node: yaml.MappingNode) -> list[Any]:
        return [self._scalar(key) for key, _ in node.value if isinstance(key, yaml.ScalarNode)]

    def _build(self, node: yaml.Node) -> ContentNode:
        value = self._value(node)
        content = as_content(value)
        if not isinstance(content, ContentNode):
            raise ParseError(f"{self._span(node)}: expected content, found {value!r}")
        return content

    def _value(self, node: yaml.Node) -> Any:
        """Convert a YAML node to an argument value, building elements on the way."""
        if isinstance(node, yaml.ScalarNode):
            value = self._scalar(node)
            if isinstance(value, str):
                return ContentNode(ElementKind.TEXT, (value,), span=self._span(node))
            return value
        if isinstance(node, yaml.SequenceNode):
            children = [self._build(item) for item in node.value]
            return construct(ElementKind.SEQUENCE, Args(children, span=self._span(node)))
        if isinstance(node, yaml.MappingNode):
            return self._element(node)
        raise ParseError(f"{self._span(node)}: unsupported YAML node")

    def _element(self, node: yaml.MappingNode) -> ContentNode:
        span = self._span(node)
        if len(node.value) != 1:
            raise ParseError(f"{span}: an element must be a mapping with exactly one key")
        key_node, args_node = node.value[0]
        name = self._scalar(key_node) if isinstance(key_node, yaml.ScalarNode) else None
        try:
            kind = ElementKind(name)
        except ValueError:
            raise ParseError(f"{span}: unknown element '{name}'") from None
        if kind in STRUCTURAL_KINDS:
            raise ParseError(f"{span}: '{name}' cannot be written directly")

        if isinstance(args_node, yaml.MappingNode):
            named = {
                self._scalar(k): self._argument(v)
                for k, v in args_node.value
                if isinstance(k, yaml.ScalarNode)
            }
            args = Args(named=named, span=span)
        else:
            args = Args([self._argument(args_node)], span=span)

        try:
            return construct(kind, args)
        except ConstructError as e:
            raise ParseError(f"{span}: {name}: {e}") from e

    def _argument(self, node: yaml.Node) -> Any:
        # Plain strings stay strings here; content parameters cast them.
        if isinstance(node, yaml.ScalarNode):
            return self._scalar(node)
        return self._value(node)


def parse_document(path: Path | str) -> ContentNode:
    """Parse a document file into content."""
    return DocumentParser().parse_file(path)
