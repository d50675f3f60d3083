"""Content nodes, element kinds and the element registry."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from .args import Args
from .exceptions import InvariantViolationError, TypeMismatchError, ValidationError

if TYPE_CHECKING:
    from .styles import StyleChain, StyleMap
    from .values import Span
    from .world import World


class ElementKind(str, Enum):
    """Closed set of element kinds known to the realizer."""

    TEXT = "text"
    SEQUENCE = "sequence"
    STYLED = "styled"
    BLOCK = "block"
    STRONG = "strong"
    EMPH = "emph"
    HEADING = "heading"


# Kinds that only group or style other content. They are walked by the
# realizer and are never targets of recipes.
STRUCTURAL_KINDS = frozenset({ElementKind.SEQUENCE, ElementKind.STYLED})


# ============================================================================
# Content Nodes
# ============================================================================


@dataclass(frozen=True, eq=False)
class ContentNode:
    """An immutable element instance.

    Field values are stored in the declared parameter order of the kind, which
    is also the order the structural hash combines them in. The hash is
    computed once at construction so memo lookups on whole subtrees stay cheap.
    """

    kind: ElementKind
    values: tuple[Any, ...]
    guards: frozenset[int] = frozenset()
    span: Span | None = None
    _hash: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_hash", hash((self.kind, self.values, self.guards)))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, ContentNode):
            return NotImplemented
        if self._hash != other._hash:
            return False
        return (
            self.kind == other.kind and self.guards == other.guards and self.values == other.values
        )

    def __repr__(self) -> str:
        names = element_spec(self.kind).field_names
        inner = ", ".join(f"{name}={value!r}" for name, value in zip(names, self.values))
        guards = f" guarded={sorted(self.guards)}" if self.guards else ""
        return f"{self.kind.value}({inner}){guards}"

    # --- introspection -----------------------------------------------------

    @property
    def spec(self) -> ElementSpec:
        """Registry entry for this node's kind."""
        return element_spec(self.kind)

    @property
    def fields(self) -> Mapping[str, Any]:
        """Ordered read-only view of field name to value."""
        return dict(zip(self.spec.field_names, self.values))

    def field(self, name: str) -> Any | None:
        """Return the stored value of a field, or None for unknown names."""
        accessor = self.spec.accessors.get(name)
        if accessor is None:
            return None
        return accessor(self)

    @property
    def body(self) -> ContentNode | None:
        """The nested body content, for kinds that have one."""
        return self.field("body")

    def children(self) -> Iterator[ContentNode]:
        """Iterate over directly nested content, in field order."""
        for value in self.values:
            if isinstance(value, ContentNode):
                yield value
            elif isinstance(value, tuple):
                yield from (item for item in value if isinstance(item, ContentNode))

    def same_element(self, other: ContentNode) -> bool:
        """Compare kind and fields, ignoring this node's own guards."""
        return self.kind == other.kind and self.values == other.values

    # --- copy-on-write rebuilding -----------------------------------------

    def with_field(self, name: str, value: Any) -> ContentNode:
        """Return a copy with one field replaced."""
        index = self.spec.field_names.index(name)
        values = self.values[:index] + (value,) + self.values[index + 1 :]
        return replace(self, values=values)

    def map_children(self, func: Callable[[ContentNode], ContentNode]) -> ContentNode:
        """Apply func to every directly nested node.

        Returns self unchanged when func returned every child as-is, so
        untouched subtrees keep their identity.
        """
        changed = False
        values: list[Any] = []
        for value in self.values:
            if isinstance(value, ContentNode):
                new_value: Any = func(value)
            elif isinstance(value, tuple) and any(isinstance(v, ContentNode) for v in value):
                new_value = tuple(func(v) if isinstance(v, ContentNode) else v for v in value)
            else:
                new_value = value
            changed = changed or new_value is not value and new_value != value
            values.append(new_value)
        if not changed:
            return self
        return replace(self, values=tuple(values))

    # --- guards ------------------------------------------------------------

    def with_guard(self, recipe_id: int) -> ContentNode:
        """Mark this node as already processed by a recipe."""
        return self.with_guards(frozenset({recipe_id}))

    def with_guards(self, guards: frozenset[int]) -> ContentNode:
        """Add several guards at once."""
        if guards <= self.guards:
            return self
        return replace(self, guards=self.guards | guards)

    def is_guarded(self, recipe_id: int) -> bool:
        """Whether the recipe is blocked from processing this node."""
        return recipe_id in self.guards

    def unguard(self, recipe_id: int) -> ContentNode:
        """Remove a guard from this node and every descendant."""
        node = self.unguard_parts(recipe_id)
        if recipe_id in node.guards:
            node = replace(node, guards=node.guards - {recipe_id})
        return node

    def unguard_parts(self, recipe_id: int) -> ContentNode:
        """Remove a guard from every descendant, keeping this node's own guards."""
        return self.map_children(lambda child: child.unguard(recipe_id))

    def guard_matching(self, target: ContentNode, guards: frozenset[int]) -> ContentNode:
        """Guard every node in this tree that rebuilds `target`.

        A node matches when it has the same kind and fields as `target`,
        whatever guards either of them carries.
        """
        node = self.map_children(lambda child: child.guard_matching(target, guards))
        if node.same_element(target):
            node = node.with_guards(guards)
        return node

    # --- styling -----------------------------------------------------------

    def styled_with_map(self, styles: StyleMap) -> ContentNode:
        """Wrap this content in a new innermost style scope."""
        return ContentNode(ElementKind.STYLED, (styles.copy(), self), span=self.span)


# ============================================================================
# Element Registry
# ============================================================================

ShowFunc = Callable[[ContentNode, "World", "StyleChain"], ContentNode]
FinalizeFunc = Callable[[ContentNode, "World", "StyleChain", ContentNode], ContentNode]
CheckFunc = Callable[[Any], "str | None"]


def _type_name(value: Any) -> str:
    if isinstance(value, ContentNode):
        return "content"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def as_content(value: Any) -> Any:
    """Coerce strings and lists to content; other values pass through."""
    if isinstance(value, str):
        return ContentNode(ElementKind.TEXT, (value,))
    if isinstance(value, (list, tuple)) and all(isinstance(v, (str, ContentNode)) for v in value):
        return ContentNode(ElementKind.SEQUENCE, (tuple(as_content(v) for v in value),))
    return value


@dataclass(frozen=True)
class Param:
    """A constructor parameter of an element kind.

    Attributes:
        name: Field name
        types: Accepted Python type(s) after casting
        expected: Human-readable type name used in error messages
        required: Whether construction fails when the argument is absent
        variadic: Whether the parameter collects all remaining positional arguments
        default: Value used when an optional argument is absent
        cast: Optional conversion applied before type checking
        check: Optional invariant check returning an error detail, or None if valid
    """

    name: str
    types: type | tuple[type, ...]
    expected: str
    required: bool = False
    variadic: bool = False
    default: Any = None
    cast: Callable[[Any], Any] | None = None
    check: CheckFunc | None = None

    def accept(self, value: Any) -> Any:
        """Cast, type check and validate one supplied value."""
        if self.cast is not None:
            value = self.cast(value)
        bool_for_int = isinstance(value, bool) and bool not in _as_tuple(self.types)
        if not isinstance(value, self.types) or bool_for_int:
            raise TypeMismatchError(self.name, self.expected, _type_name(value))
        if self.check is not None:
            detail = self.check(value)
            if detail is not None:
                raise InvariantViolationError(self.name, detail)
        return value


def _as_tuple(types: type | tuple[type, ...]) -> tuple[type, ...]:
    return types if isinstance(types, tuple) else (types,)


@dataclass(frozen=True)
class ElementSpec:
    """Behaviour attached to an element kind.

    The accessor table maps each field name to a getter over the node's
    value tuple; it is built once here so that field() never reflects.
    """

    kind: ElementKind
    params: tuple[Param, ...]
    show: ShowFunc | None = None
    finalize: FinalizeFunc | None = None
    field_names: tuple[str, ...] = field(init=False)
    accessors: Mapping[str, Callable[[ContentNode], Any]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        names = tuple(p.name for p in self.params)
        accessors = {name: _field_getter(index) for index, name in enumerate(names)}
        object.__setattr__(self, "field_names", names)
        object.__setattr__(self, "accessors", accessors)


def _field_getter(index: int) -> Callable[[ContentNode], Any]:
    def get(node: ContentNode) -> Any:
        return node.values[index]

    return get


_elements: dict[ElementKind, ElementSpec] = {}


def register_element(spec: ElementSpec) -> ElementSpec:
    """Register (or replace) the behaviour of an element kind.

    Raises:
        ValidationError: If the spec is inconsistent
    """
    if spec.finalize is not None and spec.show is None:
        raise ValidationError(f"Element '{spec.kind.value}' has finalize but no built-in show")
    if spec.kind in STRUCTURAL_KINDS and (spec.show is not None or spec.finalize is not None):
        raise ValidationError(f"Structural element '{spec.kind.value}' cannot have show rules")
    _elements[spec.kind] = spec
    return spec


def element_spec(kind: ElementKind) -> ElementSpec:
    """Look up the registered behaviour of a kind.

    Raises:
        ValidationError: If the kind has not been registered
    """
    try:
        return _elements[kind]
    except KeyError:
        raise ValidationError(f"Element '{kind.value}' is not registered") from None


def construct(kind: ElementKind, args: Args) -> ContentNode:
    """Build a node of the given kind from an argument list.

    Raises:
        MissingArgumentError: If a required argument is absent
        TypeMismatchError: If an argument has the wrong type
        InvariantViolationError: If an argument fails its check
        UnexpectedArgumentError: If arguments are left over
    """
    spec = element_spec(kind)
    values: list[Any] = []
    for param in spec.params:
        if param.variadic:
            values.append(tuple(param.accept(item) for item in args.take_all()))
            continue
        raw = args.expect(param.name) if param.required else args.named(param.name)
        if raw is None and not param.required:
            values.append(param.default)
        else:
            values.append(param.accept(raw))
    args.finish()
    return ContentNode(kind, tuple(values), span=args.span)
