"""Style maps, style chains and the cascade that resolves them."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .content import ElementKind
from .exceptions import ValidationError


class Strength(str, Enum):
    """Precedence tag of a style entry."""

    WEAK = "weak"
    STRONG = "strong"

    @classmethod
    def parse(cls, raw: Any) -> Strength:
        """Parse a strength from its name."""
        if isinstance(raw, Strength):
            return raw
        try:
            return cls(str(raw).lower())
        except ValueError:
            raise ValidationError(f"Invalid strength: {raw!r}. Valid values: weak, strong") from None


# ============================================================================
# Style Keys
# ============================================================================


@dataclass(frozen=True)
class StyleKey:
    """A settable style property owned by an element kind.

    Attributes:
        owner: Element kind the property belongs to
        name: Property name, unique per owner
        default: Value used when no scope sets the property
        coerce: Optional parser turning raw (e.g. YAML) values into typed values
    """

    owner: ElementKind
    name: str
    default: Any = field(default=None, compare=False)
    coerce: Callable[[Any], Any] | None = field(default=None, compare=False, repr=False)

    @property
    def path(self) -> str:
        """Dotted name such as 'text.size'."""
        return f"{self.owner.value}.{self.name}"

    def parse(self, raw: Any) -> Any:
        """Convert a raw value to this key's value type.

        Raises:
            ValidationError: If the value cannot be converted
        """
        if self.coerce is None:
            return raw
        try:
            return self.coerce(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid value for '{self.path}': {e}") from e

    def __str__(self) -> str:
        return self.path


_style_keys: dict[str, StyleKey] = {}


def style_key(
    owner: ElementKind,
    name: str,
    default: Any = None,
    coerce: Callable[[Any], Any] | None = None,
) -> StyleKey:
    """Create a style key and make it resolvable by its dotted path."""
    key = StyleKey(owner, name, default, coerce)
    _style_keys[key.path] = key
    return key


def lookup_key(path: str) -> StyleKey:
    """Resolve a dotted path such as 'block.below' to its key.

    Raises:
        ValidationError: If no key is registered under that path
    """
    try:
        return _style_keys[path]
    except KeyError:
        available = ", ".join(sorted(_style_keys)) or "(none)"
        raise ValidationError(f"Unknown style key '{path}'. Available keys: {available}") from None


# ============================================================================
# Style Maps
# ============================================================================


@dataclass(frozen=True)
class StyleEntry:
    """One key/value setting with its strength."""

    key: StyleKey
    value: Any
    strength: Strength = Strength.WEAK

    @property
    def strong(self) -> bool:
        return self.strength is Strength.STRONG


class StyleMap:
    """An ordered collection of style entries, one per key.

    A map flagged with `defaults` holds lowest-precedence default styling
    (the finalize overlay of an element). Maps are copied when they are
    attached to content or pushed onto a chain, and are treated as frozen
    from then on.
    """

    def __init__(self, entries: Iterable[StyleEntry] = (), *, defaults: bool = False):
        self.defaults = defaults
        self._entries: dict[StyleKey, StyleEntry] = {}
        for entry in entries:
            self._entries[entry.key] = entry

    def set(self, key: StyleKey, value: Any, strength: Strength = Strength.WEAK) -> None:
        """Insert or overwrite the entry for a key."""
        self._entries[key] = StyleEntry(key, value, strength)

    def get_entry(self, key: StyleKey) -> StyleEntry | None:
        return self._entries.get(key)

    def entries(self) -> tuple[StyleEntry, ...]:
        """All entries in insertion order."""
        return tuple(self._entries.values())

    def merge(self, other: StyleMap) -> StyleMap:
        """Combine two maps registered at the same scope.

        Entries of this map count as registered first. For a key present in
        both, a strong entry beats a weak one; between equal strengths the
        first-registered entry wins.
        """
        merged = self.copy()
        for entry in other.entries():
            existing = merged._entries.get(entry.key)
            if existing is None or (entry.strong and not existing.strong):
                merged._entries[entry.key] = entry
        return merged

    def copy(self) -> StyleMap:
        return StyleMap(self.entries(), defaults=self.defaults)

    def __iter__(self) -> Iterator[StyleEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StyleMap):
            return NotImplemented
        return self.defaults == other.defaults and self.entries() == other.entries()

    def __hash__(self) -> int:
        return hash((self.defaults, self.entries()))

    def __repr__(self) -> str:
        inner = ", ".join(
            f"{e.key.path}={e.value}" + ("!" if e.strong else "") for e in self.entries()
        )
        prefix = "defaults" if self.defaults else "styles"
        return f"{prefix}({inner})"


# ============================================================================
# Style Chains
# ============================================================================


def _rank(entry: StyleEntry, style_map: StyleMap) -> tuple[bool, bool]:
    return (entry.strong, not style_map.defaults)


class StyleChain:
    """A persistent linked list of style maps, innermost scope first."""

    __slots__ = ("_head", "_tail", "_hash", "depth")

    def __init__(self, head: StyleMap | None = None, tail: StyleChain | None = None):
        self._head = head
        self._tail = tail
        self.depth: int = (0 if tail is None else tail.depth) + (0 if head is None else 1)
        self._hash = hash((head, tail))

    def chain(self, style_map: StyleMap) -> StyleChain:
        """Return a new chain with the map as the innermost scope."""
        if not len(style_map):
            return self
        return StyleChain(style_map.copy(), self)

    def maps(self) -> Iterator[StyleMap]:
        """Iterate over scopes from innermost to outermost."""
        link: StyleChain | None = self
        while link is not None:
            if link._head is not None:
                yield link._head
            link = link._tail

    def get_entry(self, key: StyleKey) -> StyleEntry | None:
        """Find the winning entry for a key.

        A strong entry beats a weak one wherever it sits in the chain. Among
        equal strengths, an explicit entry beats a defaults-map entry, and the
        innermost scope wins what remains.
        """
        best: StyleEntry | None = None
        best_rank = (False, False)
        for style_map in self.maps():
            entry = style_map.get_entry(key)
            if entry is None:
                continue
            rank = _rank(entry, style_map)
            if best is None or rank > best_rank:
                best, best_rank = entry, rank
                if rank == (True, True):
                    break
        return best

    def get(self, key: StyleKey) -> Any | None:
        """Resolve a key, or None if no scope sets it."""
        entry = self.get_entry(key)
        return None if entry is None else entry.value

    def get_or_default(self, key: StyleKey) -> Any:
        """Resolve a key, falling back to the key's default."""
        entry = self.get_entry(key)
        return key.default if entry is None else entry.value

    def satisfies(self, where: Mapping[StyleKey, Any]) -> bool:
        """Whether every key resolves to the required value."""
        return all(self.get_or_default(key) == value for key, value in where.items())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, StyleChain):
            return NotImplemented
        return self._hash == other._hash and list(self.maps()) == list(other.maps())

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return f"StyleChain({list(self.maps())!r})"
