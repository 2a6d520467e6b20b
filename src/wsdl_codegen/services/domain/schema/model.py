#!/usr/bin/env python3
"""
Schema object model shared by the type-resolution and body-generation engine.

Nodes are produced once at ingestion (from a parsed XSD or from a raw
TypeObject mapping) and never re-inspected for shape afterwards:

- ScalarType: a primitive type name such as "xsd:string"
- TypeReference: a qualified "namespaceURI:LocalName" pointer into the registry
- ComplexType: an ordered set of child element declarations

Qualified keys use the "namespaceURI:LocalName" convention; the local name is
everything after the last ':'.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

XML_SCHEMA_URI = "http://www.w3.org/2001/XMLSchema"
XSD_PREFIXES = ("xs", "xsd", XML_SCHEMA_URI)

# Internal bookkeeping keys start with this marker
INTERNAL_MARKER = "_"

DEFAULT_OCCURS = "1"


def local_name(key: str) -> str:
    """Return the local part of a qualified key ("urn:a:Name" -> "Name")."""
    return key.rsplit(":", 1)[-1]


def namespace_part(key: str) -> Optional[str]:
    """Return the namespace part of a qualified key, or None for bare names."""
    if ":" not in key:
        return None
    return key.rsplit(":", 1)[0]


def is_internal(key: str) -> bool:
    return local_name(key).startswith(INTERNAL_MARKER)


class TypeKind(str, Enum):
    """Classification of an element's declared type."""
    SCALAR = "scalar"
    REFERENCE = "reference"
    INLINE_COMPLEX = "inline_complex"
    REPEATING = "repeating"


@dataclass(frozen=True)
class ScalarType:
    """A primitive type such as "xsd:string"."""
    name: str

    @property
    def local_name(self) -> str:
        return local_name(self.name)


@dataclass(frozen=True)
class TypeReference:
    """A reference to a registry entry by qualified name."""
    qname: str

    @property
    def local_name(self) -> str:
        return local_name(self.qname)


@dataclass
class ElementDecl:
    """A child element declaration inside a complex type."""
    key: str
    type: "TypeNode"
    min_occurs: str = DEFAULT_OCCURS
    max_occurs: str = DEFAULT_OCCURS
    namespace: Optional[str] = None
    qualified: Optional[bool] = None

    @property
    def local_name(self) -> str:
        return local_name(self.key)

    @property
    def is_repeating(self) -> bool:
        # Absent or "1" is singular; anything else (including "unbounded") repeats
        return self.max_occurs not in (None, "", DEFAULT_OCCURS)

    @property
    def is_optional(self) -> bool:
        return self.min_occurs == "0"


@dataclass
class ComplexType:
    """An ordered complex type; element order is schema declaration order."""
    elements: dict[str, ElementDecl] = field(default_factory=dict)
    namespace: Optional[str] = None
    qualified: Optional[bool] = None
    base: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)
    internal: dict[str, object] = field(default_factory=dict)

    def without_internals(self) -> "ComplexType":
        """Return a copy with bookkeeping fields and internal elements removed."""
        return ComplexType(
            elements={k: v for k, v in self.elements.items() if not is_internal(k)},
            namespace=self.namespace,
            qualified=self.qualified,
            base=self.base,
            attributes=dict(self.attributes),
        )

    def visible_elements(self) -> list[ElementDecl]:
        return [e for k, e in self.elements.items() if not is_internal(k)]

    def single_element(self) -> Optional[ElementDecl]:
        """Return the only visible element, or None when there are zero or several."""
        visible = self.visible_elements()
        return visible[0] if len(visible) == 1 else None


TypeNode = Union[ScalarType, TypeReference, ComplexType]
RegistryEntry = Union[ElementDecl, ComplexType, ScalarType]


@dataclass
class SchemaRegistry:
    """Flat registry of global element declarations and complex types."""
    elements: dict[str, RegistryEntry] = field(default_factory=dict)
    complex_types: dict[str, ComplexType] = field(default_factory=dict)

    def add_element(self, key: str, entry: RegistryEntry) -> None:
        self.elements.setdefault(key, entry)

    def add_complex_type(self, key: str, complex_type: ComplexType) -> None:
        self.complex_types.setdefault(key, complex_type)

    def namespaces(self) -> list[str]:
        """All namespace URIs present in registry keys, in first-seen order."""
        seen: dict[str, None] = {}
        for key in list(self.elements) + list(self.complex_types):
            ns = namespace_part(key)
            if ns:
                seen.setdefault(ns, None)
        return list(seen)


@dataclass(frozen=True)
class Resolution:
    """Result of a registry lookup. NOT_FOUND is distinct from an empty type."""
    found: bool
    key: Optional[str] = None
    entry: Optional[RegistryEntry] = None


NOT_FOUND = Resolution(found=False)


@dataclass
class TraversalContext:
    """Visited set threaded explicitly through one recursive walk."""
    visited: set[str] = field(default_factory=set)

    def seen(self, name: str) -> bool:
        return name in self.visited

    def mark(self, name: str) -> None:
        self.visited.add(name)
