#!/usr/bin/env python3
"""
Type classification and reference resolution.

Every element's declared type is classified as scalar, inline complex,
reference or repeating. References are resolved against the registry with a
4-tier search: exact key in scope (global elements), exact key in the complex
type registry, then local-name match in scope, then local-name match in the
registry. A miss is a valid outcome and degrades to the default scalar.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .model import (
    NOT_FOUND,
    ComplexType,
    ElementDecl,
    RegistryEntry,
    Resolution,
    ScalarType,
    SchemaRegistry,
    TypeKind,
    TypeReference,
    local_name,
)

logger = logging.getLogger(__name__)

DEFAULT_SCALAR = "string"

# XML Schema primitive -> neutral scalar name used in generated interfaces
SCALAR_TYPE_MAP: dict[str, str] = {
    "string": "string",
    "normalizedString": "string",
    "token": "string",
    "language": "string",
    "Name": "string",
    "NCName": "string",
    "ID": "string",
    "IDREF": "string",
    "anyURI": "string",
    "QName": "string",
    "int": "integer",
    "integer": "integer",
    "long": "integer",
    "short": "integer",
    "byte": "integer",
    "nonNegativeInteger": "integer",
    "nonPositiveInteger": "integer",
    "positiveInteger": "integer",
    "negativeInteger": "integer",
    "unsignedInt": "integer",
    "unsignedLong": "integer",
    "unsignedShort": "integer",
    "unsignedByte": "integer",
    "float": "number",
    "double": "number",
    "decimal": "number",
    "boolean": "boolean",
    "date": "date",
    "time": "time",
    "dateTime": "datetime",
    "base64Binary": "bytes",
    "hexBinary": "bytes",
}


def scalar_name(type_name: str) -> str:
    """Map a primitive type name ("xsd:int", "int") to its scalar name.

    Unknown names map to the default string scalar; this never raises.
    """
    return SCALAR_TYPE_MAP.get(local_name(type_name), DEFAULT_SCALAR)


def to_pascal_case(name: str) -> str:
    """Normalize a local name into an identifier-safe PascalCase interface name."""
    parts = [p for p in re.split(r"[^0-9A-Za-z]+", local_name(name)) if p]
    if not parts:
        return "Anonymous"
    result = "".join(p[0].upper() + p[1:] for p in parts)
    if result[0].isdigit():
        result = f"T{result}"
    return result


@dataclass(frozen=True)
class ResolvedType:
    """Classification of one element's type."""
    kind: TypeKind
    name: str
    repeating: bool = False
    complex_type: Optional[ComplexType] = None
    key: Optional[str] = None
    resolved: bool = True

    @property
    def is_complex(self) -> bool:
        return self.complex_type is not None


class TypeResolver:
    """Classifies element types and resolves references against a SchemaRegistry."""

    def __init__(self, registry: SchemaRegistry, max_reference_depth: int = 8):
        self.registry = registry
        self.max_reference_depth = max_reference_depth

    def lookup(self, qname: str, scope: Optional[dict[str, RegistryEntry]] = None) -> Resolution:
        """Find a registry entry for a qualified name using the 4-tier search.

        Args:
            qname: Qualified "namespaceURI:LocalName" reference
            scope: Entries searched before the complex type registry
                (defaults to the registry's global elements)

        Returns:
            Resolution for the first hit, or NOT_FOUND
        """
        scope = self.registry.elements if scope is None else scope
        types = self.registry.complex_types

        if qname in scope:
            return Resolution(True, qname, scope[qname])
        if qname in types:
            return Resolution(True, qname, types[qname])

        wanted = local_name(qname)
        for tier in (scope, types):
            for key, entry in tier.items():
                if local_name(key) == wanted:
                    return Resolution(True, key, entry)

        return NOT_FOUND

    def lookup_type_by_local_name(self, name: str) -> Resolution:
        """Direct local-name match in the complex type registry only."""
        wanted = local_name(name)
        for key, entry in self.registry.complex_types.items():
            if local_name(key) == wanted:
                return Resolution(True, key, entry)
        return NOT_FOUND

    def lookup_type(self, qname: str) -> Resolution:
        types = self.registry.complex_types
        if qname in types:
            return Resolution(True, qname, types[qname])
        return self.lookup_type_by_local_name(qname)

    def resolve_reference(self, reference: TypeReference) -> Resolution:
        """Resolve a reference and follow element wrappers to their terminal type.

        A terminal is a ComplexType or ScalarType. An element that points back
        at itself (element and type sharing a name) falls back to the complex
        type registry.
        """
        resolution = self.lookup(reference.qname)
        followed: set[str] = set()

        for _ in range(self.max_reference_depth):
            if not resolution.found:
                return NOT_FOUND

            entry = resolution.entry
            if isinstance(entry, (ComplexType, ScalarType)):
                return resolution

            # ElementDecl wrapper: follow its declared type
            followed.add(resolution.key)
            node = entry.type
            if isinstance(node, (ComplexType, ScalarType)):
                return Resolution(True, resolution.key, node)

            resolution = self.lookup(node.qname)
            if resolution.found and isinstance(resolution.entry, ElementDecl) and resolution.key in followed:
                resolution = self.lookup_type(node.qname)

        logger.debug(f"Reference chain for '{reference.qname}' exceeded {self.max_reference_depth} hops")
        return NOT_FOUND

    def resolve_element_type(self, element: ElementDecl, element_local_name: Optional[str] = None) -> ResolvedType:
        """Classify an element's type.

        Args:
            element: Element declaration to classify
            element_local_name: Name to derive inline interface names from
                (defaults to the element's own local name)

        Returns:
            ResolvedType with kind, scalar or interface name and the complex
            type to recurse into, if any
        """
        name = element_local_name or element.local_name
        node = element.type
        repeating = element.is_repeating

        if isinstance(node, ScalarType):
            return ResolvedType(TypeKind.SCALAR, scalar_name(node.name), repeating)

        if isinstance(node, ComplexType):
            kind = TypeKind.REPEATING if repeating else TypeKind.INLINE_COMPLEX
            return ResolvedType(kind, to_pascal_case(name), repeating, node, key=element.key)

        resolution = self.resolve_reference(node)
        if not resolution.found:
            logger.debug(f"Unresolved reference '{node.qname}' for element '{element.key}', using {DEFAULT_SCALAR}")
            return ResolvedType(TypeKind.SCALAR, DEFAULT_SCALAR, repeating, resolved=False)

        entry = resolution.entry
        if isinstance(entry, ScalarType):
            return ResolvedType(TypeKind.SCALAR, scalar_name(entry.name), repeating, key=resolution.key)

        kind = TypeKind.REPEATING if repeating else TypeKind.REFERENCE
        return ResolvedType(kind, to_pascal_case(resolution.key), repeating, entry, key=resolution.key)

    def resolve_type_name(self, element: ElementDecl) -> str:
        """Interface or scalar name for an element's type."""
        return self.resolve_element_type(element).name
