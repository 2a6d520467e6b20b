#!/usr/bin/env python3
"""
Conversion of raw TypeObject mappings into the structured schema model.

A TypeObject is an insertion-ordered mapping whose reserved keys
($namespace, $qualified, $base, $attributes) carry scope metadata and whose
other keys are child elements. Values are a scalar/reference string, a
TypeDefinition ({"type": ..., "minOccurs": ..., "maxOccurs": ...}) or a nested
TypeObject. This module is the only place that inspects those shapes.
"""

import logging
from typing import Any, Optional

from .model import (
    DEFAULT_OCCURS,
    XSD_PREFIXES,
    ComplexType,
    ElementDecl,
    SchemaRegistry,
    ScalarType,
    TypeNode,
    TypeReference,
    is_internal,
    namespace_part,
)

logger = logging.getLogger(__name__)

NAMESPACE_KEY = "$namespace"
QUALIFIED_KEY = "$qualified"
BASE_KEY = "$base"
ATTRIBUTES_KEY = "$attributes"
RESERVED_KEYS = {NAMESPACE_KEY, QUALIFIED_KEY, BASE_KEY, ATTRIBUTES_KEY}

# Keys allowed next to "type" in a TypeDefinition
_DEFINITION_KEYS = {"type", "minOccurs", "maxOccurs", "qualified", "nillable", NAMESPACE_KEY, QUALIFIED_KEY}


def is_scalar_name(value: str) -> bool:
    """True when a type string names an XML Schema primitive (or has no namespace)."""
    prefix = namespace_part(value)
    return prefix is None or prefix in XSD_PREFIXES


def node_for_type_string(value: str) -> TypeNode:
    if is_scalar_name(value):
        return ScalarType(value)
    return TypeReference(value)


def _is_type_definition(value: dict) -> bool:
    return "type" in value and isinstance(value["type"], (str, dict)) and set(value) <= _DEFINITION_KEYS


def _qualified_flag(value: dict) -> Optional[bool]:
    flag = value.get(QUALIFIED_KEY, value.get("qualified"))
    return None if flag is None else bool(flag)


def _type_node(value: Any) -> TypeNode:
    if isinstance(value, str):
        return node_for_type_string(value)
    return ingest_type_object(value)


def ingest_element(key: str, value: Any) -> Optional[ElementDecl]:
    """Build an ElementDecl from one TypeObject entry, or None if it is not an element."""
    if isinstance(value, str):
        return ElementDecl(key=key, type=node_for_type_string(value))

    if isinstance(value, dict):
        if _is_type_definition(value):
            return ElementDecl(
                key=key,
                type=_type_node(value["type"]),
                min_occurs=str(value.get("minOccurs", DEFAULT_OCCURS)),
                max_occurs=str(value.get("maxOccurs", DEFAULT_OCCURS)),
                namespace=value.get(NAMESPACE_KEY),
                qualified=_qualified_flag(value),
            )
        return ElementDecl(key=key, type=ingest_type_object(value))

    logger.debug(f"Ignoring non-element entry '{key}' of type {type(value).__name__}")
    return None


def ingest_type_object(type_object: dict) -> ComplexType:
    """Convert a TypeObject mapping into a ComplexType, preserving key order.

    Args:
        type_object: Raw mapping with optional reserved keys

    Returns:
        ComplexType whose elements follow the mapping's insertion order
    """
    complex_type = ComplexType(
        namespace=type_object.get(NAMESPACE_KEY),
        qualified=_qualified_flag(type_object),
        base=type_object.get(BASE_KEY),
        attributes=dict(type_object.get(ATTRIBUTES_KEY) or {}),
    )

    for key, value in type_object.items():
        if key in RESERVED_KEYS:
            continue
        if is_internal(key):
            complex_type.internal[key] = value
            continue
        element = ingest_element(key, value)
        if element is not None:
            complex_type.elements[key] = element

    return complex_type


def ingest_registry(complex_types: dict[str, Any], elements: Optional[dict[str, Any]] = None) -> SchemaRegistry:
    """Build a SchemaRegistry from raw qualified-name -> TypeObject mappings."""
    registry = SchemaRegistry()

    for key, value in complex_types.items():
        registry.add_complex_type(key, ingest_type_object(value))

    for key, value in (elements or {}).items():
        if isinstance(value, dict) and not _is_type_definition(value):
            registry.add_element(key, ingest_type_object(value))
        else:
            element = ingest_element(key, value)
            if element is not None:
                registry.add_element(key, element)

    return registry
