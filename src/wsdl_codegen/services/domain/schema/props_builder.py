#!/usr/bin/env python3
"""
Ordered property lists for generated interfaces.
"""

import logging
from typing import Optional

from wsdl_codegen.models.models import InterfaceData, PropertyData, PropsInterfaceData

from .circular import CircularReferenceResolver
from .collector import ComplexTypeEntry
from .model import ComplexType, ElementDecl, TraversalContext, TypeReference
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)


def _modifier(element: ElementDecl) -> str:
    if element.is_repeating:
        return "[]"
    if element.is_optional:
        return "?"
    return ""


class PropsInterfaceBuilder:
    """Converts complex types into ordered {name, type} property lists."""

    def __init__(self, resolver: TypeResolver, circular: Optional[CircularReferenceResolver] = None):
        self.resolver = resolver
        self.circular = circular or CircularReferenceResolver(resolver)

    def build_properties(self, complex_type: ComplexType) -> list[PropertyData]:
        """Properties in declaration order; internal entries are skipped."""
        properties = []
        for element in complex_type.visible_elements():
            resolved = self.resolver.resolve_element_type(element)
            properties.append(PropertyData(name=element.local_name, type=resolved.name, modifier=_modifier(element)))
        return properties

    def build_interface(self, entry: ComplexTypeEntry) -> InterfaceData:
        return InterfaceData(name=entry.interface_name, properties=self.build_properties(entry.complex_type))

    def build_props_interface(self, type_name: str, complex_type: ComplexType) -> PropsInterfaceData:
        """Build the props interface for a request or response root.

        Single-property wrappers are flattened: an inline object is unwrapped,
        a reference is replaced by the referenced type's properties, and a
        wrapper aliasing its own name goes through cycle resolution.
        """
        properties = self._root_properties(type_name, complex_type, TraversalContext())
        return PropsInterfaceData(name=type_name, properties=properties)

    def _root_properties(self, type_name: str, complex_type: ComplexType, ctx: TraversalContext) -> list[PropertyData]:
        single = complex_type.single_element()
        if single is None or single.is_repeating:
            return self.build_properties(complex_type)

        node = single.type
        if isinstance(node, ComplexType):
            if not node.elements:
                return self.build_properties(complex_type)
            return self._root_properties(type_name, node, ctx)

        if isinstance(node, TypeReference):
            alias = self.circular.self_alias(type_name, complex_type)
            if alias is not None:
                result = self.circular.resolve(type_name, alias.local_name, ctx, self._root_properties, empty=[])
                if result is not None:
                    return result

            resolved = self.resolver.resolve_element_type(single)
            if resolved.is_complex:
                if resolved.key and ctx.seen(resolved.key):
                    return []
                if resolved.key:
                    ctx.mark(resolved.key)
                return self.build_properties(resolved.complex_type)

        return self.build_properties(complex_type)
