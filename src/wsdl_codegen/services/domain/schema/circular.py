#!/usr/bin/env python3
"""
Cycle breaking for self-aliasing wrapper types.

A wrapper type whose only property is a reference back to a type with the
wrapper's own local name (for example an element "Node" declared as
{"Node": "urn:x:Node"}) cannot be resolved through the layered search: the
first tier finds the wrapper again. The resolver looks the real type up by
local name in the complex type registry and re-enters normal resolution with
it, returning an empty result when the type is already on the call chain.
"""

import logging
from typing import Callable, Optional, TypeVar

from .model import ComplexType, TraversalContext, TypeReference, local_name
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircularReferenceResolver:
    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    @staticmethod
    def self_alias(type_name: str, complex_type: ComplexType) -> Optional[TypeReference]:
        """Return the reference if the type is a single-property wrapper aliasing its own name."""
        single = complex_type.single_element()
        if single is None or not isinstance(single.type, TypeReference):
            return None
        if single.type.local_name != local_name(type_name):
            return None
        return single.type

    def resolve(
        self,
        type_name: str,
        type_local_name: str,
        ctx: TraversalContext,
        entry_point: Callable[[str, ComplexType, TraversalContext], T],
        empty: T,
    ) -> Optional[T]:
        """Resolve a self-aliasing reference and re-enter resolution.

        Args:
            type_name: Name of the enclosing type being resolved
            type_local_name: Local name the wrapper's reference points at
            ctx: Traversal context of the current call chain
            entry_point: Normal resolution entry, called with the real type
            empty: Result returned when the type is already being resolved

        Returns:
            The entry point's result, ``empty`` on a cycle, or None when the
            registry has no type with that local name
        """
        resolution = self.resolver.lookup_type_by_local_name(type_local_name)
        if not resolution.found:
            logger.debug(f"No registry type named '{type_local_name}' for circular wrapper '{type_name}'")
            return None

        target = resolution.entry
        inner = target.single_element()
        if inner is not None and inner.local_name == type_local_name and isinstance(inner.type, ComplexType):
            target = inner.type

        if ctx.seen(resolution.key):
            logger.debug(f"Cycle detected at '{resolution.key}' while resolving '{type_name}'")
            return empty

        ctx.mark(resolution.key)
        return entry_point(type_name, target.without_internals(), ctx)
