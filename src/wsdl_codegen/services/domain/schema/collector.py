#!/usr/bin/env python3
"""
Interface graph collection.

Walks every complex type reachable from the root types and produces a
deduplicated list of named interfaces in dependency order: nested types are
appended before the types that use them, so a rendered declaration never
refers to one that has not been declared yet.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .circular import CircularReferenceResolver
from .model import ComplexType, ElementDecl, TraversalContext
from .type_resolver import TypeResolver, to_pascal_case

logger = logging.getLogger(__name__)


@dataclass
class ComplexTypeEntry:
    """A named interface and the type it is built from."""
    interface_name: str
    complex_type: ComplexType


class ComplexTypeCollector:
    """Collects the deduplicated, dependency-ordered interface graph.

    Dedup key is the PascalCase local name; the first type registered under a
    name wins. Types in different namespaces that share a local name are
    therefore merged into one interface.
    """

    def __init__(self, resolver: TypeResolver, circular: Optional[CircularReferenceResolver] = None):
        self.resolver = resolver
        self.circular = circular or CircularReferenceResolver(resolver)

    def collect(self, root_name: str, root_type: ComplexType, include_unreferenced: bool = True) -> list[ComplexTypeEntry]:
        """Collect interfaces for a single root type."""
        return self.collect_all([(root_name, root_type)], include_unreferenced)

    def collect_all(
        self,
        roots: Iterable[tuple[str, ComplexType]],
        include_unreferenced: bool = True,
    ) -> list[ComplexTypeEntry]:
        """Collect interfaces for several roots (e.g. request and response).

        Args:
            roots: (name, type) pairs whose properties seed the walk
            include_unreferenced: Append registry types not reachable from
                any root, after the reachable ones

        Returns:
            Ordered entries, children before parents
        """
        roots = list(roots)
        ctx = TraversalContext()
        entries: dict[str, ComplexTypeEntry] = {}

        for _, root_type in roots:
            for element in root_type.visible_elements():
                self._visit_element(element, ctx, entries)

        if include_unreferenced:
            for root_name, _ in roots:
                ctx.mark(to_pascal_case(root_name))

            for key, complex_type in self.resolver.registry.complex_types.items():
                name = to_pascal_case(key)
                if name in entries or ctx.seen(name):
                    continue
                self._visit_type(name, complex_type, ctx, entries)

        logger.debug(f"Collected {len(entries)} interfaces: {list(entries)}")
        return list(entries.values())

    def _visit_element(self, element: ElementDecl, ctx: TraversalContext, entries: dict[str, ComplexTypeEntry]):
        resolved = self.resolver.resolve_element_type(element)
        if not resolved.is_complex:
            return
        self._visit_type(resolved.name, resolved.complex_type, ctx, entries)

    def _visit_type(self, name: str, complex_type: ComplexType, ctx: TraversalContext, entries: dict[str, ComplexTypeEntry]):
        if ctx.seen(name):
            return
        ctx.mark(name)

        alias = self.circular.self_alias(name, complex_type)
        if alias is not None:
            handled = self.circular.resolve(
                name,
                alias.local_name,
                ctx,
                lambda n, t, c: self._expand(n, t, c, entries),
                empty=False,
            )
            if handled is not None:
                return

        self._expand(name, complex_type, ctx, entries)

    def _expand(self, name: str, complex_type: ComplexType, ctx: TraversalContext, entries: dict[str, ComplexTypeEntry]) -> bool:
        for element in complex_type.visible_elements():
            self._visit_element(element, ctx, entries)

        if name not in entries:
            entries[name] = ComplexTypeEntry(name, complex_type.without_internals())
        return True
