#!/usr/bin/env python3
"""
Namespace prefix assignment, qualification rules and tag usage tracking.

A NamespacePrefixTable is computed once per generation run so that every
namespace URI reachable from the root types gets exactly one prefix, even when
two URIs abbreviate to the same token. The NamespaceResolver answers, for any
element, which prefix its tag uses and whether it must be qualified at all.
"""

import logging
import re
import zlib
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .model import ComplexType, ElementDecl, TraversalContext
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

MIN_PREFIX_LENGTH = 2
MAX_PREFIX_LENGTH = 10

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def extract_namespace_prefix(uri: str) -> str:
    """Derive a readable prefix from a namespace URI.

    Uses the last path segment, lower-cased and stripped of non-alphanumerics.
    Too-short results fall back to "ns" plus a stable hash of the URI.

    Examples:
        "http://example.com/services/Orders" -> "orders"
        "urn:a" -> "urna"
        "http://example.com/" -> "ns" + hash
    """
    segment = uri.rstrip("/").rsplit("/", 1)[-1]
    cleaned = re.sub(r"[^A-Za-z0-9]", "", segment).lower()[:MAX_PREFIX_LENGTH]

    if len(cleaned) < MIN_PREFIX_LENGTH:
        return f"ns{_base36(zlib.crc32(uri.encode('utf-8')))[:4]}"

    # XML names cannot start with a digit and "xml" is reserved
    if cleaned[0].isdigit() or cleaned.startswith("xml"):
        cleaned = f"ns{cleaned}"[:MAX_PREFIX_LENGTH]

    return cleaned


class NamespacePrefixTable:
    """One prefix per namespace URI for a single generation run."""

    def __init__(self):
        self.prefixes: dict[str, str] = {}  # prefix -> URI
        self._by_uri: dict[str, str] = {}  # URI -> prefix
        self.key_defaults: dict[str, str] = {}  # element key -> namespace URI

    def add(self, uri: str) -> str:
        """Assign a prefix to a URI, returning the existing one if already assigned."""
        if uri in self._by_uri:
            return self._by_uri[uri]

        base = extract_namespace_prefix(uri)
        prefix = base
        counter = 2
        while prefix in self.prefixes:
            prefix = f"{base}{counter}"
            counter += 1

        if prefix != base:
            logger.debug(f"Prefix '{base}' already bound, using '{prefix}' for {uri}")

        self.prefixes[prefix] = uri
        self._by_uri[uri] = prefix
        return prefix

    def prefix_of(self, uri: str) -> Optional[str]:
        return self._by_uri.get(uri)

    def namespace_of(self, prefix: str) -> Optional[str]:
        return self.prefixes.get(prefix)

    def as_mapping(self) -> dict[str, str]:
        return dict(self.prefixes)

    @classmethod
    def build(
        cls,
        roots: Iterable[ComplexType],
        resolver: TypeResolver,
        base_namespace: Optional[str] = None,
    ) -> "NamespacePrefixTable":
        """Collect every namespace reachable from the root types in declaration order.

        Also records, per element key, the namespace of the scope that
        declares it (or of its own inline type), used as the prefix default
        for elements that carry no namespace information.
        """
        table = cls()
        if base_namespace:
            table.add(base_namespace)

        ctx = TraversalContext()
        for root in roots:
            table._walk(root, root.namespace or base_namespace, resolver, ctx)
        return table

    def _walk(self, complex_type: ComplexType, scope_ns: Optional[str], resolver: TypeResolver, ctx: TraversalContext):
        if complex_type.namespace:
            self.add(complex_type.namespace)
            scope_ns = complex_type.namespace

        for element in complex_type.visible_elements():
            if element.namespace:
                self.add(element.namespace)

            resolved = resolver.resolve_element_type(element)
            nested = resolved.complex_type
            key_ns = element.namespace or (nested.namespace if nested is not None else None) or scope_ns
            if key_ns:
                self.key_defaults.setdefault(element.key, key_ns)

            if nested is None:
                continue
            identity = resolved.key or element.key
            if ctx.seen(identity):
                continue
            ctx.mark(identity)
            self._walk(nested, nested.namespace or key_ns, resolver, ctx)


@dataclass
class TagUsageCollector:
    """Records which tags were emitted with which prefix during one run."""
    tag_to_prefix: dict[str, str] = field(default_factory=dict)
    prefix_to_namespace: dict[str, str] = field(default_factory=dict)
    unqualified_tags: list[str] = field(default_factory=list)

    def record_qualified(self, tag: str, prefix: str, uri: Optional[str]) -> None:
        self.tag_to_prefix.setdefault(tag, prefix)
        if uri:
            self.prefix_to_namespace.setdefault(prefix, uri)

    def record_unqualified(self, tag: str) -> None:
        if tag not in self.unqualified_tags:
            self.unqualified_tags.append(tag)

    def minimal_namespaces(self) -> dict[str, str]:
        """Prefix -> URI for prefixes that were actually used."""
        used = set(self.tag_to_prefix.values())
        return {p: uri for p, uri in self.prefix_to_namespace.items() if p in used}


class NamespaceResolver:
    """Computes prefixes and qualification for element tags."""

    def __init__(self, table: NamespacePrefixTable, base_prefix: str):
        self.table = table
        self.base_prefix = base_prefix

    def resolve(self, element: ElementDecl, key: Optional[str] = None, parent_key: Optional[str] = None) -> tuple[str, Optional[str]]:
        """Return (prefix, namespace URI) for an element.

        Priority: the element's own namespace, then its inline type's
        namespace (table hit, else a prefix derived from the URI), then the
        precomputed default for its parent or own key, then the base prefix.
        """
        uri = element.namespace
        if not uri and isinstance(element.type, ComplexType):
            uri = element.type.namespace

        if uri:
            prefix = self.table.prefix_of(uri)
            if prefix is None:
                prefix = extract_namespace_prefix(uri)
                logger.debug(f"Namespace {uri} not in prefix table, derived '{prefix}'")
            return prefix, uri

        key = key or element.key
        for candidate in (parent_key, key):
            if candidate is None:
                continue
            default_uri = self.table.key_defaults.get(candidate)
            if default_uri and self.table.prefix_of(default_uri):
                return self.table.prefix_of(default_uri), default_uri

        return self.base_prefix, self.table.namespace_of(self.base_prefix)

    def prefix_for(self, element: ElementDecl, key: Optional[str] = None, parent_key: Optional[str] = None) -> str:
        return self.resolve(element, key, parent_key)[0]

    @staticmethod
    def is_qualified(element: ElementDecl, inherited: Optional[bool] = None) -> bool:
        """Whether an element's tag carries a prefix.

        The element's own flag wins, then its inline type's flag, then the
        flag inherited from the nearest ancestor that declared one. Default
        is unqualified.
        """
        if element.qualified is not None:
            return element.qualified
        if isinstance(element.type, ComplexType) and element.type.qualified is not None:
            return element.type.qualified
        if inherited is not None:
            return inherited
        return False
