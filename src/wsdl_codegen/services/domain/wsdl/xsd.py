#!/usr/bin/env python3
"""
XSD to SchemaRegistry conversion.

Global elements and named complex types are keyed "targetNamespace:Name".
Element references stay unresolved TypeReference nodes; the type resolver
follows them at generation time. Imported and included schemas with a
schemaLocation are loaded once each, relative to the including document.
"""

import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from xml.etree.ElementTree import Element

# Use defusedxml for secure XML parsing (prevents XXE attacks)
import defusedxml.ElementTree as ET

from wsdl_codegen.clients.contract_client import ContractLoadError, fetch_contract, resolve_location

from ..schema.ingest import node_for_type_string
from ..schema.model import (
    DEFAULT_OCCURS,
    XML_SCHEMA_URI,
    ComplexType,
    ElementDecl,
    SchemaRegistry,
    ScalarType,
    TypeNode,
    TypeReference,
)

logger = logging.getLogger(__name__)

XS = f"{{{XML_SCHEMA_URI}}}"
ANY_TYPE = f"{XML_SCHEMA_URI}:anyType"

_PARTICLES = (f"{XS}sequence", f"{XS}choice", f"{XS}all")


def parse_scoped(content: bytes) -> tuple[Element, dict[Element, dict[str, str]]]:
    """Parse XML and record the namespace prefixes in scope at every element.

    ElementTree drops xmlns attributes, so declarations are collected from
    start-ns events. A declaration on an inner element shadows the outer one
    for that element and its descendants.

    Returns:
        Tuple of (root element, element -> prefix map in scope)

    Raises:
        ET.ParseError: If the content is not well-formed
    """
    scopes: dict[Element, dict[str, str]] = {}
    stack: list[dict[str, str]] = [{}]
    declared: dict[str, str] = {}
    root = None

    for event, item in ET.iterparse(io.BytesIO(content), events=("start-ns", "start", "end")):
        if event == "start-ns":
            prefix, uri = item
            declared[prefix or ""] = uri
        elif event == "start":
            # Elements without declarations share their parent's map
            ns_map = {**stack[-1], **declared} if declared else stack[-1]
            declared = {}
            stack.append(ns_map)
            scopes[item] = ns_map
            if root is None:
                root = item
        else:
            stack.pop()

    return root, scopes


@dataclass
class SchemaSource:
    """A schema element together with the namespaces in scope and its origin."""
    element: Element
    ns_map: dict[str, str]
    location: str
    chameleon_namespace: Optional[str] = None  # target namespace for included schemas without one


@dataclass
class _SchemaScope:
    target_namespace: Optional[str]
    qualified: bool
    ns_map: dict[str, str]

    def key(self, name: str) -> str:
        return f"{self.target_namespace}:{name}" if self.target_namespace else name

    def qualify(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if ':' in value:
            prefix, local = value.split(':', 1)
            namespace = self.ns_map.get(prefix)
            return f"{namespace}:{local}" if namespace else value
        namespace = self.ns_map.get('') or self.target_namespace
        return f"{namespace}:{value}" if namespace else value


class XsdRegistryBuilder:
    """Accumulates schemas and produces a SchemaRegistry."""

    def __init__(self, timeout: int = 30, fetch: Callable[..., bytes] = fetch_contract):
        self.timeout = timeout
        self.fetch = fetch
        self.registry = SchemaRegistry()
        self._loaded: set[str] = set()
        self._simple_types: dict[str, ScalarType] = {}
        self._groups: dict[str, list[Element]] = {}
        self._declared: list[ElementDecl] = []
        self._extensions: list[ComplexType] = []

    def add_schema(self, source: SchemaSource) -> None:
        """Index one schema element and, recursively, its imports and includes."""
        schema = source.element
        target_namespace = schema.get('targetNamespace') or source.chameleon_namespace
        scope = _SchemaScope(
            target_namespace=target_namespace,
            qualified=schema.get('elementFormDefault') == 'qualified',
            ns_map=source.ns_map,
        )

        self._load_imports(schema, source.location, target_namespace)

        # Groups and simple types first so that complex types can use them
        for group in schema.findall(f'./{XS}group'):
            if group.get('name'):
                self._groups[scope.key(group.get('name'))] = list(group)

        for simple in schema.findall(f'./{XS}simpleType'):
            if simple.get('name'):
                self._simple_types[scope.key(simple.get('name'))] = self._simple_base(simple, scope)

        for type_elem in schema.findall(f'./{XS}complexType'):
            name = type_elem.get('name')
            if not name:
                continue
            node = self._complex_type(type_elem, scope)
            if isinstance(node, ScalarType):
                self._simple_types[scope.key(name)] = node
            else:
                self.registry.add_complex_type(scope.key(name), node)

        for elem in schema.findall(f'./{XS}element'):
            name = elem.get('name')
            if not name:
                continue
            key = scope.key(name)
            declaration = self._element(elem, scope, top_level=True)
            self.registry.add_element(key, declaration)
            if isinstance(declaration.type, ComplexType):
                self.registry.add_complex_type(key, declaration.type)

        logger.debug(f"Indexed schema {target_namespace or '(no namespace)'} from {source.location}")

    def build(self) -> SchemaRegistry:
        """Finish indexing: substitute simple types and merge extension bases."""
        for declaration in self._declared:
            node = declaration.type
            if isinstance(node, TypeReference) and node.qname in self._simple_types:
                declaration.type = self._simple_types[node.qname]

        for complex_type in self._extensions:
            self._merge_base(complex_type, set())

        return self.registry

    def _load_imports(self, schema: Element, location: str, target_namespace: Optional[str]) -> None:
        for child in schema:
            if child.tag not in (f'{XS}import', f'{XS}include'):
                continue
            schema_location = child.get('schemaLocation')
            if not schema_location:
                continue

            resolved = resolve_location(location, schema_location)
            if resolved in self._loaded:
                continue
            self._loaded.add(resolved)

            try:
                content = self.fetch(resolved, timeout=self.timeout)
                imported, scopes = parse_scoped(content)
            except (ContractLoadError, ET.ParseError) as e:
                logger.warning(f"Skipping schema {resolved} referenced from {location}: {e}")
                continue

            chameleon = target_namespace if child.tag == f'{XS}include' else None
            self.add_schema(SchemaSource(
                element=imported,
                ns_map=scopes[imported],
                location=resolved,
                chameleon_namespace=chameleon,
            ))

    def _simple_base(self, simple: Element, scope: _SchemaScope) -> ScalarType:
        restriction = simple.find(f'./{XS}restriction')
        if restriction is not None and restriction.get('base'):
            base = scope.qualify(restriction.get('base'))
            return self._simple_types.get(base) or ScalarType(base)
        # Lists and unions are carried as strings
        return ScalarType(f"{XML_SCHEMA_URI}:string")

    def _element(self, elem: Element, scope: _SchemaScope, top_level: bool = False) -> ElementDecl:
        min_occurs = elem.get('minOccurs', DEFAULT_OCCURS)
        max_occurs = elem.get('maxOccurs', DEFAULT_OCCURS)
        ref = elem.get('ref')

        if ref:
            qname = scope.qualify(ref)
            namespace = qname.rsplit(':', 1)[0] if ':' in qname else None
            declaration = ElementDecl(
                key=qname,
                type=TypeReference(qname),
                min_occurs=min_occurs,
                max_occurs=max_occurs,
                namespace=namespace,
                qualified=True,
            )
            self._declared.append(declaration)
            return declaration

        name = elem.get('name', '')
        form = elem.get('form')
        qualified = top_level or (form == 'qualified' if form else scope.qualified)

        type_node: TypeNode
        complex_elem = elem.find(f'./{XS}complexType')
        simple_elem = elem.find(f'./{XS}simpleType')
        if elem.get('type'):
            type_node = node_for_type_string(scope.qualify(elem.get('type')))
        elif complex_elem is not None:
            type_node = self._complex_type(complex_elem, scope)
        elif simple_elem is not None:
            type_node = self._simple_base(simple_elem, scope)
        else:
            type_node = ScalarType(ANY_TYPE)

        declaration = ElementDecl(
            key=scope.key(name),
            type=type_node,
            min_occurs=min_occurs,
            max_occurs=max_occurs,
            namespace=scope.target_namespace,
            qualified=qualified,
        )
        self._declared.append(declaration)
        return declaration

    def _complex_type(self, type_elem: Element, scope: _SchemaScope) -> TypeNode:
        """Parse an xs:complexType; simple content collapses to its scalar base."""
        simple_content = type_elem.find(f'./{XS}simpleContent')
        if simple_content is not None:
            derivation = simple_content.find(f'./{XS}extension')
            if derivation is None:
                derivation = simple_content.find(f'./{XS}restriction')
            base = scope.qualify(derivation.get('base')) if derivation is not None else None
            return ScalarType(base or f"{XML_SCHEMA_URI}:string")

        complex_type = ComplexType(namespace=scope.target_namespace, qualified=scope.qualified)
        content = type_elem

        complex_content = type_elem.find(f'./{XS}complexContent')
        if complex_content is not None:
            extension = complex_content.find(f'./{XS}extension')
            restriction = complex_content.find(f'./{XS}restriction')
            if extension is not None:
                complex_type.base = scope.qualify(extension.get('base'))
                content = extension
                self._extensions.append(complex_type)
            elif restriction is not None:
                complex_type.base = scope.qualify(restriction.get('base'))
                content = restriction

        self._particles(content, complex_type, scope)

        for attribute in content.findall(f'./{XS}attribute'):
            name = attribute.get('name') or attribute.get('ref')
            if name:
                complex_type.attributes[name] = scope.qualify(attribute.get('type')) or f"{XML_SCHEMA_URI}:string"

        return complex_type

    def _particles(self, parent: Element, complex_type: ComplexType, scope: _SchemaScope, seen_groups: Optional[set] = None) -> None:
        """Flatten sequence/choice/all/group content into declaration order."""
        seen_groups = seen_groups if seen_groups is not None else set()
        for child in parent:
            if child.tag == f'{XS}element':
                declaration = self._element(child, scope)
                if declaration.key in complex_type.elements:
                    logger.debug(f"Skipping duplicate element '{declaration.key}'")
                    continue
                complex_type.elements[declaration.key] = declaration
            elif child.tag in _PARTICLES:
                self._particles(child, complex_type, scope, seen_groups)
            elif child.tag == f'{XS}group' and child.get('ref'):
                group_key = scope.qualify(child.get('ref'))
                if group_key in seen_groups or group_key not in self._groups:
                    continue
                seen_groups.add(group_key)
                for particle in self._groups[group_key]:
                    if particle.tag in _PARTICLES:
                        self._particles(particle, complex_type, scope, seen_groups)

    def _merge_base(self, complex_type: ComplexType, visiting: set[int]) -> None:
        """Prepend the base type's elements to an extension, once."""
        if complex_type.internal.get("_base_merged") or id(complex_type) in visiting:
            return
        visiting.add(id(complex_type))

        base = self.registry.complex_types.get(complex_type.base) if complex_type.base else None
        if base is not None:
            if base.base:
                self._merge_base(base, visiting)
            merged = {k: v for k, v in base.elements.items() if k not in complex_type.elements}
            merged.update(complex_type.elements)
            complex_type.elements = merged
            for name, type_name in base.attributes.items():
                complex_type.attributes.setdefault(name, type_name)

        complex_type.internal["_base_merged"] = True
