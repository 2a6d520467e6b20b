#!/usr/bin/env python3
"""
Request body template generation.

Emits a Jinja2 template of the request body. Element order follows schema
declaration order, tags carry prefixes only where qualification requires it,
values are ``{{ path }}`` placeholders and repeating elements become
``{% for %}`` blocks whose children address fields through the loop variable.

Example output for a request with a scalar and a repeating complex property:

    <urna:Request>
      <Id>{{ props.Id }}</Id>
      {% for item in props.Items %}
      <Items>
        <Name>{{ item.Name }}</Name>
      </Items>
      {% endfor %}
    </urna:Request>
"""

import keyword
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .circular import CircularReferenceResolver
from .model import ComplexType, ElementDecl, TraversalContext, TypeReference, local_name
from .namespaces import NamespaceResolver, TagUsageCollector
from .type_resolver import ResolvedType, TypeResolver

logger = logging.getLogger(__name__)

ITEM_VARIABLE = "item"
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def property_access(path: str, name: str) -> str:
    """Append a property to a template access path.

    Names that are not identifiers, or that shadow dict attributes in Jinja2
    attribute lookup (items, keys, ...), use subscript syntax.
    """
    if _IDENTIFIER.match(name) and not keyword.iskeyword(name) and not hasattr(dict, name):
        return f"{path}.{name}"
    return f'{path}["{name}"]'


def loop_variable(loop_depth: int) -> str:
    return ITEM_VARIABLE if loop_depth == 0 else f"{ITEM_VARIABLE}{loop_depth}"


@dataclass
class _BodyContext:
    usage: TagUsageCollector
    stack: set[int] = field(default_factory=set)  # ids of complex types on the current path
    loop_depth: int = 0
    circular: TraversalContext = field(default_factory=TraversalContext)


class XmlBodyGenerator:
    """Recursively builds the body template for a root type."""

    def __init__(
        self,
        resolver: TypeResolver,
        namespaces: NamespaceResolver,
        circular: Optional[CircularReferenceResolver] = None,
        indent: int = 2,
    ):
        self.resolver = resolver
        self.namespaces = namespaces
        self.circular = circular or CircularReferenceResolver(resolver)
        self.indent = indent

    def generate(
        self,
        prefix: Optional[str],
        type_name: str,
        type_object: ComplexType,
        property_path_prefix: str = "props",
        usage: Optional[TagUsageCollector] = None,
    ) -> str:
        """Generate the body template for a root type.

        The root tag carries ``prefix``; top-level elements are qualified
        regardless of the schema's form default. A root without a namespace
        (``prefix`` is None) is emitted unprefixed.

        Args:
            prefix: Prefix for the root tag, or None for a no-namespace root
            type_name: Root element name (qualified or local)
            type_object: Root element's complex type
            property_path_prefix: Template variable holding the props
            usage: Collector receiving tag/prefix usage; a fresh one is used
                when omitted

        Returns:
            Template markup
        """
        ctx = _BodyContext(usage=usage if usage is not None else TagUsageCollector())
        root_tag = local_name(type_name)
        if prefix:
            root_uri = self.namespaces.table.namespace_of(prefix) or type_object.namespace
            ctx.usage.record_qualified(root_tag, prefix, root_uri)
            tag = f"{prefix}:{root_tag}"
        else:
            ctx.usage.record_unqualified(root_tag)
            tag = root_tag

        ctx.stack.add(id(type_object))
        children = self._root_children(type_name, type_object, property_path_prefix, ctx)
        ctx.stack.discard(id(type_object))

        return "\n".join(self._wrap(tag, children, 0))

    def _root_children(self, type_name: str, complex_type: ComplexType, path: str, ctx: _BodyContext) -> list[str]:
        single = complex_type.single_element()
        if single is not None and not single.is_repeating:
            node = single.type
            if isinstance(node, ComplexType) and node.elements:
                # Inline wrapper: no intermediate tag
                return self._root_children(type_name, node, path, ctx)

            if isinstance(node, TypeReference):
                alias = self.circular.self_alias(type_name, complex_type)
                if alias is not None:
                    result = self.circular.resolve(
                        type_name,
                        alias.local_name,
                        ctx.circular,
                        lambda _, resolved_type, __: self._children(resolved_type, path, resolved_type.qualified, None, ctx, 1),
                        empty=[],
                    )
                    if result is not None:
                        return result

                # Reference wrapper keeps its tag; children stay on the root path
                if self.resolver.resolve_element_type(single).is_complex:
                    return self._element(single, path, complex_type.qualified, None, ctx, 1, flatten=True)

        return self._children(complex_type, path, complex_type.qualified, None, ctx, 1)

    def _children(
        self,
        complex_type: ComplexType,
        path: str,
        inherited: Optional[bool],
        parent_key: Optional[str],
        ctx: _BodyContext,
        depth: int,
    ) -> list[str]:
        if complex_type.qualified is not None:
            inherited = complex_type.qualified

        lines = []
        for element in complex_type.visible_elements():
            lines.extend(self._element(element, path, inherited, parent_key, ctx, depth))
        return lines

    def _element(
        self,
        element: ElementDecl,
        path: str,
        inherited: Optional[bool],
        parent_key: Optional[str],
        ctx: _BodyContext,
        depth: int,
        flatten: bool = False,
    ) -> list[str]:
        name = element.local_name
        qualified = self.namespaces.is_qualified(element, inherited)

        prefix, uri = self.namespaces.resolve(element, element.key, parent_key) if qualified else (None, None)
        if uri:
            tag = f"{prefix}:{name}"
            ctx.usage.record_qualified(name, prefix, uri)
        else:
            # Unqualified, or qualified in no namespace
            tag = name
            ctx.usage.record_unqualified(name)

        resolved = self.resolver.resolve_element_type(element)
        value_path = path if flatten else property_access(path, name)
        child_inherited = element.qualified if element.qualified is not None else inherited

        if not resolved.repeating:
            return self._render(element, resolved, tag, value_path, child_inherited, ctx, depth)

        pad = " " * (self.indent * depth)
        variable = loop_variable(ctx.loop_depth)
        ctx.loop_depth += 1
        body = self._render(element, resolved, tag, variable, child_inherited, ctx, depth)
        ctx.loop_depth -= 1
        return [f"{pad}{{% for {variable} in {value_path} %}}", *body, f"{pad}{{% endfor %}}"]

    def _render(
        self,
        element: ElementDecl,
        resolved: ResolvedType,
        tag: str,
        value_path: str,
        inherited: Optional[bool],
        ctx: _BodyContext,
        depth: int,
    ) -> list[str]:
        pad = " " * (self.indent * depth)

        if not resolved.is_complex:
            return [f"{pad}<{tag}>{{{{ {value_path} }}}}</{tag}>"]

        identity = id(resolved.complex_type)
        if identity in ctx.stack:
            # Revisited on the current path: opaque leaf, no further recursion
            logger.debug(f"Type '{resolved.name}' already on the path at '{value_path}', emitting leaf")
            return [f"{pad}<{tag}>{{{{ {value_path} }}}}</{tag}>"]

        ctx.stack.add(identity)
        children = self._children(resolved.complex_type, value_path, inherited, element.key, ctx, depth + 1)
        ctx.stack.discard(identity)

        return self._wrap(tag, children, depth)

    def _wrap(self, tag: str, children: list[str], depth: int) -> list[str]:
        pad = " " * (self.indent * depth)
        if not children:
            return [f"{pad}<{tag}/>"]
        return [f"{pad}<{tag}>", *children, f"{pad}</{tag}>"]
