#!/usr/bin/env python3
"""
Operation, message and part location.

Resolves each port type operation to the schema roots of its request and
response messages, and the soap:header parts bound to its input. Structural
problems on the request side (missing message, missing part, a part with
neither element nor type) raise OperationResolutionError naming the
operation; callers skip that operation and continue with the rest. Problems
with the response or a header only drop that root.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..schema.model import ComplexType, ElementDecl, ScalarType, local_name, namespace_part
from ..schema.type_resolver import TypeResolver
from .parser import ContractDocument, HeaderBinding, MessagePart, PortTypeOperation

logger = logging.getLogger(__name__)


class OperationResolutionError(Exception):
    """Raised when an operation's messages cannot be resolved."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Operation '{operation}': {message}")


@dataclass
class MessageRoot:
    """Schema root of a message: an element or (rpc style) a type."""
    name: str  # Root tag local name
    key: str  # Qualified element or type key
    is_element: bool = True

    @property
    def namespace(self) -> Optional[str]:
        return namespace_part(self.key)


@dataclass
class HeaderRoot:
    """Schema root of a soap:header part; props are read under the part name."""
    part: str
    root: MessageRoot


@dataclass
class OperationSignature:
    name: str
    request: MessageRoot
    response: Optional[MessageRoot] = None
    headers: list[HeaderRoot] = field(default_factory=list)


def list_operations(document: ContractDocument) -> list[str]:
    """Operation names in contract order, without duplicates across port types."""
    names: list[str] = []
    for operation in document.operations:
        if operation.name not in names:
            names.append(operation.name)
    return names


def _find_operation(document: ContractDocument, name: str) -> PortTypeOperation:
    for operation in document.operations:
        if operation.name == name:
            return operation
    raise OperationResolutionError(name, "not declared in any portType")


def _message_root(document: ContractDocument, operation: str, message_name: Optional[str], direction: str) -> MessageRoot:
    if not message_name:
        raise OperationResolutionError(operation, f"no {direction} message declared")

    parts = document.messages.get(message_name)
    if parts is None:
        raise OperationResolutionError(operation, f"{direction} message '{message_name}' not found")
    if not parts:
        raise OperationResolutionError(operation, f"{direction} message '{message_name}' has no parts")

    part = parts[0]
    if len(parts) > 1:
        logger.debug(f"Message '{message_name}' has {len(parts)} parts, using '{part.name}'")
    return _part_root(operation, part, message_name, direction)


def _part_root(operation: str, part: MessagePart, message_name: str, direction: str) -> MessageRoot:
    if part.element:
        return MessageRoot(name=local_name(part.element), key=part.element, is_element=True)
    if part.type:
        return MessageRoot(name=part.name or local_name(part.type), key=part.type, is_element=False)

    raise OperationResolutionError(
        operation, f"part '{part.name}' of {direction} message '{message_name}' has neither element nor type"
    )


def resolve_operation(document: ContractDocument, name: str) -> OperationSignature:
    """Resolve the request and (optional) response roots of an operation.

    Raises:
        OperationResolutionError: If the operation or its request cannot be located.
            An unresolvable response is dropped instead.
    """
    operation = _find_operation(document, name)
    request = _message_root(document, name, operation.input_message, "input")

    response = None
    if operation.output_message:
        try:
            response = _message_root(document, name, operation.output_message, "output")
        except OperationResolutionError as e:
            logger.debug(f"Ignoring response: {e}")

    headers = []
    for binding in document.headers.get(name, []):
        header = _header_root(document, name, binding)
        if header is not None:
            headers.append(header)

    return OperationSignature(name=name, request=request, response=response, headers=headers)


def _header_root(document: ContractDocument, operation: str, binding: HeaderBinding) -> Optional[HeaderRoot]:
    parts = document.messages.get(binding.message)
    part = next((p for p in parts or [] if p.name == binding.part), None)
    if part is None:
        logger.warning(
            f"Header part '{binding.part}' of message '{binding.message}' not found, skipping",
            extra={"operation": operation},
        )
        return None

    try:
        return HeaderRoot(part=binding.part, root=_part_root(operation, part, binding.message, "header"))
    except OperationResolutionError as e:
        logger.warning(f"Skipping header: {e}", extra={"operation": operation})
        return None


def find_response_root(document: ContractDocument, resolver: TypeResolver, operation: str) -> Optional[MessageRoot]:
    """Fallback for operations without an output: an element named <operation>Response."""
    resolution = resolver.lookup(f"{document.target_namespace}:{operation}Response")
    if resolution.found and local_name(resolution.key) == f"{operation}Response":
        return MessageRoot(name=local_name(resolution.key), key=resolution.key, is_element=True)
    return None


def root_type(resolver: TypeResolver, operation: str, root: MessageRoot) -> ComplexType:
    """Resolve a message root to the complex type its body is generated from.

    Raises:
        OperationResolutionError: If the root is missing from the schema or
            has simple content
    """
    if root.is_element:
        resolution = resolver.lookup(root.key)
    else:
        resolution = resolver.lookup_type(root.key)

    if not resolution.found:
        raise OperationResolutionError(operation, f"'{root.key}' not found in the contract's schemas")

    entry = resolution.entry
    if isinstance(entry, ElementDecl):
        node = entry.type
        if isinstance(node, ComplexType):
            entry = node
        elif isinstance(node, ScalarType):
            entry = node
        else:
            followed = resolver.resolve_reference(node)
            entry = followed.entry if followed.found else None

    if isinstance(entry, ComplexType):
        return entry

    raise OperationResolutionError(operation, f"'{root.key}' has no element content to generate a body for")
