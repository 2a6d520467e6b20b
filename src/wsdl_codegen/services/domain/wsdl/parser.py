#!/usr/bin/env python3
"""
WSDL 1.1 contract parsing.

Parses a contract document into a ContractDocument: namespace declarations,
messages and their parts, port type operations, the namespaces of binding
extension elements, the soap:header parts bound to each operation input and
the embedded schemas. Qualified names in attributes are normalized to
"namespaceURI:LocalName" keys using the prefixes in scope where they appear.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from xml.etree.ElementTree import Element

# Use defusedxml for secure XML parsing (prevents XXE attacks)
import defusedxml.ElementTree as ET

from wsdl_codegen.clients.contract_client import ContractLoadError, fetch_contract
from wsdl_codegen.core.config import generator_config

from ..schema.model import SchemaRegistry
from .xsd import XS, SchemaSource, XsdRegistryBuilder, parse_scoped

logger = logging.getLogger(__name__)

WSDL_NS = "http://schemas.xmlsoap.org/wsdl/"
WSDL = f"{{{WSDL_NS}}}"
SOAP_BINDING_NAMESPACES = (
    "http://schemas.xmlsoap.org/wsdl/soap/",
    "http://schemas.xmlsoap.org/wsdl/soap12/",
)


@dataclass
class MessagePart:
    name: str
    element: Optional[str] = None  # Qualified element key
    type: Optional[str] = None  # Qualified type key


@dataclass
class PortTypeOperation:
    name: str
    input_message: Optional[str] = None  # Message local name
    output_message: Optional[str] = None


@dataclass
class HeaderBinding:
    """A soap:header declared on a binding operation input."""
    message: str  # Message local name
    part: str


@dataclass
class ContractDocument:
    """Parsed WSDL contract."""
    location: str
    target_namespace: Optional[str]
    namespaces: dict[str, str] = field(default_factory=dict)  # prefix -> URI
    messages: dict[str, list[MessagePart]] = field(default_factory=dict)
    operations: list[PortTypeOperation] = field(default_factory=list)
    binding_namespaces: list[str] = field(default_factory=list)
    headers: dict[str, list[HeaderBinding]] = field(default_factory=dict)  # operation -> input headers
    schemas: list[SchemaSource] = field(default_factory=list)


def qualify(value: Optional[str], ns_map: dict[str, str], default_namespace: Optional[str] = None) -> Optional[str]:
    """Convert a "prefix:Local" attribute value into a "namespaceURI:Local" key."""
    if not value:
        return None

    if ':' in value:
        prefix, local = value.split(':', 1)
        namespace = ns_map.get(prefix)
        if namespace:
            return f"{namespace}:{local}"
        logger.debug(f"Undeclared prefix '{prefix}' in '{value}'")
        return value

    namespace = ns_map.get('') or default_namespace
    return f"{namespace}:{value}" if namespace else value


def _local(qname: Optional[str]) -> Optional[str]:
    return qname.rsplit(':', 1)[-1] if qname else None


def parse_xml(content: bytes, location: str) -> tuple[Element, dict[Element, dict[str, str]]]:
    try:
        return parse_scoped(content)
    except ET.ParseError as e:
        raise ContractLoadError(location, f"not well-formed XML: {e}") from e


def _input_headers(operation: Element) -> list[HeaderBinding]:
    input_elem = operation.find(f'./{WSDL}input')
    if input_elem is None:
        return []

    headers = []
    for namespace in SOAP_BINDING_NAMESPACES:
        for header in input_elem.findall(f'./{{{namespace}}}header'):
            message, part = header.get('message'), header.get('part')
            if not message or not part:
                logger.debug(f"Skipping soap:header without message or part on '{operation.get('name')}'")
                continue
            headers.append(HeaderBinding(message=_local(message), part=part))
    return headers


def parse_contract(content: bytes, location: str) -> ContractDocument:
    """Parse WSDL bytes into a ContractDocument.

    Args:
        content: Raw WSDL document
        location: Path or URL the document came from (for relative imports)

    Returns:
        ContractDocument
    """
    root, scopes = parse_xml(content, location)
    if root.tag != f"{WSDL}definitions":
        raise ContractLoadError(location, f"expected wsdl:definitions root, found {root.tag}")

    target_namespace = root.get('targetNamespace')

    document = ContractDocument(location=location, target_namespace=target_namespace, namespaces=dict(scopes[root]))

    for message in root.findall(f'./{WSDL}message'):
        parts = [
            MessagePart(
                name=part.get('name', ''),
                element=qualify(part.get('element'), scopes[part], target_namespace),
                type=qualify(part.get('type'), scopes[part], target_namespace),
            )
            for part in message.findall(f'./{WSDL}part')
        ]
        document.messages[message.get('name', '')] = parts

    for port_type in root.findall(f'./{WSDL}portType'):
        for operation in port_type.findall(f'./{WSDL}operation'):
            input_elem = operation.find(f'./{WSDL}input')
            output_elem = operation.find(f'./{WSDL}output')
            document.operations.append(PortTypeOperation(
                name=operation.get('name', ''),
                input_message=_local(input_elem.get('message')) if input_elem is not None else None,
                output_message=_local(output_elem.get('message')) if output_elem is not None else None,
            ))

    for binding in root.findall(f'./{WSDL}binding'):
        for child in binding:
            if isinstance(child.tag, str) and child.tag.startswith('{') and not child.tag.startswith(WSDL):
                uri = child.tag[1:].split('}', 1)[0]
                if uri not in document.binding_namespaces:
                    document.binding_namespaces.append(uri)

        for operation in binding.findall(f'./{WSDL}operation'):
            name = operation.get('name', '')
            headers = _input_headers(operation)
            if headers and name not in document.headers:
                document.headers[name] = headers

    for schema in root.findall(f'./{WSDL}types/{XS}schema'):
        document.schemas.append(SchemaSource(element=schema, ns_map=scopes[schema], location=location))

    logger.info(
        f"Parsed contract {location}: {len(document.operations)} operations, "
        f"{len(document.messages)} messages, {len(document.schemas)} embedded schemas"
    )
    return document


def build_registry(document: ContractDocument, timeout: Optional[int] = None) -> SchemaRegistry:
    """Build the schema registry from the contract's embedded and imported schemas."""
    builder = XsdRegistryBuilder(timeout=timeout if timeout is not None else generator_config.FETCH_TIMEOUT)
    for source in document.schemas:
        builder.add_schema(source)
    return builder.build()


def load_contract(location: str, timeout: Optional[int] = None) -> tuple[ContractDocument, SchemaRegistry]:
    """Fetch, parse and index a contract.

    Args:
        location: Local path or http(s) URL of the WSDL
        timeout: HTTP timeout in seconds (defaults to the configured value)

    Returns:
        Tuple of (ContractDocument, SchemaRegistry)

    Raises:
        ContractLoadError: If the contract cannot be fetched or parsed
    """
    timeout = timeout if timeout is not None else generator_config.FETCH_TIMEOUT
    content = fetch_contract(location, timeout=timeout)
    document = parse_contract(content, location)
    registry = build_registry(document, timeout=timeout)
    logger.info(
        f"Indexed {len(registry.elements)} elements and {len(registry.complex_types)} complex types from {location}"
    )
    return document, registry
