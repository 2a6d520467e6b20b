#!/usr/bin/env python3

from pydantic import BaseModel

# Pydantic Models


class PropertyData(BaseModel):
    name: str  # Element local name
    type: str  # Scalar name ('string', 'integer', ...) or interface name
    modifier: str = ""  # '', '?' (minOccurs 0) or '[]' (repeating)


class PropsInterfaceData(BaseModel):
    """Props interface for a request or response root element."""

    name: str
    properties: list[PropertyData] = []


class InterfaceData(BaseModel):
    """A dependent interface in the interface graph."""

    name: str
    properties: list[PropertyData] = []


class NamespaceMappings(BaseModel):
    """Namespaces actually used by a generated body."""

    prefixes: dict[str, str] = {}  # prefix -> namespace URI
    tags: dict[str, str] = {}  # tag local name -> prefix
    unqualified_tags: list[str] = []


class HeaderArtifacts(BaseModel):
    """A SOAP header block bound to the operation input."""

    part: str  # Props key holding the header values
    element: str  # Header root tag local name
    props: PropsInterfaceData
    body_template: str


class OperationArtifacts(BaseModel):
    """Everything generated for one contract operation."""

    operation: str
    request_type: str
    request_props: PropsInterfaceData
    response_type: str | None = None
    response_props: PropsInterfaceData | None = None
    interfaces: list[InterfaceData] = []
    body_template: str
    namespaces: NamespaceMappings
    headers: list[HeaderArtifacts] = []
    envelope_namespace: str


class OperationFailure(BaseModel):
    operation: str
    error: str


class GenerationResult(BaseModel):
    status: str  # 'success', 'partial'
    envelope_namespace: str
    artifacts: list[OperationArtifacts] = []
    failures: list[OperationFailure] = []
