#!/usr/bin/env python3
"""
Code generation orchestration.

One run per contract operation: resolve the request/response/header roots,
collect the interface graph, build props interfaces, generate the request
body and header templates and record the namespaces they actually used.
Every resolver, visited set and collector is created fresh for the run.
"""

import logging
from typing import Optional

from wsdl_codegen.core.config import GeneratorConfig, generator_config
from wsdl_codegen.models.models import (
    GenerationResult,
    HeaderArtifacts,
    NamespaceMappings,
    OperationArtifacts,
    OperationFailure,
    PropertyData,
)
from wsdl_codegen.services.domain.schema import (
    CircularReferenceResolver,
    ComplexTypeCollector,
    NamespacePrefixTable,
    NamespaceResolver,
    PropsInterfaceBuilder,
    SchemaRegistry,
    TagUsageCollector,
    TypeResolver,
    XmlBodyGenerator,
)
from wsdl_codegen.services.domain.schema.type_resolver import to_pascal_case
from wsdl_codegen.services.domain.schema.xml_body import property_access
from wsdl_codegen.services.domain.wsdl import (
    ContractDocument,
    OperationResolutionError,
    OperationSignature,
    detect_envelope_namespace,
    list_operations,
    resolve_operation,
    root_type,
)
from wsdl_codegen.services.domain.wsdl.operations import find_response_root

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "tns"


class GenerationError(Exception):
    """Raised when a run produces no artifacts at all."""
    pass


class CodeGenerator:
    """Generates per-operation artifacts from a parsed contract."""

    def __init__(self, registry: SchemaRegistry, config: Optional[GeneratorConfig] = None):
        self.registry = registry
        self.config = config or generator_config

    def generate_operation(
        self,
        signature: OperationSignature,
        envelope_namespace: str,
        document: Optional[ContractDocument] = None,
    ) -> OperationArtifacts:
        """Run the core engine for one operation.

        Args:
            signature: Resolved request, response and header roots
            envelope_namespace: SOAP envelope namespace for the contract
            document: Contract, used to look up an <operation>Response
                element when the operation declares no output

        Returns:
            OperationArtifacts

        Raises:
            OperationResolutionError: If the request root cannot be resolved
        """
        resolver = TypeResolver(self.registry, self.config.MAX_REFERENCE_DEPTH)
        circular = CircularReferenceResolver(resolver)

        request = signature.request
        request_type = root_type(resolver, signature.name, request)

        response = signature.response
        if response is None and document is not None:
            response = find_response_root(document, resolver, signature.name)
        response_type = None
        if response is not None:
            try:
                response_type = root_type(resolver, signature.name, response)
            except OperationResolutionError as e:
                logger.debug(f"Dropping response: {e}", extra={"operation": signature.name})
                response = None

        headers = []
        for header in signature.headers:
            try:
                headers.append((header, root_type(resolver, signature.name, header.root)))
            except OperationResolutionError as e:
                logger.warning(f"Skipping header '{header.part}': {e}", extra={"operation": signature.name})

        roots = [(request.name, request_type)]
        if response is not None:
            roots.append((response.name, response_type))
        roots.extend((header.root.name, header_type) for header, header_type in headers)

        table = NamespacePrefixTable.build([t for _, t in roots], resolver, base_namespace=request.namespace)
        # A root without a namespace is emitted unprefixed
        base_prefix = table.add(request.namespace) if request.namespace else None
        namespaces = NamespaceResolver(table, base_prefix or DEFAULT_PREFIX)

        entries = ComplexTypeCollector(resolver, circular).collect_all(roots)
        builder = PropsInterfaceBuilder(resolver, circular)
        interfaces = [builder.build_interface(entry) for entry in entries]

        usage = TagUsageCollector()
        body_generator = XmlBodyGenerator(resolver, namespaces, circular, indent=self.config.INDENT)
        body = body_generator.generate(
            base_prefix,
            request.name,
            request_type,
            property_path_prefix=self.config.PROPS_ROOT,
            usage=usage,
        )

        request_props = builder.build_props_interface(request.name, request_type)
        header_artifacts = []
        for header, header_type in headers:
            root = header.root
            header_artifacts.append(HeaderArtifacts(
                part=header.part,
                element=root.name,
                props=builder.build_props_interface(root.name, header_type),
                body_template=body_generator.generate(
                    table.add(root.namespace) if root.namespace else None,
                    root.name,
                    header_type,
                    property_path_prefix=property_access(self.config.PROPS_ROOT, header.part),
                    usage=usage,
                ),
            ))
            # Header values travel in the request props under the part name
            request_props.properties.append(
                PropertyData(name=header.part, type=f"{to_pascal_case(root.name)}Props")
            )

        logger.info(
            f"Generated operation '{signature.name}': {len(interfaces)} interfaces, "
            f"{len(header_artifacts)} headers, {len(usage.tag_to_prefix)} qualified tags",
            extra={"operation": signature.name},
        )

        return OperationArtifacts(
            operation=signature.name,
            request_type=request.name,
            request_props=request_props,
            response_type=response.name if response else None,
            response_props=builder.build_props_interface(response.name, response_type) if response else None,
            interfaces=interfaces,
            body_template=body,
            namespaces=NamespaceMappings(
                prefixes=usage.minimal_namespaces(),
                tags=dict(usage.tag_to_prefix),
                unqualified_tags=list(usage.unqualified_tags),
            ),
            headers=header_artifacts,
            envelope_namespace=envelope_namespace,
        )

    def generate(self, document: ContractDocument, operation: Optional[str] = None) -> GenerationResult:
        """Generate artifacts for every operation (or one named operation).

        Operations that cannot be resolved are logged and skipped, unless a
        specific operation was requested, in which case the error propagates.

        Raises:
            OperationResolutionError: If the requested operation fails
            GenerationError: If no operation produced artifacts
        """
        envelope_namespace = detect_envelope_namespace(document.namespaces, document.binding_namespaces)
        names = [operation] if operation else list_operations(document)

        artifacts: list[OperationArtifacts] = []
        failures: list[OperationFailure] = []

        for name in names:
            try:
                signature = resolve_operation(document, name)
                artifacts.append(self.generate_operation(signature, envelope_namespace, document))
            except OperationResolutionError as e:
                if operation:
                    raise
                logger.warning(f"Skipping operation: {e}", extra={"operation": name})
                failures.append(OperationFailure(operation=name, error=str(e)))

        if not artifacts:
            details = "; ".join(f.error for f in failures) or "contract declares no operations"
            raise GenerationError(f"No operations generated from {document.location}: {details}")

        return GenerationResult(
            status="success" if not failures else "partial",
            envelope_namespace=envelope_namespace,
            artifacts=artifacts,
            failures=failures,
        )
