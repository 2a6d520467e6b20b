"""
Schema Type-Resolution Domain

Turns an in-memory schema model into generation inputs:
- Type classification and reference resolution (type_resolver)
- Namespace prefixes, qualification and tag usage (namespaces)
- Interface graph collection with cycle breaking (collector, circular)
- Ordered property lists (props_builder)
- Request body templates (xml_body)
"""

from .circular import CircularReferenceResolver
from .collector import ComplexTypeCollector, ComplexTypeEntry
from .ingest import ingest_registry, ingest_type_object
from .model import ComplexType, ElementDecl, SchemaRegistry, ScalarType, TypeKind, TypeReference
from .namespaces import NamespacePrefixTable, NamespaceResolver, TagUsageCollector, extract_namespace_prefix
from .props_builder import PropsInterfaceBuilder
from .type_resolver import TypeResolver, scalar_name, to_pascal_case
from .xml_body import XmlBodyGenerator

__all__ = [
    # Model
    "ComplexType",
    "ElementDecl",
    "SchemaRegistry",
    "ScalarType",
    "TypeKind",
    "TypeReference",
    "ingest_registry",
    "ingest_type_object",
    # Resolution
    "TypeResolver",
    "scalar_name",
    "to_pascal_case",
    "NamespacePrefixTable",
    "NamespaceResolver",
    "TagUsageCollector",
    "extract_namespace_prefix",
    # Collection and generation
    "CircularReferenceResolver",
    "ComplexTypeCollector",
    "ComplexTypeEntry",
    "PropsInterfaceBuilder",
    "XmlBodyGenerator",
]
