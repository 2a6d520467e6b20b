#!/usr/bin/env python3

import pytest

from wsdl_codegen.services.domain.schema.collector import ComplexTypeCollector
from wsdl_codegen.services.domain.schema.ingest import ingest_registry, ingest_type_object
from wsdl_codegen.services.domain.schema.props_builder import PropsInterfaceBuilder
from wsdl_codegen.services.domain.schema.type_resolver import TypeResolver


def _pairs(properties):
    return [(p.name, p.type) for p in properties]


class TestPropsInterfaceBuilder:
    """Test suite for ordered property lists"""

    @pytest.fixture
    def request_type(self):
        return ingest_type_object({
            "$namespace": "urn:a",
            "ns:Id": "xsd:string",
            "ns:Items": {"type": {"$namespace": "urn:a", "item:Name": "xsd:string"}, "maxOccurs": "unbounded"},
        })

    def test_request_properties(self, request_type):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))

        props = builder.build_props_interface("Request", request_type)

        assert props.name == "Request"
        assert _pairs(props.properties) == [("Id", "string"), ("Items", "Items")]
        assert [p.modifier for p in props.properties] == ["", "[]"]

    def test_dependent_interface(self, request_type):
        resolver = TypeResolver(ingest_registry({}))
        builder = PropsInterfaceBuilder(resolver)

        entries = ComplexTypeCollector(resolver).collect("Request", request_type)
        interfaces = [builder.build_interface(entry) for entry in entries]

        assert [i.name for i in interfaces] == ["Items"]
        assert _pairs(interfaces[0].properties) == [("Name", "string")]

    def test_declaration_order_preserved(self):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))
        complex_type = ingest_type_object({"Zeta": "xsd:int", "Alpha": "xsd:string", "Mid": "xsd:dateTime"})

        assert _pairs(builder.build_properties(complex_type)) == [
            ("Zeta", "integer"),
            ("Alpha", "string"),
            ("Mid", "datetime"),
        ]

    def test_internal_properties_filtered(self):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))
        complex_type = ingest_type_object({"Id": "xsd:string", "_meta": "xsd:string"})

        assert _pairs(builder.build_properties(complex_type)) == [("Id", "string")]

    def test_reference_and_optional(self):
        registry = ingest_registry({"urn:a:AddressType": {"Street": "xsd:string"}})
        builder = PropsInterfaceBuilder(TypeResolver(registry))
        complex_type = ingest_type_object({
            "Home": {"type": "urn:a:AddressType", "minOccurs": "0"},
            "Missing": "urn:a:Nowhere",
        })

        properties = builder.build_properties(complex_type)

        assert _pairs(properties) == [("Home", "AddressType"), ("Missing", "string")]
        assert properties[0].modifier == "?"

    def test_single_inline_wrapper_unwrapped(self):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))
        root = ingest_type_object({"Wrapper": {"type": {"A": "xsd:string", "B": "xsd:int"}}})

        props = builder.build_props_interface("Request", root)

        assert _pairs(props.properties) == [("A", "string"), ("B", "integer")]

    def test_single_reference_wrapper_expanded(self):
        registry = ingest_registry({"urn:a:Payload": {"X": "xsd:string", "Y": "xsd:boolean"}})
        builder = PropsInterfaceBuilder(TypeResolver(registry))
        root = ingest_type_object({"Payload": "urn:a:Payload"})

        props = builder.build_props_interface("Request", root)

        assert _pairs(props.properties) == [("X", "string"), ("Y", "boolean")]

    def test_single_repeating_property_not_unwrapped(self):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))
        root = ingest_type_object({"Rows": {"type": {"A": "xsd:string"}, "maxOccurs": "unbounded"}})

        props = builder.build_props_interface("Request", root)

        assert _pairs(props.properties) == [("Rows", "Rows")]

    def test_single_scalar_property_kept(self):
        builder = PropsInterfaceBuilder(TypeResolver(ingest_registry({})))
        root = ingest_type_object({"Echo": "xsd:string"})

        assert _pairs(builder.build_props_interface("Request", root).properties) == [("Echo", "string")]

    def test_self_aliasing_root_resolved(self):
        registry = ingest_registry({
            "urn:x:Node": {"label": "xsd:string", "next": {"type": "urn:x:Node", "minOccurs": "0"}},
        })
        builder = PropsInterfaceBuilder(TypeResolver(registry))
        wrapper = ingest_type_object({"Node": "urn:x:Node"})

        props = builder.build_props_interface("Node", wrapper)

        assert _pairs(props.properties) == [("label", "string"), ("next", "Node")]
