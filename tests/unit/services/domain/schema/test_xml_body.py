#!/usr/bin/env python3
"""Tests for request body template generation."""

import pytest
from jinja2 import Environment

from wsdl_codegen.services.domain.schema.ingest import ingest_registry, ingest_type_object
from wsdl_codegen.services.domain.schema.namespaces import (
    NamespacePrefixTable,
    NamespaceResolver,
    TagUsageCollector,
)
from wsdl_codegen.services.domain.schema.type_resolver import TypeResolver
from wsdl_codegen.services.domain.schema.xml_body import XmlBodyGenerator, loop_variable, property_access

ONE = "http://one.example.com/common"
TWO = "http://two.example.com/common"


def _generate(root, registry=None, base="urn:a", type_name="Request", usage=None):
    resolver = TypeResolver(registry or ingest_registry({}))
    table = NamespacePrefixTable.build([root], resolver, base_namespace=base)
    prefix = table.add(base)
    generator = XmlBodyGenerator(resolver, NamespaceResolver(table, prefix))
    return generator.generate(prefix, type_name, root, usage=usage)


def _render(template, props):
    env = Environment(trim_blocks=True, lstrip_blocks=True)
    return env.from_string(template).render(props=props)


class TestXmlBodyGenerator:
    """Test suite for body template structure"""

    @pytest.fixture
    def request_type(self):
        return ingest_type_object({
            "$namespace": "urn:a",
            "ns:Id": "xsd:string",
            "ns:Items": {"type": {"$namespace": "urn:a", "item:Name": "xsd:string"}, "maxOccurs": "unbounded"},
        })

    def test_scalar_and_repeating_complex(self, request_type):
        body = _generate(request_type)

        assert body == "\n".join([
            "<urna:Request>",
            "  <Id>{{ props.Id }}</Id>",
            "  {% for item in props.Items %}",
            "  <Items>",
            "    <Name>{{ item.Name }}</Name>",
            "  </Items>",
            "  {% endfor %}",
            "</urna:Request>",
        ])

    def test_template_renders_sample_props(self, request_type):
        body = _generate(request_type)

        xml = _render(body, {"Id": "7", "Items": [{"Name": "a"}, {"Name": "b"}]})

        assert xml == "\n".join([
            "<urna:Request>",
            "  <Id>7</Id>",
            "  <Items>",
            "    <Name>a</Name>",
            "  </Items>",
            "  <Items>",
            "    <Name>b</Name>",
            "  </Items>",
            "</urna:Request>",
        ])

    @pytest.mark.parametrize("definition,loops", [
        ({"type": "xsd:string", "maxOccurs": "1"}, False),
        ({"type": "xsd:string"}, False),
        ({"type": "xsd:string", "maxOccurs": "unbounded"}, True),
        ({"type": "xsd:string", "maxOccurs": "5"}, True),
    ])
    def test_only_repeating_elements_loop(self, definition, loops):
        body = _generate(ingest_type_object({"Id": "xsd:string", "Value": definition}))
        assert ("{% for item in props.Value %}" in body) is loops

    def test_repeating_scalar_uses_loop_variable(self):
        body = _generate(ingest_type_object({
            "Id": "xsd:string",
            "Tags": {"type": "xsd:string", "maxOccurs": "unbounded"},
        }))

        assert "  {% for item in props.Tags %}\n  <Tags>{{ item }}</Tags>\n  {% endfor %}" in body

    def test_nested_loops_get_distinct_variables(self):
        body = _generate(ingest_type_object({
            "Id": "xsd:string",
            "Groups": {
                "type": {"Rows": {"type": {"Cell": "xsd:string"}, "maxOccurs": "unbounded"}},
                "maxOccurs": "unbounded",
            },
        }))

        assert "{% for item in props.Groups %}" in body
        assert "{% for item1 in item.Rows %}" in body
        assert "<Cell>{{ item1.Cell }}</Cell>" in body

    def test_nested_loops_render(self):
        body = _generate(ingest_type_object({
            "Id": "xsd:string",
            "Groups": {
                "type": {"Rows": {"type": {"Cell": "xsd:string"}, "maxOccurs": "unbounded"}},
                "maxOccurs": "unbounded",
            },
        }))

        xml = _render(body, {"Id": "1", "Groups": [{"Rows": [{"Cell": "x"}, {"Cell": "y"}]}]})

        assert xml.count("<Rows>") == 2
        assert "<Cell>x</Cell>" in xml
        assert "<Cell>y</Cell>" in xml

    def test_unqualified_by_default(self, request_type):
        usage = TagUsageCollector()
        _generate(request_type, usage=usage)

        assert usage.tag_to_prefix == {"Request": "urna"}
        assert usage.unqualified_tags == ["Id", "Items", "Name"]
        assert usage.minimal_namespaces() == {"urna": "urn:a"}

    def test_qualification_inherited_by_descendants(self):
        body = _generate(ingest_type_object({
            "$namespace": "urn:a",
            "$qualified": True,
            "Id": "xsd:string",
            "Outer": {"Inner": "xsd:string"},
        }))

        assert "<urna:Id>{{ props.Id }}</urna:Id>" in body
        assert "<urna:Outer>" in body
        assert "<urna:Inner>{{ props.Outer.Inner }}</urna:Inner>" in body

    def test_element_flag_overrides_inherited(self):
        body = _generate(ingest_type_object({
            "$namespace": "urn:a",
            "$qualified": True,
            "Id": "xsd:string",
            "Loose": {"type": {"Inner": "xsd:string"}, "$qualified": False},
        }))

        assert "<urna:Id>" in body
        assert "<Loose>" in body
        assert "<Inner>{{ props.Loose.Inner }}</Inner>" in body

    def test_colliding_prefixes_stay_distinct(self):
        root = ingest_type_object({
            "$namespace": ONE,
            "$qualified": True,
            "Local": "xsd:string",
            "Remote": {"type": "xsd:string", "$namespace": TWO},
        })
        usage = TagUsageCollector()

        body = _generate(root, base=ONE, usage=usage)

        assert "<common:Local>{{ props.Local }}</common:Local>" in body
        assert "<common2:Remote>{{ props.Remote }}</common2:Remote>" in body
        assert usage.minimal_namespaces() == {"common": ONE, "common2": TWO}

    def test_cycle_emits_opaque_leaf(self):
        registry = ingest_registry({
            "urn:x:Node": {"value": "xsd:string", "children": {"type": "urn:x:Node", "maxOccurs": "unbounded"}},
        })

        body = _generate(registry.complex_types["urn:x:Node"], registry, base="urn:x", type_name="Node")

        assert body == "\n".join([
            "<urnx:Node>",
            "  <value>{{ props.value }}</value>",
            "  {% for item in props.children %}",
            "  <children>{{ item }}</children>",
            "  {% endfor %}",
            "</urnx:Node>",
        ])

    def test_single_inline_wrapper_has_no_tag(self):
        body = _generate(ingest_type_object({"Wrapper": {"type": {"A": "xsd:string", "B": "xsd:int"}}}))

        assert body == "\n".join([
            "<urna:Request>",
            "  <A>{{ props.A }}</A>",
            "  <B>{{ props.B }}</B>",
            "</urna:Request>",
        ])

    def test_single_reference_wrapper_keeps_tag_and_root_path(self):
        registry = ingest_registry({"urn:a:Payload": {"X": "xsd:string", "Y": "xsd:boolean"}})

        body = _generate(ingest_type_object({"Payload": "urn:a:Payload"}), registry)

        assert body == "\n".join([
            "<urna:Request>",
            "  <Payload>",
            "    <X>{{ props.X }}</X>",
            "    <Y>{{ props.Y }}</Y>",
            "  </Payload>",
            "</urna:Request>",
        ])

    def test_single_scalar_reference_not_flattened(self):
        body = _generate(ingest_type_object({"Echo": "urn:a:Missing"}))
        assert "<Echo>{{ props.Echo }}</Echo>" in body

    def test_empty_complex_child_is_self_closing(self):
        body = _generate(ingest_type_object({"Id": "xsd:string", "Empty": {"type": {}}}))
        assert "  <Empty/>" in body

    def test_custom_indent(self, request_type):
        resolver = TypeResolver(ingest_registry({}))
        table = NamespacePrefixTable.build([request_type], resolver, base_namespace="urn:a")
        generator = XmlBodyGenerator(resolver, NamespaceResolver(table, "urna"), indent=4)

        body = generator.generate("urna", "Request", request_type)

        assert "\n    <Id>{{ props.Id }}</Id>" in body
        assert "\n        <Name>{{ item.Name }}</Name>" in body

    def test_custom_property_root(self, request_type):
        resolver = TypeResolver(ingest_registry({}))
        table = NamespacePrefixTable.build([request_type], resolver, base_namespace="urn:a")
        generator = XmlBodyGenerator(resolver, NamespaceResolver(table, "urna"))

        body = generator.generate("urna", "Request", request_type, property_path_prefix="data")

        assert "{{ data.Id }}" in body
        assert "{% for item in data.Items %}" in body

    def test_root_without_namespace_is_unprefixed(self):
        root = ingest_type_object({"$qualified": True, "Id": "xsd:string", "Note": "xsd:string"})
        resolver = TypeResolver(ingest_registry({}))
        table = NamespacePrefixTable.build([root], resolver)
        usage = TagUsageCollector()

        body = XmlBodyGenerator(resolver, NamespaceResolver(table, "tns")).generate(None, "Ping", root, usage=usage)

        assert body == "<Ping>\n  <Id>{{ props.Id }}</Id>\n  <Note>{{ props.Note }}</Note>\n</Ping>"
        assert usage.minimal_namespaces() == {}

    def test_repeated_runs_are_identical(self, request_type):
        assert _generate(request_type) == _generate(request_type)


class TestPropertyAccess:

    @pytest.mark.parametrize("name,expected", [
        ("Id", "props.Id"),
        ("first_name", "props.first_name"),
        ("first-name", 'props["first-name"]'),
        ("3d", 'props["3d"]'),
        ("class", 'props["class"]'),
        ("items", 'props["items"]'),
        ("keys", 'props["keys"]'),
    ])
    def test_access_syntax(self, name, expected):
        assert property_access("props", name) == expected

    def test_subscript_access_renders(self):
        template = "{{ " + property_access("props", "items") + " }}"
        assert _render(template, {"items": "x"}) == "x"

    def test_loop_variable_names(self):
        assert [loop_variable(d) for d in range(3)] == ["item", "item1", "item2"]
