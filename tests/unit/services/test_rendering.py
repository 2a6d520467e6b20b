#!/usr/bin/env python3

from pathlib import Path

import pytest

from wsdl_codegen.core.config import GeneratorConfig
from wsdl_codegen.models.models import PropertyData
from wsdl_codegen.services.domain.wsdl import load_contract
from wsdl_codegen.services.domain.wsdl.envelope import SOAP11_ENVELOPE, SOAP12_ENVELOPE
from wsdl_codegen.services.generator import CodeGenerator
from wsdl_codegen.services.rendering import module_name, python_annotation, render_operation, write_artifacts

FIXTURES = Path(__file__).parents[2] / "fixtures"
ORDERS_WSDL = FIXTURES / "orders.wsdl"
ACCOUNTS_WSDL = FIXTURES / "accounts.wsdl"


@pytest.fixture
def result():
    document, registry = load_contract(str(ORDERS_WSDL))
    return CodeGenerator(registry, GeneratorConfig()).generate(document)


def _load_module(source: str) -> dict:
    namespace = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


class TestPythonAnnotation:

    @pytest.mark.parametrize("prop,expected", [
        (PropertyData(name="Id", type="string"), "str"),
        (PropertyData(name="Count", type="integer", modifier="?"), "Optional[int]"),
        (PropertyData(name="Amount", type="number"), "float"),
        (PropertyData(name="At", type="datetime"), "datetime"),
        (PropertyData(name="Line", type="OrderLine", modifier="[]"), "list['OrderLine']"),
        (PropertyData(name="Home", type="Address", modifier="?"), "Optional['Address']"),
    ])
    def test_annotation(self, prop, expected):
        assert python_annotation(prop) == expected


class TestModuleName:

    @pytest.mark.parametrize("operation,expected", [
        ("PlaceOrder", "place_order"),
        ("getUserInfo", "get_user_info"),
        ("Get-Status", "get_status"),
        ("3DSecure", "op_3_dsecure"),
    ])
    def test_snake_case(self, operation, expected):
        assert module_name(operation) == expected


class TestRenderOperation:
    """Test suite for generated request modules"""

    def test_module_declarations(self, result):
        module = _load_module(render_operation(result.artifacts[0]))

        assert module["OPERATION"] == "PlaceOrder"
        assert module["ENVELOPE_NAMESPACE"] == SOAP11_ENVELOPE
        assert module["NAMESPACES"] == {"orders": "http://example.com/orders"}
        assert module["UNQUALIFIED_TAGS"] == []
        assert set(module["PlaceOrderProps"].__annotations__) == {"CustomerId", "Line", "Note"}
        assert set(module["OrderLine"].__annotations__) == {"Sku", "Quantity"}
        assert "PlaceOrderResponseProps" in module

    def test_build_request(self, result):
        module = _load_module(render_operation(result.artifacts[0]))

        envelope = module["build_request"]({
            "CustomerId": "c-1",
            "Line": [{"Sku": "A-1", "Quantity": 2}, {"Sku": "B&C", "Quantity": 1}],
            "Note": "rush",
        })

        assert envelope.startswith(
            f'<soapenv:Envelope xmlns:soapenv="{SOAP11_ENVELOPE}" xmlns:orders="http://example.com/orders">'
            "<soapenv:Body><orders:PlaceOrder>"
        )
        assert "<orders:CustomerId>c-1</orders:CustomerId>" in envelope
        assert envelope.count("<orders:Line>") == 2
        assert "<orders:Sku>B&amp;C</orders:Sku>" in envelope
        assert "<soapenv:Header>" not in envelope
        assert envelope.endswith("</orders:PlaceOrder></soapenv:Body></soapenv:Envelope>")

    def test_body_template_embedded_verbatim(self, result):
        module = _load_module(render_operation(result.artifacts[0]))

        assert module["BODY_TEMPLATE"] == result.artifacts[0].body_template
        assert module["HEADER_TEMPLATE"] == ""
        assert module["PROPS_ROOT"] == "props"

    def test_operation_without_response(self, result):
        module = _load_module(render_operation(result.artifacts[1]))

        assert "GetStatusProps" in module
        assert module["UNQUALIFIED_TAGS"] == ["User"]
        body = module["build_body"]({"OrderId": "o-9", "Audit": {"User": "ops"}})
        assert "<User>ops</User>" in body


class TestRenderHeaders:
    """Test suite for SOAP header rendering"""

    @pytest.fixture
    def module(self):
        document, registry = load_contract(str(ACCOUNTS_WSDL))
        result = CodeGenerator(registry, GeneratorConfig()).generate(document)
        return _load_module(render_operation(result.artifacts[0]))

    def test_header_declarations(self, module):
        assert set(module["CredentialsProps"].__annotations__) == {"Token"}
        assert "auth" in module["DepositProps"].__annotations__
        assert "DepositResponseProps" not in module
        assert module["HEADER_TEMPLATE"].startswith("<accounts:Credentials>")

    def test_build_request_emits_header(self, module):
        envelope = module["build_request"]({
            "Account": "A-1",
            "Count": 2,
            "Audit": {"User": "ops"},
            "auth": {"Token": "t&k"},
        })

        assert envelope.startswith(
            f'<soapenv:Envelope xmlns:soapenv="{SOAP12_ENVELOPE}" xmlns:accounts="http://example.com/accounts">'
            "<soapenv:Header><accounts:Credentials>"
        )
        assert "<accounts:Token>t&amp;k</accounts:Token>" in envelope
        assert "</accounts:Credentials></soapenv:Header><soapenv:Body><accounts:Deposit>" in envelope
        assert "<accounts:Count>2</accounts:Count>" in envelope


class TestWriteArtifacts:

    def test_one_module_per_operation(self, result, tmp_path):
        written = write_artifacts(result, tmp_path / "out")

        assert [p.name for p in written] == ["place_order.py", "get_status.py"]
        assert all(p.exists() for p in written)
        assert "def build_request" in written[0].read_text(encoding="utf-8")
