"""
WSDL Contract Domain

Handles the contract side of generation:
- Contract parsing and schema indexing (parser, xsd)
- Operation/message/part location (operations)
- SOAP envelope namespace detection (envelope)
"""

from .envelope import SOAP11_ENVELOPE, SOAP12_ENVELOPE, SoapVersion, detect_envelope_namespace
from .operations import (
    HeaderRoot,
    MessageRoot,
    OperationResolutionError,
    OperationSignature,
    list_operations,
    resolve_operation,
    root_type,
)
from .parser import ContractDocument, load_contract, parse_contract

__all__ = [
    # Parsing
    "ContractDocument",
    "load_contract",
    "parse_contract",
    # Operations
    "HeaderRoot",
    "MessageRoot",
    "OperationResolutionError",
    "OperationSignature",
    "list_operations",
    "resolve_operation",
    "root_type",
    # Envelope
    "SOAP11_ENVELOPE",
    "SOAP12_ENVELOPE",
    "SoapVersion",
    "detect_envelope_namespace",
]
