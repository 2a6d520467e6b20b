#!/usr/bin/env python3
"""SOAP envelope namespace detection."""

import logging
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)

SOAP11_ENVELOPE = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP12_ENVELOPE = "http://www.w3.org/2003/05/soap-envelope"

SOAP11_BINDING = "http://schemas.xmlsoap.org/wsdl/soap/"
SOAP12_BINDING = "http://schemas.xmlsoap.org/wsdl/soap12/"


class SoapVersion(str, Enum):
    SOAP11 = "1.1"
    SOAP12 = "1.2"

    @property
    def envelope_namespace(self) -> str:
        return SOAP12_ENVELOPE if self is SoapVersion.SOAP12 else SOAP11_ENVELOPE


def _binding_version(uri: str) -> SoapVersion | None:
    normalized = uri.rstrip("/")
    if normalized == SOAP12_BINDING.rstrip("/") or normalized.endswith("/soap12"):
        return SoapVersion.SOAP12
    if normalized == SOAP11_BINDING.rstrip("/") or normalized.endswith("/soap"):
        return SoapVersion.SOAP11
    return None


def detect_soap_version(namespaces: dict[str, str], binding_namespaces: Iterable[str] = ()) -> SoapVersion:
    """Pick the SOAP version for a contract.

    Known envelope URIs among the contract's namespace declarations win.
    Otherwise the SOAP binding URIs decide (declared namespaces first, then
    the namespaces of binding extension elements). Defaults to SOAP 1.1.
    """
    declared = list(namespaces.values())

    if SOAP12_ENVELOPE in declared:
        return SoapVersion.SOAP12
    if SOAP11_ENVELOPE in declared:
        return SoapVersion.SOAP11

    for uri in [*binding_namespaces, *declared]:
        version = _binding_version(uri)
        if version is not None:
            return version

    logger.debug("No SOAP envelope or binding namespace declared, defaulting to SOAP 1.1")
    return SoapVersion.SOAP11


def detect_envelope_namespace(namespaces: dict[str, str], binding_namespaces: Iterable[str] = ()) -> str:
    return detect_soap_version(namespaces, binding_namespaces).envelope_namespace
