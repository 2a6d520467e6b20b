"""
Client Layer

This package contains low-level client wrappers for external resources.
Clients handle I/O but contain no business logic.

Modules:
- contract_client: WSDL/XSD document fetching (local files and HTTP)
"""

from .contract_client import ContractLoadError, fetch_contract, is_remote, resolve_location

__all__ = [
    'ContractLoadError',
    'fetch_contract',
    'is_remote',
    'resolve_location',
]
