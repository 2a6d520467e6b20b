"""
Domain Layer

This package contains business logic organized by domain area.
Domain services implement core algorithms and workflows but should not
directly handle external I/O (use clients layer for that).

Domains:
- schema: type resolution, interface collection and body template generation
- wsdl: contract parsing, operation location and envelope detection
"""
