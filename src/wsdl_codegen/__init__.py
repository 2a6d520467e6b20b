"""Generate typed request interfaces and SOAP body templates from WSDL contracts."""

__version__ = "0.1.0"
