#!/usr/bin/env python3
"""
Contract Document Client

Fetches WSDL and XSD documents from the local filesystem or over HTTP(S).
Pure infrastructure: returns raw bytes and knows nothing about their content.
"""

import logging
import os
from pathlib import Path
from urllib.parse import urljoin, urlparse

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class ContractLoadError(Exception):
    """
    Exception raised when a contract or schema document cannot be loaded.

    Used for:
    - Missing or unreadable local files
    - HTTP errors and timeouts
    - Documents that are not well-formed XML
    """

    def __init__(self, location: str, message: str):
        self.location = location
        super().__init__(f"{location}: {message}")


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def resolve_location(base: str, relative: str) -> str:
    """Resolve a schemaLocation against the document that references it.

    Args:
        base: Location of the referencing document (path or URL)
        relative: schemaLocation value, relative or absolute

    Returns:
        Absolute path or URL of the referenced document
    """
    if is_remote(relative) or os.path.isabs(relative):
        return relative
    if is_remote(base):
        return urljoin(base, relative)
    return str((Path(base).parent / relative).resolve())


def fetch_contract(location: str, timeout: int = DEFAULT_TIMEOUT) -> bytes:
    """Fetch a contract document.

    Args:
        location: Local path or http(s) URL
        timeout: Seconds to wait for an HTTP response

    Returns:
        Raw document bytes

    Raises:
        ContractLoadError: If the document cannot be read
    """
    if is_remote(location):
        logger.info(f"Fetching contract from {location}")
        try:
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise ContractLoadError(location, f"timed out after {timeout}s") from e
        except requests.RequestException as e:
            raise ContractLoadError(location, f"HTTP request failed: {e}") from e
        return response.content

    path = Path(location)
    logger.debug(f"Reading contract from {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ContractLoadError(location, f"cannot read file: {e}") from e
