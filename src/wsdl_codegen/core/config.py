#!/usr/bin/env python3
"""
Configuration settings for contract loading and code generation.

These settings can be overridden via environment variables, or by a YAML file
passed to the CLI with --config.
"""

import logging
import os
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class GeneratorConfig:
    """Code generation configuration.

    All values can be overridden via environment variables, read when the
    instance is created. A YAML file with lower-case keys (fetch_timeout,
    output_dir, ...) can be overlaid on top.
    """

    _CONVERTERS = {
        "fetch_timeout": int,
        "output_dir": str,
        "props_root": str,
        "indent": int,
        "max_reference_depth": int,
        "log_level": str,
        "log_format": str,
    }

    def __init__(self):
        # Timeout: Max seconds for fetching a contract or an imported schema over HTTP
        self.FETCH_TIMEOUT = int(os.getenv("WSDL_CODEGEN_FETCH_TIMEOUT", "30"))

        # Directory generated modules are written to
        self.OUTPUT_DIR = os.getenv("WSDL_CODEGEN_OUTPUT_DIR", "generated")

        # Template variable holding request props in body templates
        self.PROPS_ROOT = os.getenv("WSDL_CODEGEN_PROPS_ROOT", "props")

        # Spaces per nesting level in body templates
        self.INDENT = int(os.getenv("WSDL_CODEGEN_INDENT", "2"))

        # Max element -> type hops followed when resolving a reference
        self.MAX_REFERENCE_DEPTH = int(os.getenv("WSDL_CODEGEN_MAX_REFERENCE_DEPTH", "8"))

        # Logging
        self.LOG_LEVEL = os.getenv("WSDL_CODEGEN_LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("WSDL_CODEGEN_LOG_FORMAT", "json")  # 'json' or 'text'

    def update_from_yaml(self, path: str | Path) -> "GeneratorConfig":
        """Overlay values from a YAML file.

        Args:
            path: YAML file with a flat mapping of lower-case setting names

        Returns:
            self, for chaining

        Raises:
            ValueError: If the file does not contain a mapping
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

        for key, value in data.items():
            converter = self._CONVERTERS.get(key)
            if converter is None:
                logger.warning(f"Ignoring unknown config key '{key}' in {path}")
                continue
            setattr(self, key.upper(), converter(value))

        logger.debug(f"Loaded config overrides from {path}: {sorted(data)}")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "GeneratorConfig":
        return cls().update_from_yaml(path)


# Singleton instance
generator_config = GeneratorConfig()
