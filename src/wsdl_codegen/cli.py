#!/usr/bin/env python3
"""
Command-line entry point.

    wsdl-codegen service.wsdl -o generated/
    wsdl-codegen https://example.com/service?wsdl --operation GetUser
    wsdl-codegen service.wsdl --list
"""

import argparse
import logging
import sys

import yaml

from wsdl_codegen.clients.contract_client import ContractLoadError
from wsdl_codegen.core.config import GeneratorConfig
from wsdl_codegen.core.logging import setup_logging
from wsdl_codegen.services.domain.wsdl import OperationResolutionError, list_operations, load_contract
from wsdl_codegen.services.generator import CodeGenerator, GenerationError
from wsdl_codegen.services.rendering import write_artifacts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wsdl-codegen",
        description="Generate typed request interfaces and SOAP body templates from a WSDL contract",
    )
    ap.add_argument("contract", help="Path or http(s) URL of the WSDL")
    ap.add_argument("-o", "--output-dir", help="Directory for generated modules")
    ap.add_argument("--operation", help="Generate only this operation")
    ap.add_argument("--list", action="store_true", help="List the contract's operations and exit")
    ap.add_argument("--config", help="YAML file with setting overrides")
    ap.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)")
    ap.add_argument("--log-format", choices=["json", "text"], help="Log output format")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = GeneratorConfig()
    config_error = None
    if args.config:
        try:
            config.update_from_yaml(args.config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            config_error = e
    if args.output_dir:
        config.OUTPUT_DIR = args.output_dir

    setup_logging(args.log_level or config.LOG_LEVEL, args.log_format or config.LOG_FORMAT)
    if config_error is not None:
        logger.error(f"Cannot load config {args.config}: {config_error}")
        return 1

    try:
        document, registry = load_contract(args.contract, timeout=config.FETCH_TIMEOUT)

        if args.list:
            for name in list_operations(document):
                print(name)  # noqa: T201
            return 0

        result = CodeGenerator(registry, config).generate(document, operation=args.operation)
        written = write_artifacts(result, config.OUTPUT_DIR, props_root=config.PROPS_ROOT)
    except (ContractLoadError, OperationResolutionError, GenerationError) as e:
        logger.error(f"Generation failed: {e}")
        return 1

    for failure in result.failures:
        logger.warning(f"Not generated: {failure.error}", extra={"operation": failure.operation})
    logger.info(f"Generated {len(written)} modules in {config.OUTPUT_DIR} ({result.status})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
