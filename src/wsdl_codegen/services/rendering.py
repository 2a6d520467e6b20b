#!/usr/bin/env python3
"""
Artifact rendering.

Renders one Python module per operation from the operation.py.j2 template:
TypedDict declarations for the interface graph and props, the namespaces the
body uses, and a build_request() helper that renders the body template inside
the SOAP envelope.
"""

import logging
import os
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from wsdl_codegen.models.models import GenerationResult, OperationArtifacts, PropertyData
from wsdl_codegen.services.domain.schema.type_resolver import to_pascal_case

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")

PYTHON_SCALARS = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "date": "date",
    "time": "time",
    "datetime": "datetime",
    "bytes": "bytes",
}


def python_annotation(prop: PropertyData) -> str:
    """Annotation source for a property: scalars map to builtins, interfaces are forward references."""
    annotation = PYTHON_SCALARS.get(prop.type) or repr(prop.type)
    if prop.modifier == "[]":
        return f"list[{annotation}]"
    if prop.modifier == "?":
        return f"Optional[{annotation}]"
    return annotation


def module_name(operation: str) -> str:
    """snake_case module name for an operation ("GetUserInfo" -> "get_user_info")."""
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", operation)
    name = re.sub(r"[^0-9A-Za-z_]+", "_", name).strip("_").lower()
    if not name or name[0].isdigit():
        name = f"op_{name}"
    return name


_default_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
_default_env.filters["annotation"] = python_annotation
_default_env.filters["pyrepr"] = repr
_default_env.filters["pascal"] = to_pascal_case


def render_operation(artifacts: OperationArtifacts, props_root: str = "props", env: Environment = None) -> str:
    """Render the Python module source for one operation.

    Args:
        artifacts: Generated artifacts of the operation
        props_root: Variable name the body template reads props from
        env: Jinja2 environment (defaults to the bundled templates)

    Returns:
        Module source
    """
    if env is None:
        env = _default_env
    template = env.get_template("operation.py.j2")
    return template.render(artifacts=artifacts, props_root=props_root)


def write_artifacts(result: GenerationResult, output_dir: str | Path, props_root: str = "props") -> list[Path]:
    """Write one module per generated operation.

    Returns:
        Paths of the written files
    """
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)

    written = []
    for artifacts in result.artifacts:
        path = output / f"{module_name(artifacts.operation)}.py"
        path.write_text(render_operation(artifacts, props_root), encoding="utf-8")
        logger.info(f"Wrote {path}", extra={"operation": artifacts.operation})
        written.append(path)

    return written
