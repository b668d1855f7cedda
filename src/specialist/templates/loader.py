"""Template loading, validation and serialization."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import json5
from jsonschema import Draft202012Validator

from specialist.errors import TemplateLoadError, TemplateNotFoundError
from specialist.templates.base import SpecialistTemplate
from specialist.templates.schema import TEMPLATE_SCHEMA

logger = logging.getLogger(__name__)

_validator = Draft202012Validator(TEMPLATE_SCHEMA)


def schema_errors(data: Any) -> list[str]:
    """Return human-readable schema violations for a template document."""
    messages = []
    for error in sorted(_validator.iter_errors(data), key=lambda e: list(e.path)):
        location = ".".join(str(p) for p in error.absolute_path) or "<root>"
        messages.append(f"{location}: {error.message}")
    return messages


def read_template_document(path: Path) -> dict[str, Any]:
    """Read and parse a relaxed-JSON template file without validation."""
    if not path.is_file():
        raise TemplateNotFoundError(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(path, str(e)) from e
    try:
        data = json5.loads(text)
    except ValueError as e:
        raise TemplateLoadError(path, f"invalid JSON5: {e}") from e
    if not isinstance(data, dict):
        raise TemplateLoadError(path, "top-level value must be an object")
    return data


def load_template(path: Path | str) -> SpecialistTemplate:
    """Load and validate a template file.

    Raises TemplateNotFoundError if the file is missing and TemplateLoadError
    if it cannot be parsed or does not match the template schema.
    """
    path = Path(path)
    data = read_template_document(path)

    errors = schema_errors(data)
    if errors:
        raise TemplateLoadError(path, "; ".join(errors))

    try:
        template = SpecialistTemplate.from_dict(data, source=path)
    except ValueError as e:
        raise TemplateLoadError(path, str(e)) from e

    if template.strategy.interpolation_style != "mustache":
        logger.warning(
            "Template '%s' asks for '%s' interpolation, rendering with mustache syntax",
            template.name,
            template.strategy.interpolation_style,
        )
    logger.debug("Loaded template '%s' v%s from %s", template.name, template.version, path)
    return template


def dump_template(template: SpecialistTemplate) -> str:
    """Serialize a template as indented JSON (also valid JSON5)."""
    return json5.dumps(
        template.to_dict(),
        indent=2,
        quote_keys=True,
        trailing_commas=False,
        ensure_ascii=False,
    ) + "\n"
