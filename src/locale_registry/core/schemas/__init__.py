"""
JSON Schema definitions for locale registry data.

Provides JSON Schema validation for locale bundles. The schema file is also
meant to be referenced from editors when authoring locale files.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema


def load_schema(schema_name: str) -> dict[str, Any]:
    """
    Load a JSON Schema by name.

    Args:
        schema_name: Name of the schema file (without .json extension)

    Returns:
        Parsed JSON Schema dictionary

    Raises:
        FileNotFoundError: If schema file doesn't exist
        ValueError: If schema file is invalid JSON
    """
    schema_path = Path(__file__).parent / f"{schema_name}.json"

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    try:
        with open(schema_path, encoding="utf-8") as f:
            result: dict[str, Any] = json.load(f)
            return result
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in schema {schema_name}: {e}") from e


def validate_locale_bundle(data: dict[str, Any]) -> None:
    """
    Validate locale bundle data against JSON Schema.

    Args:
        data: Nested bundle data (plain dicts and strings)

    Raises:
        jsonschema.ValidationError: First error found, with nested oneOf
            causes kept in ``.context``
    """
    schema = load_schema("locale_bundle")
    validator = jsonschema.Draft7Validator(schema)
    for error in validator.iter_errors(data):
        raise error


__all__ = ["load_schema", "validate_locale_bundle"]
