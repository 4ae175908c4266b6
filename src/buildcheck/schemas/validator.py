"""Schema validation against bundled package-data schemas."""

from typing import Any

from jsonschema.validators import Draft202012Validator

from buildcheck.utils.schema_registry import get_registry


def validate_data(data: Any, schema_name: str) -> tuple[bool, list[str]]:
    """Validate data against a bundled schema.

    Args:
        data: Parsed document to validate
        schema_name: Name of schema to validate against

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        KeyError: If schema not found in package data
    """
    schema = get_registry().get_json(schema_name)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])

    error_messages = [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in errors
    ]
    return not error_messages, error_messages
