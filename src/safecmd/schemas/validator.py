"""Schema validation for safe-command's persisted JSON."""

import json
from functools import cache
from importlib.resources import files
from typing import Any

from jsonschema.validators import Draft202012Validator

SCHEMA_SUFFIX = ".schema.json"


@cache
def get_schema(schema_name: str) -> dict[str, Any]:
    """Load a bundled schema by canonical name (without suffix)."""
    name = schema_name.removesuffix(SCHEMA_SUFFIX)
    resource = files("safecmd.schemas") / f"{name}{SCHEMA_SUFFIX}"
    try:
        text = resource.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise KeyError(f"Schema '{name}' not found in safe-command package data") from exc

    schema: dict[str, Any] = json.loads(text)
    return schema


def validate_data(data: Any, schema_name: str) -> list[str]:
    """Validate ``data`` and return error messages (empty when valid)."""
    validator = Draft202012Validator(get_schema(schema_name))
    return [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in sorted(validator.iter_errors(data), key=lambda e: e.json_path)
    ]
