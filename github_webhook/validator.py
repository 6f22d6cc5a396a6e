"""Validate webhook relay settings against the bundled JSON Schema."""

import json
from pathlib import Path

import jsonschema

SCHEMA_NAME = "webhook-config-v1.json"


def _schema_dir() -> Path:
    """Directory containing schema files (github_webhook/schema/)."""
    return Path(__file__).resolve().parent / "schema"


def load_schema(name: str = SCHEMA_NAME) -> dict:
    """Load a JSON Schema from the schema directory."""
    path = _schema_dir() / name
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def validate_webhook_config(data: dict) -> None:
    """Validate collected settings (field name -> value).

    Raises:
        jsonschema.ValidationError: If validation fails. Message includes
            all error details. Caller converts to SystemExit.
    """
    validator = jsonschema.Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        lines = ["webhook config validation failed:"]
        for i, err in enumerate(errors[:10], 1):
            path = ".".join(str(p) for p in err.absolute_path) if err.absolute_path else "(root)"
            lines.append(f"  {i}. {path}: {err.message}")
        if len(errors) > 10:
            lines.append(f"  ... and {len(errors) - 10} more errors")
        raise jsonschema.ValidationError("\n".join(lines))
