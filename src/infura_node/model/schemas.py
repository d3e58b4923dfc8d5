"""
JSON Schema validation for host-supplied documents.

Two schemas ship with the package: ``abi.schema.json`` for contract ABIs
and ``parameters.schema.json`` for the node parameters. Validators are
compiled once per registry and schema name.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

import jsonschema

SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"

ABI_SCHEMA = "abi.schema.json"
PARAMETERS_SCHEMA = "parameters.schema.json"


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class SchemaRegistry:
    schema_root: Path
    _validators: dict[str, jsonschema.Validator] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return _DEFAULT

    def load_schema(self, schema_name: str) -> dict[str, Any]:
        with (self.schema_root / schema_name).open("r", encoding="utf-8") as f:
            return json.load(f)

    def validator_for(self, schema_name: str) -> jsonschema.Validator:
        validator = self._validators.get(schema_name)
        if validator is None:
            schema = self.load_schema(schema_name)
            validator_cls = jsonschema.validators.validator_for(schema)
            validator_cls.check_schema(schema)
            validator = self._validators[schema_name] = validator_cls(schema)
        return validator

    def iter_errors(self, instance: Any, schema_name: str) -> Iterator[str]:
        """Readable violations, ordered by location in the instance."""
        errors = self.validator_for(schema_name).iter_errors(instance)
        for error in sorted(errors, key=lambda e: [str(p) for p in e.path]):
            location = "/".join(str(part) for part in error.path) or "<root>"
            yield f"{location}: {error.message}"

    def validate(self, instance: Any, schema_name: str) -> None:
        """
        Raises:
            SchemaValidationError: With every violation in ``errors``
        """
        errors = list(self.iter_errors(instance, schema_name))
        if errors:
            raise SchemaValidationError(f"{schema_name}: {len(errors)} violation(s)", errors=errors)


_DEFAULT = SchemaRegistry(SCHEMA_ROOT)
