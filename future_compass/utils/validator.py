"""
JSON schema checks for the two things FutureCompass reads from outside:
profile files typed by a student and replies produced by the provider.

Profile problems surface as ConfigurationError with a readable, multi-line
explanation. Provider problems surface as SchemaError carrying the raw reply.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from jsonschema import Draft7Validator, FormatChecker
from jsonschema import ValidationError as JSONSchemaValidationError

from future_compass.utils.errors import ConfigurationError, SchemaError

logger = structlog.get_logger(__name__)

DEFAULT_SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

# Keys that describe the schema document itself; response_format rejects them
_DRAFT_METADATA = ("$schema", "title")

# How many violations a SchemaError message lists
_MAX_REPORTED = 5


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class SchemaValidator:
    """Draft-7 validation against the schemas packaged in future_compass/schemas."""

    def __init__(self, schema_dir: Path = DEFAULT_SCHEMA_DIR):
        self.schema_dir = schema_dir
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Read a schema once and cache it.

        Raises:
            ConfigurationError: Missing or unparsable schema file
        """
        cached = self._schemas.get(schema_name)
        if cached is not None:
            return cached

        path = self.schema_dir / schema_name
        if not path.is_file():
            logger.error("schema_not_found", schema_name=schema_name, schema_path=str(path))
            raise ConfigurationError(f"Schema file not found: {path}")
        try:
            schema = _read_json(path)
        except json.JSONDecodeError as e:
            logger.error("schema_invalid_json", schema_name=schema_name, error=str(e))
            raise ConfigurationError(f"Invalid JSON in schema {schema_name}: {e}") from e

        self._schemas[schema_name] = schema
        logger.debug("schema_loaded", schema_name=schema_name)
        return schema

    def request_schema(self, schema_name: str) -> Dict[str, Any]:
        """The schema as embedded in a strict json_schema response format."""
        return {
            key: value
            for key, value in self.load_schema(schema_name).items()
            if key not in _DRAFT_METADATA
        }

    def collect_errors(
        self, document: Any, schema_name: str
    ) -> List[JSONSchemaValidationError]:
        checker = Draft7Validator(
            self.load_schema(schema_name), format_checker=FormatChecker()
        )
        return sorted(checker.iter_errors(document), key=lambda e: list(e.path))

    def validate_response(
        self, document: Any, schema_name: str, raw_response: str = ""
    ) -> None:
        """
        Check a parsed provider reply.

        Raises:
            SchemaError: With the first few violations and the raw reply attached
        """
        errors = self.collect_errors(document, schema_name)
        if not errors:
            return

        logger.warning(
            "response_validation_failed",
            schema_name=schema_name,
            error_count=len(errors),
            first_error=errors[0].message,
        )
        summary = "; ".join(
            f"{self._error_path(e)}: {e.message}" for e in errors[:_MAX_REPORTED]
        )
        raise SchemaError(
            f"Provider reply does not match {schema_name}: {summary}",
            raw_response=raw_response,
        )

    def validate(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Check a user-supplied document.

        Raises:
            ConfigurationError: Every violation, explained one per bullet
        """
        errors = self.collect_errors(config, schema_name)
        if errors:
            logger.warning("validation_failed", schema_name=schema_name, error_count=len(errors))
            raise ConfigurationError(
                "\n".join(self._format_validation_errors(errors, schema_name))
            )
        logger.debug("validation_passed", schema_name=schema_name)

    def validate_file(self, config_path: Path, schema_name: str) -> Dict[str, Any]:
        """Read a JSON file, validate it and return its contents."""
        if not config_path.is_file():
            logger.error("config_file_not_found", config_path=str(config_path))
            raise ConfigurationError(f"File not found: {config_path}")
        try:
            config = _read_json(config_path)
        except json.JSONDecodeError as e:
            logger.error("config_invalid_json", config_path=str(config_path), error=str(e))
            raise ConfigurationError(
                f"Invalid JSON in {config_path.name}: {e}\n"
                "Look for trailing commas, unquoted keys or unbalanced brackets."
            ) from e

        self.validate(config, schema_name)
        return config

    @staticmethod
    def _error_path(error: JSONSchemaValidationError) -> str:
        return " -> ".join(str(part) for part in error.absolute_path) or "(root)"

    def _describe(self, error: JSONSchemaValidationError) -> str:
        path = self._error_path(error)
        kind = error.validator
        if kind == "required":
            field = error.message.split("'")[1]
            return f"  * Missing required field: '{field}' at {path}"
        if kind == "enum":
            return (
                f"  * '{path}' has an unsupported value: {error.message}\n"
                f"    -> Allowed values: {error.validator_value}"
            )
        if kind == "type":
            return f"  * '{path}' should be of type {error.validator_value}: {error.message}"
        if kind == "minLength":
            return f"  * '{path}' is empty or too short"
        return f"  * '{path}': {error.message}"

    def _format_validation_errors(
        self, errors: List[JSONSchemaValidationError], schema_name: str
    ) -> List[str]:
        """Header line, one bullet per violation, closing hint."""
        lines = [f"[X] {schema_name} has {len(errors)} problem(s):"]
        lines.extend(self._describe(error) for error in errors)
        lines.append("[!] Fix the file and run the command again.")
        return lines


_default_validator: Optional[SchemaValidator] = None


def get_default_validator() -> SchemaValidator:
    global _default_validator
    if _default_validator is None:
        _default_validator = SchemaValidator()
    return _default_validator
