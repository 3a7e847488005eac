"""
JSON Schema Utilities for structured LLM output.

Provides helpers for transforming Pydantic schemas to meet
OpenAI's strict mode requirements.
"""

import json
from typing import Any, Type, TypeVar
from pydantic import BaseModel, ValidationError

from solver.exceptions import LLMOutputError


T = TypeVar("T", bound=BaseModel)

# Annotations strict mode rejects; local Pydantic validation still applies them.
_STRIPPED_KEYWORDS = {"title", "minLength", "default"}


def get_strict_schema(model: Type[BaseModel]) -> dict[str, Any]:
    """
    Get a strict JSON schema from a Pydantic model.

    Transforms the schema to meet OpenAI's strict mode requirements:
    - All objects have additionalProperties: false
    - All properties are in the required array
    - $ref references have no sibling keywords
    """
    base_schema = model.model_json_schema()
    return make_schema_strict(base_schema)


def make_schema_strict(schema: dict[str, Any]) -> dict[str, Any]:
    """Transform a JSON schema to meet OpenAI's strict mode requirements."""
    def transform(obj: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(obj, dict):
            return obj

        if "$ref" in obj:
            return {"$ref": obj["$ref"]}

        result = {}
        for key, value in obj.items():
            if key == "$defs":
                result[key] = {k: transform(v) for k, v in value.items()}
            elif key in _STRIPPED_KEYWORDS:
                continue
            elif isinstance(value, dict):
                result[key] = transform(value) if key != "properties" else {
                    name: transform(prop) for name, prop in value.items()
                }
            elif isinstance(value, list):
                result[key] = [
                    transform(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                result[key] = value

        if result.get("type") == "object" and "properties" in result:
            result["additionalProperties"] = False
            result["required"] = list(result["properties"].keys())

        return result

    return transform(schema)


def parse_llm_output(output_text: str, model: Type[T], operation: str = "unknown") -> T:
    """Parse raw model text as JSON and validate it against a Pydantic model."""
    try:
        parsed = json.loads(output_text)
    except (json.JSONDecodeError, TypeError) as e:
        raise LLMOutputError(operation=operation, expected_schema="valid JSON") from e

    try:
        return model.model_validate(parsed)
    except ValidationError as e:
        raise LLMOutputError(operation=operation, expected_schema=model.__name__) from e
