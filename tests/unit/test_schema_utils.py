"""Tests for solver/utils/schema_utils.py."""
from typing import List, Optional

import pytest
from pydantic import BaseModel, Field

from solver.exceptions import LLMOutputError
from solver.models.llm_outputs import DecomposeResult, ExtractionResult, VerifyResult
from solver.utils.schema_utils import get_strict_schema, make_schema_strict, parse_llm_output


class _Step(BaseModel):
    label: str
    detail: Optional[str] = None


class _Worked(BaseModel):
    steps: List[_Step]
    note: str = Field(default="", min_length=0)


class TestGetStrictSchema:

    def test_all_properties_required(self):
        schema = get_strict_schema(DecomposeResult)
        assert set(schema["required"]) == set(DecomposeResult.model_fields)
        assert schema["additionalProperties"] is False

    def test_title_property_survives(self):
        schema = get_strict_schema(ExtractionResult)
        assert "title" in schema["properties"]
        assert "title" in schema["required"]

    def test_unsupported_keywords_stripped(self):
        schema = get_strict_schema(ExtractionResult)
        assert "title" not in schema  # model-level title annotation
        assert "minLength" not in schema["properties"]["problem_text"]
        assert "title" not in schema["properties"]["problem_text"]

    def test_nested_defs_made_strict(self):
        schema = get_strict_schema(_Worked)
        step = schema["$defs"]["_Step"]
        assert step["additionalProperties"] is False
        assert set(step["required"]) == {"label", "detail"}
        assert "default" not in schema["properties"]["note"]

    def test_ref_siblings_removed(self):
        schema = make_schema_strict({
            "type": "object",
            "properties": {"child": {"$ref": "#/$defs/X", "description": "dropped"}},
        })
        assert schema["properties"]["child"] == {"$ref": "#/$defs/X"}


class TestParseLlmOutput:

    def test_valid(self):
        result = parse_llm_output('{"solved": true, "tutor_message": "yes"}', VerifyResult, "verify_attempt")
        assert result.solved is True

    def test_invalid_json(self):
        with pytest.raises(LLMOutputError) as exc_info:
            parse_llm_output("not json", VerifyResult, "verify_attempt")
        assert exc_info.value.operation == "verify_attempt"
        assert exc_info.value.expected_schema == "valid JSON"

    def test_schema_mismatch(self):
        with pytest.raises(LLMOutputError) as exc_info:
            parse_llm_output('{"solved": "maybe"}', VerifyResult, "verify_attempt")
        assert exc_info.value.expected_schema == "VerifyResult"

    def test_none_input(self):
        with pytest.raises(LLMOutputError):
            parse_llm_output(None, VerifyResult)
