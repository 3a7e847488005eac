"""
LLM Gateway

Turns each tutoring request into a single structured-output model call and
parses the reply into a typed result. Failures of any kind (missing
credential, network error, empty reply, malformed JSON, schema mismatch) come
back as a failed GatewayResult; nothing partial is ever handed upward.
"""

import json
import logging
import time
from typing import List, Optional, Type

from pydantic import BaseModel

from shared.models.domain import StudentWork, content_image_url
from shared.services.llm_service import LLMService
from shared.utils import constants
from solver.models.llm_outputs import (
    CheckThinkingResult,
    DecomposeResult,
    ExtractionResult,
    GatewayResult,
    SolveResult,
    VerifyResult,
)
from solver.prompts import solver_prompts as prompts
from solver.prompts.templates import PromptTemplate
from solver.utils.schema_utils import get_strict_schema, parse_llm_output

logger = logging.getLogger("solver.llm_gateway")


def _image_parts(image_urls: List[str]) -> list[dict]:
    return [{"type": "image_url", "image_url": {"url": url}} for url in image_urls if url]


class LLMGateway:
    """Prompt construction and response parsing for every model operation."""

    def __init__(self, llm_service: Optional[LLMService]):
        self.llm = llm_service

    # ─── Operations ───────────────────────────────────────────────────

    def extract_problem(self, image_url: str) -> GatewayResult:
        """Transcribe a problem image into text, category, and title."""
        return self._run(
            operation="extract_problem",
            system_prompt=prompts.EXTRACT_SYSTEM_PROMPT,
            user_text=prompts.EXTRACT_USER_INSTRUCTION,
            image_urls=[image_url],
            output_model=ExtractionResult,
            max_tokens=constants.EXTRACT_MAX_TOKENS,
        )

    def solve(self, problem_text: str, image_url: Optional[str] = None) -> GatewayResult:
        """Produce a step-by-step solution and a concise final answer."""
        return self._run(
            operation="solve",
            system_prompt=prompts.SOLVE_SYSTEM_PROMPT,
            user_text=prompts.SOLVE_USER_TEMPLATE.render(problem_text=problem_text or ""),
            image_urls=[image_url] if image_url else [],
            output_model=SolveResult,
            max_tokens=constants.SOLVE_MAX_TOKENS,
        )

    def decompose(self, problem_content, hidden_solution: str, student_work: StudentWork) -> GatewayResult:
        """
        Diagnose the missing insight and generate an easier subproblem.

        The hidden solution goes to the model only; it never leaves the server.
        """
        return self._run(
            operation="generate_subproblem",
            system_prompt=prompts.DECOMPOSE_SYSTEM_PROMPT,
            user_text=prompts.build_decompose_context(problem_content, hidden_solution, student_work),
            image_urls=self._images_for(problem_content) + list(student_work.images),
            output_model=DecomposeResult,
            max_tokens=constants.DECOMPOSE_MAX_TOKENS,
        )

    def check_thinking(self, problem_content, student_work: StudentWork) -> GatewayResult:
        """Advisory critique of the student's current work."""
        return self._run(
            operation="check_thinking",
            system_prompt=prompts.CHECK_SYSTEM_PROMPT,
            user_text=prompts.build_check_context(problem_content, student_work),
            image_urls=self._images_for(problem_content) + list(student_work.images),
            output_model=CheckThinkingResult,
            max_tokens=constants.CHECK_MAX_TOKENS,
        )

    def verify(self, original_content, subproblem_content, student_attempt: StudentWork) -> GatewayResult:
        """Decide whether an attempt shows the subproblem's insight."""
        images = self._images_for(subproblem_content) + list(student_attempt.images)
        if original_content is not None:
            images = self._images_for(original_content) + images
        return self._run(
            operation="verify_attempt",
            system_prompt=prompts.VERIFY_SYSTEM_PROMPT,
            user_text=prompts.build_verify_context(original_content, subproblem_content, student_attempt),
            image_urls=images,
            output_model=VerifyResult,
            max_tokens=constants.VERIFY_MAX_TOKENS,
        )

    # ─── Internals ────────────────────────────────────────────────────

    @staticmethod
    def _images_for(content) -> List[str]:
        image_url = content_image_url(content)
        return [image_url] if image_url else []

    def _run(
        self,
        operation: str,
        system_prompt: PromptTemplate,
        user_text: str,
        image_urls: List[str],
        output_model: Type[BaseModel],
        max_tokens: int,
    ) -> GatewayResult:
        start_time = time.time()

        if self.llm is None:
            logger.error(json.dumps({"operation": operation, "event": "failed", "error": "LLM client not configured"}))
            return GatewayResult.failure("LLM client not configured")

        try:
            user_content = _image_parts(image_urls) + [{"type": "text", "text": user_text}]
            messages = [
                {"role": "system", "content": system_prompt.render()},
                {"role": "user", "content": user_content},
            ]
            output_text = self.llm.chat(
                messages,
                json_schema=get_strict_schema(output_model),
                schema_name=output_model.__name__,
                max_tokens=max_tokens,
            )
            result = parse_llm_output(output_text, output_model, operation=operation)
        except Exception as e:
            logger.error(json.dumps({
                "operation": operation,
                "event": "failed",
                "error_type": type(e).__name__,
                "error": str(e),
                "duration_ms": int((time.time() - start_time) * 1000),
            }))
            return GatewayResult.failure(str(e))

        logger.info(json.dumps({
            "operation": operation,
            "event": "completed",
            "images": len(image_urls),
            "duration_ms": int((time.time() - start_time) * 1000),
        }))
        return GatewayResult.ok(result)
