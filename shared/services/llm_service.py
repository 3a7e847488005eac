"""
LLM Service: centralized transport for all model API calls.

Sends chat-completion requests to OpenAI with structured (JSON schema) output,
a per-call timeout, and a bounded attempt budget. Prompt construction and
result parsing belong to the callers (see solver.services.llm_gateway).
"""

import json
import time
from typing import Any, Dict, List, Optional
from openai import OpenAI, OpenAIError, RateLimitError, APITimeoutError, APIConnectionError
import logging

from shared.utils.exceptions import ConfigurationException

logger = logging.getLogger("shared.llm_service")

ChatMessage = Dict[str, Any]


class LLMService:
    """
    Service for making model API calls with timeout and error handling.

    `max_retries` is the total number of attempts; the default of 1 means a
    failed call fails the request immediately.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model_id: str,
        max_retries: int = 1,
        initial_retry_delay: float = 1.0,
        timeout: int = 60,
        max_tokens: int = 2048,
    ):
        if not api_key:
            raise ConfigurationException("openai_api_key", "an API key is required to call the model")
        if not model_id:
            raise ConfigurationException("openai_model", "a model name is required")

        # The SDK's own retry loop is disabled; attempts are counted here.
        self.client = OpenAI(api_key=api_key, max_retries=0)
        self.model_id = model_id
        self.max_retries = max(1, max_retries)
        self.initial_retry_delay = initial_retry_delay
        self.timeout = timeout
        self.max_tokens = max_tokens

    # ─── Primary entry point ───────────────────────────────────────────

    def chat(
        self,
        messages: List[ChatMessage],
        *,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
        max_tokens: Optional[int] = None,
        temperature: float = 0.7,
    ) -> str:
        """
        Call OpenAI Chat Completions and return the raw message content.

        With a schema the response is constrained by strict structured output,
        otherwise JSON-object mode is used.

        Raises:
            LLMServiceError: on API failure, exhausted attempts, or empty content
        """
        model = self.model_id
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": model,
            "params": {
                "has_schema": json_schema is not None,
                "schema_name": schema_name if json_schema else None,
                "max_tokens": max_tokens or self.max_tokens,
            }
        }))

        def _api_call():
            kwargs = {
                "model": model,
                "messages": messages,
                "max_completion_tokens": max_tokens or self.max_tokens,
                "temperature": temperature,
                "timeout": self.timeout,
            }
            if json_schema:
                kwargs["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "schema": json_schema,
                        "strict": True,
                    },
                }
            else:
                kwargs["response_format"] = {"type": "json_object"}

            response = self.client.chat.completions.create(**kwargs)
            if not response.choices:
                return None
            return response.choices[0].message.content

        content = self._execute_with_retry(_api_call, model)
        if not content:
            raise LLMServiceError(f"{model} returned an empty response")
        return content

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self.client.close()

    # ─── Helpers ──────────────────────────────────────────────────────

    def _execute_with_retry(self, api_call_fn, model_name: str) -> Any:
        """Execute API call, retrying transient failures with exponential backoff."""
        last_error = None
        delay = self.initial_retry_delay
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                result = api_call_fn()
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(json.dumps({
                    "step": "LLM_CALL",
                    "status": "complete",
                    "model": model_name,
                    "output": {"response_length": len(str(result)) if result else 0},
                    "duration_ms": duration_ms,
                    "attempts": attempt + 1
                }))

                if attempt > 0:
                    logger.info(f"{model_name} call succeeded on attempt {attempt + 1}")
                return result

            except (RateLimitError, APITimeoutError, APIConnectionError) as e:
                last_error = e
                if attempt + 1 < self.max_retries:
                    logger.warning(
                        f"{model_name} transient error {type(e).__name__} "
                        f"(attempt {attempt + 1}/{self.max_retries}). Retrying in {delay}s..."
                    )
                    time.sleep(delay)
                    delay *= 2

            except OpenAIError as e:
                logger.error(f"{model_name} API error: {str(e)}")
                raise LLMServiceError(f"{model_name} API error: {str(e)}") from e

            except Exception as e:
                logger.error(f"{model_name} unexpected error: {str(e)}")
                raise LLMServiceError(f"{model_name} unexpected error: {str(e)}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(last_error),
            "duration_ms": duration_ms,
            "attempts": self.max_retries
        }))
        raise LLMServiceError(
            f"{model_name} failed after {self.max_retries} attempt(s). Last error: {str(last_error)}"
        ) from last_error


class LLMServiceError(Exception):
    """Custom exception for LLM service errors"""
    pass
