"""
Code Judge Client

The judge is any OpenAI-compatible chat endpoint (DeepSeek by default), so we
use the openai library.

- Every call is bounded by `llm_timeout_seconds`; a timeout surfaces as an
  exception like any other API failure.
- The evaluator depends on the `CodeJudge` protocol, not on this class, so
  tests inject a scripted fake.
"""
import json
import logging
from typing import Protocol

from openai import OpenAI

from placement_prep.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

JUDGE_SYSTEM_PROMPT = "You are an automated code evaluator. Follow the requested output format exactly."


class CodeJudge(Protocol):
    """Anything that turns a prompt into raw completion text."""

    def complete(self, prompt: str) -> str:
        ...


def extract_json(text: str) -> dict:
    """
    Extract JSON from a judge response.
    Handles cases where the model wraps JSON in markdown code blocks.

    Raises:
        ValueError: not a JSON object (json.JSONDecodeError is a ValueError)
    """
    text = (text or "").strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    data = json.loads(text.strip())
    if not isinstance(data, dict):
        raise ValueError("Judge response is not a JSON object")
    return data


class LLMCodeJudge:
    """
    Wrapper for the chat completions API used as a code judge.
    """

    def __init__(self, client: OpenAI = None, model: str = None):
        self.client = client or OpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries
        )
        self.model = model or settings.llm_model

    def complete(self, prompt: str, max_tokens: int = 1200) -> str:
        """
        Call the endpoint and return raw text.
        API errors and timeouts propagate to the caller.
        """
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": JUDGE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            max_tokens=max_tokens,
            temperature=settings.llm_temperature  # Low temp for consistent structured output
        )
        return response.choices[0].message.content or ""

    def test_connection(self) -> bool:
        """Test if the judge endpoint is reachable"""
        try:
            response = self.complete("Reply with exactly: OK", max_tokens=10)
            return "OK" in response.upper()
        except Exception as e:
            logger.error("Code judge connection failed: %s", e)
            return False


# Singleton instance
_code_judge: LLMCodeJudge = None


def get_code_judge() -> CodeJudge:
    """Get or create the judge client (singleton pattern). FastAPI dependency."""
    global _code_judge
    if _code_judge is None:
        _code_judge = LLMCodeJudge()
    return _code_judge
