import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import openai
from openai import AzureOpenAI, OpenAI
from pydantic import BaseModel, ValidationError

from app.config import Settings
from app.errors import LLMError, MalformedOutputError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_BASE = 1.0
BACKOFF_FACTOR = 2
BACKOFF_MAX = 10.0

MISSING_SUMMARY = "Unable to process the response."
NO_CONTENT_ANSWER_SUMMARY = "I apologize, but I couldn't generate a response. Please try again."
# Azure api versions before this one reject max_completion_tokens with a 400
AZURE_COMPLETION_TOKENS_SINCE = "2024-09-01"


class StructuredAnswer(BaseModel):
    summary: str
    bullets: List[str] = []
    hasAnswer: bool = False


@dataclass
class ParsedAnswer:
    """Result of validating model output: either `answer` or `error` is set."""
    answer: Optional[StructuredAnswer] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.answer is not None


def no_content_answer() -> StructuredAnswer:
    return StructuredAnswer(summary=NO_CONTENT_ANSWER_SUMMARY, bullets=[], hasAnswer=False)


def build_system_prompt(campus_name: str, context: str) -> str:
    return f"""You are a helpful, concise, and factual campus assistant for {campus_name}.

You MUST respond in the following JSON format:
{{
  "summary": "One-line summary of the answer",
  "bullets": ["Key point 1", "Key point 2", "Key point 3"],
  "hasAnswer": true
}}

Rules:
1. Use ONLY the provided context when answering. Do not make things up.
2. The "summary" should be a single concise sentence (10-20 words) answering the question.
3. The "bullets" array should contain 2-5 key points with specific details from the context.
4. Set "hasAnswer" to true if you found relevant information in the context, false otherwise.
5. If hasAnswer is false, set summary to suggest where to check (e.g., "I don't have this information. Please check the official website or contact the college directly.") and bullets to an empty array.
6. For step-by-step instructions, put each step as a bullet point.
7. Include specific numbers, dates, phone numbers, emails when available in context.
8. Be professional, friendly, and helpful.

CONTEXT FROM THE CAMPUS WEBSITE:
{context}

Remember: Respond ONLY with valid JSON in the specified format."""


def parse_structured_answer(content: str) -> ParsedAnswer:
    """
    Validate raw model output against {summary, bullets, hasAnswer}.
    Missing fields get defaults; wrong types or non-JSON are reported as errors.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        return ParsedAnswer(error=f"Model output is not valid JSON: {e}")

    if not isinstance(data, dict):
        return ParsedAnswer(error="Model output must be a JSON object")

    if not data.get("summary"):
        data["summary"] = MISSING_SUMMARY
    if data.get("bullets") is None:
        data["bullets"] = []
    if data.get("hasAnswer") is None:
        data["hasAnswer"] = False

    try:
        answer = StructuredAnswer.model_validate(data, strict=True)
    except ValidationError as e:
        return ParsedAnswer(error=f"Model output has the wrong shape: {e.error_count()} error(s)")
    return ParsedAnswer(answer=answer)


def classify_error(e: Exception) -> LLMError:
    """Map a provider exception to an LLMError; rate limit and quota errors are retryable."""
    if isinstance(e, openai.RateLimitError):
        return LLMError(f"Rate limited by LLM provider: {e}", retryable=True)
    if isinstance(e, openai.APIStatusError) and e.status_code == 429:
        return LLMError(f"Rate limited by LLM provider: {e}", retryable=True)
    return LLMError(f"LLM provider error ({type(e).__name__}): {e}", retryable=False)


def call_with_backoff(
    fn: Callable,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
):
    for attempt in range(1, max_attempts + 1):
        try:
            return fn()
        except LLMError as e:
            if not e.retryable or attempt == max_attempts:
                raise
            delay = min(BACKOFF_MAX, BACKOFF_BASE * (BACKOFF_FACTOR ** (attempt - 1)))
            logger.warning("Attempt %d/%d failed (%s), retrying in %.1fs", attempt, max_attempts, e, delay)
            sleep(delay)


def create_openai_client(settings: Settings):
    if settings.uses_azure:
        if not settings.azure_openai_api_key:
            raise ValueError("AZURE_OPENAI_API_KEY environment variable is not set")
        return AzureOpenAI(
            api_key=settings.azure_openai_api_key,
            azure_endpoint=settings.azure_openai_endpoint,
            api_version=settings.azure_openai_api_version,
        )
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY environment variable is not set")
    return OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)


def token_limit_param(settings: Settings) -> str:
    if settings.uses_azure and settings.azure_openai_api_version < AZURE_COMPLETION_TOKENS_SINCE:
        return "max_tokens"
    return "max_completion_tokens"


class LLMClient:

    def __init__(
        self,
        client,
        model: str,
        campus_name: str,
        max_completion_tokens: int = 4096,
        token_param: str = "max_completion_tokens",
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.model = model
        self.campus_name = campus_name
        self.max_completion_tokens = max_completion_tokens
        self.token_param = token_param
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        return cls(
            client=create_openai_client(settings),
            model=settings.chat_model,
            campus_name=settings.campus_name,
            max_completion_tokens=settings.max_completion_tokens,
            token_param=token_limit_param(settings),
        )

    def _complete(self, messages) -> Optional[str]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                **{self.token_param: self.max_completion_tokens},
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            raise classify_error(e) from e

        if not response.choices:
            return None
        return response.choices[0].message.content

    def generate_chat_response(self, user_message: str, context: str) -> StructuredAnswer:
        messages = [
            {"role": "system", "content": build_system_prompt(self.campus_name, context)},
            {"role": "user", "content": user_message},
        ]
        logger.info("Requesting completion (model=%s, context=%d chars)", self.model, len(context))

        content = call_with_backoff(lambda: self._complete(messages), sleep=self.sleep)
        if not content:
            logger.error("No content in LLM response, returning fallback answer")
            return no_content_answer()

        parsed = parse_structured_answer(content)
        if not parsed.ok:
            logger.error("Malformed LLM output: %s", parsed.error)
            raise MalformedOutputError(parsed.error)
        return parsed.answer
