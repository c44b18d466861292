from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar
import logging

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from sprintpulse.errors import AIResponseError
from sprintpulse.platform.config import Settings

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

SYSTEM_PROMPT = (
    "You are an agile delivery analyst. Base every statement on the data provided "
    "and follow the requested output format exactly."
)


class LLMProvider(Protocol):
    def complete_text(self, prompt: str) -> str:
        ...

    def complete_json(self, prompt: str, schema: Type[SchemaT]) -> SchemaT:
        ...


class OpenAIProvider:
    """
    Generative-text client backed by the OpenAI chat completions API.

    JSON answers are requested in the constrained ``json_object`` mode and
    validated against a Pydantic schema; anything else is an AIResponseError.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.4,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client: Optional[OpenAI] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIProvider":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )

    @property
    def client(self) -> OpenAI:
        # Created on first use so the API can boot without a key
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def chat_completion(self, messages: List[Dict[str, Any]], **kwargs) -> Any:
        completion_args = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            **kwargs,
        }
        return self.client.chat.completions.create(**completion_args)

    def complete_text(self, prompt: str) -> str:
        response = self.chat_completion(self._messages(prompt))
        return self._content(response)

    def complete_json(self, prompt: str, schema: Type[SchemaT]) -> SchemaT:
        response = self.chat_completion(
            self._messages(prompt),
            response_format={"type": "json_object"},
        )
        content = self._content(response)
        try:
            return schema.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"AI response does not match {schema.__name__}: {e.error_count()} errors")
            raise AIResponseError(
                f"AI response does not match {schema.__name__}",
                details={"errors": e.errors(include_url=False)},
            ) from e

    @staticmethod
    def _messages(prompt: str) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    @staticmethod
    def _content(response: Any) -> str:
        if not response.choices:
            raise AIResponseError("AI response contained no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise AIResponseError("AI response was empty")
        return content
