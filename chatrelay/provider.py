import logging
from dataclasses import dataclass
from typing import Optional, Union

import requests

from chatrelay.config import (
    CHAT_MODEL,
    GROQ_API_URL,
    MODEL_MAX_TOKENS,
    MODEL_TEMPERATURE,
    PLACEHOLDER_API_KEYS,
    SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_REPLY = (
    "Please set GROQ_API_KEY to enable AI replies. "
    "You can get a free key from https://console.groq.com/keys"
)
UNEXPECTED_REPLY = "I received an unexpected response from the AI. Please try again."


# Provider configuration, resolved once at startup

@dataclass(frozen=True)
class Configured:
    api_key: str
    model: str = CHAT_MODEL
    api_url: str = GROQ_API_URL
    temperature: float = MODEL_TEMPERATURE
    max_tokens: int = MODEL_MAX_TOKENS
    system_prompt: Optional[str] = SYSTEM_PROMPT


@dataclass(frozen=True)
class Unconfigured:
    pass


ProviderConfig = Union[Configured, Unconfigured]


def resolve_provider_config(api_key, **settings) -> ProviderConfig:
    """Turn the raw credential setting into a typed provider configuration.

    A missing key, or one of the sample values from an env template, means
    the relay answers with PLACEHOLDER_REPLY instead of calling out.
    """
    if api_key is None or api_key.strip() in PLACEHOLDER_API_KEYS:
        return Unconfigured()
    return Configured(api_key=api_key.strip(), **settings)


# Decoded completion responses

@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class ProviderError:
    message: str


@dataclass(frozen=True)
class MalformedResponse:
    detail: str = ""


CompletionResult = Union[Success, ProviderError, MalformedResponse]


def decode_completion(data) -> CompletionResult:
    """Map a chat-completions JSON body onto a CompletionResult."""
    if not isinstance(data, dict):
        return MalformedResponse(f"expected a JSON object, got {type(data).__name__}")
    error = data.get("error")
    if error:
        if isinstance(error, dict):
            return ProviderError(str(error.get("message") or error))
        return ProviderError(str(error))
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return MalformedResponse("no choices in response")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        return MalformedResponse("first choice has no message content")
    return Success(content)


def reply_text(result: CompletionResult) -> str:
    """Text persisted as the assistant turn for a decoded result."""
    if isinstance(result, Success):
        return result.text
    if isinstance(result, ProviderError):
        return f"API Error: {result.message}. Please check your API key."
    return UNEXPECTED_REPLY


def build_payload(config: Configured, message: str) -> dict:
    # Only the current message is sent; earlier turns are not replayed.
    messages = []
    if config.system_prompt:
        messages.append({"role": "system", "content": config.system_prompt})
    messages.append({"role": "user", "content": message})
    return {
        "model": config.model,
        "messages": messages,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }


class CompletionClient:
    """Single, non-streaming call to an OpenAI-compatible completions API.

    Transport failures (``requests.RequestException``) are raised to the
    caller; everything that came back from the provider is decoded.
    """

    def __init__(self, config: Configured, session=None):
        self.config = config
        self.session = session or requests.Session()

    def complete(self, message: str) -> CompletionResult:
        response = self.session.post(
            self.config.api_url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.config.api_key}",
            },
            json=build_payload(self.config, message),
        )
        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Provider returned non-JSON body (status={response.status_code})")
            return MalformedResponse(f"non-JSON body with status {response.status_code}")
        logger.debug(f"Provider response: {data}")
        result = decode_completion(data)
        if isinstance(result, ProviderError):
            logger.error(f"Provider error: {result.message}")
        elif isinstance(result, MalformedResponse):
            logger.warning(f"Unexpected provider response: {result.detail}")
        return result
