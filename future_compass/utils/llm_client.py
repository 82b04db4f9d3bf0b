"""
LLM Client Module

Chat-completions client shared by the analysis and interview flows.
All provider calls go through ChatCompletionClient - one attempt per call,
no retries, bounded by a timeout.

Example Usage:
    from future_compass.utils.llm_client import ChatCompletionClient, parse_json_reply

    client = ChatCompletionClient(base_url="http://localhost:8787/api/openai")
    text = await client.complete(
        messages=[ChatMessage(role="user", content="Start the interview.")],
        schema_name="interview_turn_schema.json",
        response_name="InterviewTurn",
    )
    payload = parse_json_reply(text)
"""

import json
from typing import Any, Optional, Sequence

import httpx
import structlog

from future_compass.models.config import AppSettings
from future_compass.models.interview import ChatMessage
from future_compass.utils.errors import ProviderError, ProviderTimeoutError, SchemaError
from future_compass.utils.validator import SchemaValidator, get_default_validator

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "gpt-5-nano"


def extract_json_from_markdown(response_text: str) -> str:
    """Extract JSON from LLM response, removing markdown code block markers if present.

    Args:
        response_text: Raw text response from LLM

    Returns:
        Clean JSON string with code block markers removed
    """
    json_text = response_text.strip()

    if json_text.startswith("```json"):
        json_text = json_text[7:]
    elif json_text.startswith("```"):
        json_text = json_text[3:]

    if json_text.endswith("```"):
        json_text = json_text[:-3]

    return json_text.strip()


def parse_json_reply(response_text: str) -> Any:
    """Parse a provider reply as JSON.

    Raises:
        SchemaError: If the reply is not valid JSON
    """
    try:
        return json.loads(extract_json_from_markdown(response_text))
    except json.JSONDecodeError as e:
        logger.error(
            "Failed to parse JSON from LLM response",
            error=str(e),
            response=response_text[:200],
        )
        raise SchemaError(f"Reply is not valid JSON: {e}", raw_response=response_text)


def extract_message_text(content: Any) -> Optional[str]:
    """Pull assistant text out of a chat-completions message content field.

    Content is either a plain string or a list of parts, the first part
    carrying a "text" key wins.
    """
    if not content:
        return None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and "text" in part:
                return part.get("text")
    return None


class ChatCompletionClient:
    """Async client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        base_url: str,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        api_key: Optional[str] = None,
        validator: Optional[SchemaValidator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Endpoint root; "/chat/completions" is appended (proxy or provider)
            model: Model name sent with every request
            timeout: Seconds before a call fails with ProviderTimeoutError
            api_key: Bearer key, only when talking to the provider directly
            validator: Schema source for response_format (defaults to shared validator)
            transport: Optional httpx transport (tests inject httpx.MockTransport)
            correlation_id: Optional correlation ID for logging
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.api_key = api_key
        self.validator = validator or get_default_validator()
        self.transport = transport
        self.log = logger.bind(correlation_id=correlation_id) if correlation_id else logger

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        correlation_id: Optional[str] = None,
    ) -> "ChatCompletionClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.provider.base_url,
            model=settings.provider.model,
            timeout=settings.timeouts.provider,
            api_key=settings.provider.api_key,
            transport=transport,
            correlation_id=correlation_id,
        )

    def build_payload(
        self, messages: Sequence[ChatMessage], schema_name: str, response_name: str
    ) -> dict[str, Any]:
        """Build the request body with a strict json_schema response format."""
        return {
            "model": self.model,
            "messages": [message.model_dump() for message in messages],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": response_name,
                    "schema": self.validator.request_schema(schema_name),
                    "strict": True,
                },
            },
        }

    async def complete(
        self, messages: Sequence[ChatMessage], schema_name: str, response_name: str
    ) -> str:
        """
        Send one chat-completions request and return the assistant text.

        Args:
            messages: Full conversation, system message first
            schema_name: Response schema file used for response_format
            response_name: Schema name reported to the provider

        Returns:
            Assistant message text (expected to be JSON)

        Raises:
            ProviderTimeoutError: If the call exceeds the timeout
            ProviderError: On transport failure or non-2xx status
            SchemaError: If the response envelope carries no assistant text
        """
        payload = self.build_payload(messages, schema_name, response_name)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url}/chat/completions"
        self.log.debug(
            "LLM call initiated",
            url=url,
            message_count=len(messages),
            response_name=response_name,
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            self.log.error("LLM call timed out", timeout=self.timeout, error=str(e))
            raise ProviderTimeoutError(
                f"Provider did not respond within {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            self.log.error("LLM call failed", error=str(e))
            raise ProviderError(f"Provider request failed: {e}") from e

        if not response.is_success:
            self.log.error(
                "LLM call returned error status",
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise ProviderError(
                f"OpenAI request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SchemaError(
                "Provider response body is not JSON", raw_response=response.text
            ) from e

        content = None
        choices = data.get("choices") if isinstance(data, dict) else None
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict):
                content = extract_message_text(message.get("content"))

        if not content:
            raise SchemaError("No response from AI", raw_response=response.text)

        self.log.debug("LLM call succeeded", response_length=len(content))
        return content
