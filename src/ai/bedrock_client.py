"""AWS Bedrock client for text generation."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.ai.base import TextGenerator
from src.ai.exceptions import BedrockClientError
from src.ai.models import ChatTurn

if TYPE_CHECKING:
    from mypy_boto3_bedrock_runtime import BedrockRuntimeClient
    from mypy_boto3_bedrock_runtime.type_defs import ContentBlockTypeDef, MessageTypeDef

logger = logging.getLogger(__name__)

# Read timeout in seconds for a single Converse call
REQUEST_TIMEOUT = 60

CONNECT_TIMEOUT = 10

# Model ID aliases - use these instead of full Bedrock model IDs
MODEL_ALIASES: dict[str, str] = {
    "haiku": "global.anthropic.claude-haiku-4-5-20251001-v1:0",
    "sonnet": "global.anthropic.claude-sonnet-4-5-20250929-v1:0",
    "opus": "global.anthropic.claude-opus-4-5-20251101-v1:0",
}

# Valid model alias options
VALID_MODEL_OPTIONS = frozenset(MODEL_ALIASES.keys())

DEFAULT_TEMPERATURE = 0.7


def resolve_model_id(model_id: str) -> str:
    """Resolve a model alias to a full model ID.

    :param model_id: Model alias (haiku, sonnet, opus).
    :returns: Full Bedrock model ID.
    :raises ValueError: If model_id is not a valid alias.
    """
    model_lower = model_id.lower()
    if model_lower not in MODEL_ALIASES:
        valid_options = ", ".join(sorted(VALID_MODEL_OPTIONS))
        raise ValueError(f"Invalid model '{model_id}'. Must be one of: {valid_options}")
    return MODEL_ALIASES[model_lower]


class BedrockClient(TextGenerator):
    """Client for the AWS Bedrock Converse API.

    ``converse`` is the blocking low-level call. The TextGenerator methods run
    it in a worker thread so they can be awaited from the event loop.
    """

    def __init__(
        self,
        model_id: str = "haiku",
        region_name: str | None = None,
    ) -> None:
        """Initialise the Bedrock client.

        :param model_id: Model alias used for every request.
        :param region_name: AWS region. Defaults to AWS_REGION env var or eu-west-2.
        :raises ValueError: If model_id is not a valid alias.
        """
        self.model_id = resolve_model_id(model_id)
        self.region_name = region_name or os.environ.get("AWS_REGION", "eu-west-2")

        self._client: BedrockRuntimeClient = boto3.client(
            "bedrock-runtime",
            region_name=self.region_name,
            config=Config(
                read_timeout=REQUEST_TIMEOUT,
                connect_timeout=CONNECT_TIMEOUT,
                retries={"max_attempts": 2},
            ),
        )

        logger.debug(f"Initialised BedrockClient: region={self.region_name}, model={model_id}")

    def converse(
        self,
        messages: list[MessageTypeDef],
        system_prompt: str | None = None,
        max_tokens: int = 500,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> dict[str, Any]:
        """Invoke the Bedrock Converse API.

        :param messages: Conversation messages.
        :param system_prompt: Optional system prompt.
        :param max_tokens: Maximum tokens in response.
        :param temperature: Sampling temperature.
        :returns: Converse API response.
        :raises BedrockClientError: If the API call fails or times out.
        """
        request_params: dict[str, Any] = {
            "modelId": self.model_id,
            "messages": messages,
            "inferenceConfig": {
                "maxTokens": max_tokens,
                "temperature": temperature,
            },
        }

        if system_prompt:
            request_params["system"] = [{"text": system_prompt}]

        try:
            logger.debug(
                f"Calling Bedrock Converse: model={self.model_id}, messages_count={len(messages)}"
            )
            start_time = time.perf_counter()
            response = self._client.converse(**request_params)
            latency_ms = int((time.perf_counter() - start_time) * 1000)

            logger.debug(
                f"Bedrock response: stop_reason={response.get('stopReason')}, "
                f"usage={response.get('usage', {})}, latency_ms={latency_ms}"
            )
            return dict(response)

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_message = e.response.get("Error", {}).get("Message", str(e))
            logger.exception(f"Bedrock API error: code={error_code}, message={error_message}")
            raise BedrockClientError(
                f"Bedrock API call failed: {error_code} - {error_message}"
            ) from e
        except BotoCoreError as e:
            logger.exception(f"Bedrock transport error: {e}")
            raise BedrockClientError(f"Bedrock API call failed: {e}") from e

    def parse_text_response(self, response: dict[str, Any]) -> str:
        """Extract text content from a Converse response.

        :param response: Converse API response.
        :returns: Concatenated text content from the response.
        :raises BedrockClientError: If the response holds no text.
        """
        output = response.get("output", {})
        message = output.get("message", {})
        content: list[ContentBlockTypeDef] = message.get("content", [])

        text_parts = [block["text"] for block in content if "text" in block]
        if not text_parts:
            raise BedrockClientError("Bedrock response contained no text")
        return "\n".join(text_parts)

    def create_message(self, turn: ChatTurn) -> MessageTypeDef:
        """Convert a conversation turn into a Converse message.

        :param turn: Conversation turn.
        :returns: Message dictionary.
        """
        return {"role": turn.role.value, "content": [{"text": turn.content}]}

    def create_user_message(self, text: str) -> MessageTypeDef:
        """Create a user message.

        :param text: Message text.
        :returns: User message dictionary.
        """
        return {"role": "user", "content": [{"text": text}]}

    async def complete(self, prompt: str, *, max_tokens: int = 500) -> str:
        """Generate a single completion for a prompt."""
        response = await asyncio.to_thread(
            self.converse,
            [self.create_user_message(prompt)],
            None,
            max_tokens,
        )
        return self.parse_text_response(response)

    async def chat(
        self,
        turns: list[ChatTurn],
        system_prompt: str,
        *,
        max_tokens: int = 500,
    ) -> str:
        """Generate the next assistant turn of a conversation."""
        messages = [self.create_message(turn) for turn in turns]
        response = await asyncio.to_thread(self.converse, messages, system_prompt, max_tokens)
        return self.parse_text_response(response)
