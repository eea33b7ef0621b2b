"""LiteLLMProvider — :class:`ReasoningProvider` over LiteLLM.

LiteLLM returns OpenAI-compatible response objects regardless of the
underlying provider, so one adapter covers every model LiteLLM supports.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import litellm
import tiktoken

from mimir.core.interface.config import ModelConfig
from mimir.core.interface.models import ChatMessage, ChatResponse, ToolCall, Usage
from mimir.core.interface.streaming import ChunkChannel, pump
from mimir.utils.telemetry import (
    ATTR_MODEL,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_OUTPUT,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_FALLBACK_ENCODING = "cl100k_base"


class LiteLLMProvider:
    """Async reasoning provider backed by ``litellm.acompletion``.

    Usage::

        provider = LiteLLMProvider(ModelConfig(model="openai/gpt-4o"))
        response = await provider.chat([ChatMessage.user("hi")])

    Satisfies the :class:`~mimir.core.interface.provider.ReasoningProvider`
    protocol.
    """

    def __init__(self, config: ModelConfig) -> None:
        self.config = config
        try:
            self._enc = tiktoken.encoding_for_model(config.model_name)
        except KeyError:
            self._enc = tiktoken.get_encoding(_FALLBACK_ENCODING)

    async def chat(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None = None
    ) -> ChatResponse:
        with _tracer.start_as_current_span("model.chat") as span:
            span.set_attribute(ATTR_MODEL, self.config.model)

            response = await litellm.acompletion(**self._call_kwargs(messages, tools))  # pyright: ignore[reportUnknownMemberType]
            result = _parse_response(response)

            if result.usage is not None:
                span.set_attribute(ATTR_TOKENS_INPUT, result.usage.input_tokens)
                span.set_attribute(ATTR_TOKENS_OUTPUT, result.usage.output_tokens)
            return result

    def stream_chat(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None = None
    ) -> ChunkChannel:
        return pump(self._stream(messages, tools))

    async def _stream(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None
    ) -> AsyncIterator[str]:
        response = await litellm.acompletion(**self._call_kwargs(messages, tools), stream=True)  # pyright: ignore[reportUnknownMemberType]
        async for chunk in response:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta is not None and delta.content:
                yield delta.content

    def count_tokens(self, text: str) -> int:
        return len(self._enc.encode(text))

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        cfg = self.config
        if cfg.input_price_per_million is not None or cfg.output_price_per_million is not None:
            return (
                input_tokens * (cfg.input_price_per_million or 0.0)
                + output_tokens * (cfg.output_price_per_million or 0.0)
            ) / 1_000_000
        try:
            prompt_cost, completion_cost = litellm.cost_per_token(  # pyright: ignore[reportUnknownMemberType]
                model=cfg.model,
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
            )
        except Exception as exc:
            logger.debug("No pricing for %s: %s", cfg.model, exc)
            return 0.0
        return float(prompt_cost) + float(completion_cost)

    def _call_kwargs(
        self, messages: list[ChatMessage], tools: list[dict[str, Any]] | None
    ) -> dict[str, Any]:
        cfg = self.config
        kwargs: dict[str, Any] = {
            "model": cfg.model,
            "messages": [m.model_dump() for m in messages],
            **cfg.extra,
        }
        if cfg.api_key:
            kwargs["api_key"] = cfg.api_key
        if cfg.api_base:
            kwargs["api_base"] = cfg.api_base
        if cfg.temperature is not None:
            kwargs["temperature"] = cfg.temperature
        if cfg.max_output_tokens is not None:
            kwargs["max_tokens"] = cfg.max_output_tokens
        if tools:
            # token_cost is registry bookkeeping, not part of the OpenAI schema.
            kwargs["tools"] = [{k: v for k, v in t.items() if k != "token_cost"} for t in tools]
        return kwargs


def _parse_response(response: Any) -> ChatResponse:
    choice = response.choices[0]
    message = choice.message

    tool_calls = [
        ToolCall(id=tc.id, name=tc.function.name, arguments=_parse_arguments(tc.function.arguments))
        for tc in (message.tool_calls or [])
    ]

    usage: Usage | None = None
    raw_usage = getattr(response, "usage", None)
    if raw_usage:
        usage = Usage(
            input_tokens=raw_usage.prompt_tokens or 0,
            output_tokens=raw_usage.completion_tokens or 0,
        )

    return ChatResponse(
        content=message.content or "",
        tool_calls=tool_calls,
        usage=usage,
        metadata={"finish_reason": choice.finish_reason, "model": response.model},
    )


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse JSON string arguments from a tool call."""
    if isinstance(raw, dict):
        return raw
    try:
        result = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {"raw": raw}
    return result if isinstance(result, dict) else {"value": result}
