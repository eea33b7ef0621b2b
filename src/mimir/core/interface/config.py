"""Model configuration — LiteLLM model name, credentials and pricing."""

from typing import Any

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Configuration for the reasoning model.

    The ``model`` field uses LiteLLM's naming convention:
    ``provider/model_name`` (e.g. ``openai/gpt-4o``,
    ``anthropic/claude-3-5-sonnet-20241022``).  When the per-million prices
    are unset, cost comes from LiteLLM's pricing table.
    """

    model: str = "openai/gpt-4o"
    api_key: str | None = None
    api_base: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = None
    input_price_per_million: float | None = None
    output_price_per_million: float | None = None
    extra: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    @property
    def provider(self) -> str:
        """Extract the provider prefix from the model string."""
        if "/" in self.model:
            return self.model.split("/", 1)[0]
        return "openai"

    @property
    def model_name(self) -> str:
        """The model string without its provider prefix."""
        return self.model.split("/", 1)[1] if "/" in self.model else self.model
