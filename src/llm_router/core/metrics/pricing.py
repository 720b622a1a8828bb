"""Per-model token pricing (USD per 1,000 tokens)."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class ModelPricing:
    input: float
    output: float

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return (input_tokens / 1000) * self.input + (output_tokens / 1000) * self.output


COST_PER_1K_TOKENS: Dict[str, ModelPricing] = {
    "claude-sonnet-4-20250514": ModelPricing(input=0.003, output=0.015),
    "claude-3-haiku-20240307": ModelPricing(input=0.00025, output=0.00125),
    "gpt-4o": ModelPricing(input=0.0025, output=0.01),
    "gpt-4o-mini": ModelPricing(input=0.00015, output=0.0006),
    "gemini-2.0-flash": ModelPricing(input=0.0001, output=0.0004),
    "gemini-2.0-pro": ModelPricing(input=0.00125, output=0.005),
    "grok-3": ModelPricing(input=0.003, output=0.015),
    "grok-3-mini": ModelPricing(input=0.0003, output=0.0005),
    "sonar-pro": ModelPricing(input=0.003, output=0.015),
    "sonar": ModelPricing(input=0.001, output=0.001),
}


def estimate_cost(model: str, input_tokens: int, output_tokens: int) -> Optional[float]:
    """Return the USD cost of a call, or None when the model is not priced."""
    pricing = COST_PER_1K_TOKENS.get(model)
    if pricing is None:
        return None
    return pricing.cost(input_tokens, output_tokens)
