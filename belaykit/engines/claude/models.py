from __future__ import annotations

from belaykit.pricing import ModelPricing

DEFAULT_CONTEXT_WINDOW = 200_000

_OPUS = ModelPricing(input_per_mtok=5, output_per_mtok=25)
_SONNET = ModelPricing(input_per_mtok=3, output_per_mtok=15)
_HAIKU = ModelPricing(input_per_mtok=1, output_per_mtok=5)

_PRICING: dict[str, ModelPricing] = {
    "opus": _OPUS,
    "claude-opus-4-6": _OPUS,
    "sonnet": _SONNET,
    "claude-sonnet-4-5-20250929": _SONNET,
    "haiku": _HAIKU,
    "claude-haiku-4-5-20251001": _HAIKU,
}

_CONTEXT_WINDOWS: dict[str, int] = {
    "opus": 200_000,
    "claude-opus-4-6": 200_000,
    "sonnet": 200_000,
    "claude-sonnet-4-5-20250929": 200_000,
    "haiku": 200_000,
    "claude-haiku-4-5-20251001": 200_000,
}


def pricing_for_model(model: str) -> ModelPricing:
    """Pricing for a model name or alias; unknown models are priced as opus."""
    return _PRICING.get(model, _OPUS)


def context_window_for_model(model: str) -> int:
    return _CONTEXT_WINDOWS.get(model, DEFAULT_CONTEXT_WINDOW)
