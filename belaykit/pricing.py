"""Token pricing and rough token estimation shared by loggers and trace writers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelPricing:
    """Per-million-token prices in USD."""

    input_per_mtok: float = 0.0
    output_per_mtok: float = 0.0

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens / 1_000_000 * self.input_per_mtok
            + output_tokens / 1_000_000 * self.output_per_mtok
        )


def estimate_tokens(text: str) -> int:
    """Roughly four characters per token, rounded up."""
    n = len(text)
    if n == 0:
        return 0
    return (n + 3) // 4
