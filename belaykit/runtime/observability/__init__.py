from .contracts import ObservabilityProvider

__all__ = ["ObservabilityProvider"]
