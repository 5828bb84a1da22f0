from .models import context_window_for_model, pricing_for_model

__all__ = ["context_window_for_model", "pricing_for_model"]
