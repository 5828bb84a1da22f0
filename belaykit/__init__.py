from .engines.claude.adapter import ClaudeExecutionAdapter
from .engines.codex.adapter import CodexExecutionAdapter
from .engines.registry import create_adapter, engine_adapter_registry
from .errors import (
    BelayKitError,
    CLINotFoundError,
    ExitError,
    NoJSONError,
    PipeSetupError,
    ProviderError,
    RunTimeoutError,
    SpawnError,
    UnsupportedOptionError,
)
from .models import (
    CompletionRecord,
    Event,
    EventHandler,
    EventType,
    RunOptions,
    RunResult,
    RunStatus,
    TraceConfig,
)
from .parse import extract_json, extract_json_array, strip_code_fences
from .pricing import ModelPricing, estimate_tokens
from .prompt import PromptTemplate, PromptTemplateError
from .runtime.observability import ObservabilityProvider
from .logging_config import setup_logging
from .services import EventLogger, FreeplayProvider, TraceWriterProvider, compose_handlers

__version__ = "0.4.0"

__all__ = [
    "BelayKitError",
    "CLINotFoundError",
    "ClaudeExecutionAdapter",
    "CodexExecutionAdapter",
    "CompletionRecord",
    "Event",
    "EventHandler",
    "EventLogger",
    "EventType",
    "ExitError",
    "FreeplayProvider",
    "ModelPricing",
    "NoJSONError",
    "ObservabilityProvider",
    "PipeSetupError",
    "PromptTemplate",
    "PromptTemplateError",
    "ProviderError",
    "RunOptions",
    "RunResult",
    "RunStatus",
    "RunTimeoutError",
    "SpawnError",
    "TraceConfig",
    "TraceWriterProvider",
    "UnsupportedOptionError",
    "compose_handlers",
    "create_adapter",
    "engine_adapter_registry",
    "estimate_tokens",
    "extract_json",
    "extract_json_array",
    "setup_logging",
    "strip_code_fences",
]
