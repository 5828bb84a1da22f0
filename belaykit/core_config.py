"""
Core Configuration Definitions.

This module defines the default structure and values for the library's
configuration system using `yacs`. It serves as the single source of truth
for all configurable parameters.

Configuration is organized into sections:
- ENGINES: Executable names for the supported agent CLIs.
- STREAM: Line multiplexer limits.
- PROCESS: Subprocess termination and reader join timing.
- TRACE: Output location for the trace writer.
"""

import os
from yacs.config import CfgNode as CN  # type: ignore[import-untyped]


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        parsed = int(raw.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


_C = CN()

# -----------------------------------------------------------------------------
# Engine executables
# -----------------------------------------------------------------------------
_C.ENGINES = CN()
# Resolved through PATH unless an absolute path is given
_C.ENGINES.CLAUDE_EXECUTABLE = os.environ.get("BELAYKIT_CLAUDE_EXECUTABLE", "claude")
_C.ENGINES.CODEX_EXECUTABLE = os.environ.get("BELAYKIT_CODEX_EXECUTABLE", "codex")

# -----------------------------------------------------------------------------
# Stream multiplexing
# -----------------------------------------------------------------------------
_C.STREAM = CN()
# Longest accepted line on either pipe; longer lines are skipped
_C.STREAM.MAX_LINE_BYTES = _env_int("BELAYKIT_MAX_LINE_BYTES", 1024 * 1024)
# Capacity of the queue between the pipe readers and the decode loop
_C.STREAM.QUEUE_SIZE = _env_int("BELAYKIT_LINE_QUEUE_SIZE", 64)

# -----------------------------------------------------------------------------
# Process lifecycle
# -----------------------------------------------------------------------------
_C.PROCESS = CN()
# Seconds between SIGTERM and SIGKILL when a run is cancelled
_C.PROCESS.TERMINATE_GRACE_SECONDS = _env_int("BELAYKIT_TERMINATE_GRACE_SECONDS", 5)
# Seconds to wait for pipe readers after the process is gone
_C.PROCESS.READER_JOIN_SECONDS = _env_int("BELAYKIT_READER_JOIN_SECONDS", 5)

# -----------------------------------------------------------------------------
# Trace writer
# -----------------------------------------------------------------------------
_C.TRACE = CN()
_C.TRACE.DIR = os.environ.get("BELAYKIT_TRACE_DIR", os.path.join(".belay", "traces"))


def get_cfg_defaults() -> CN:
    """
    Get a yacs CfgNode object with default values.

    Returns a clone so that the defaults are not modified.
    """
    return _C.clone()
