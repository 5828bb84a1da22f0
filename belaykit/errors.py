from __future__ import annotations


class BelayKitError(Exception):
    """Base class for errors raised by belaykit."""


class UnsupportedOptionError(BelayKitError):
    """A run option the selected engine cannot honour. Raised before spawn."""

    def __init__(self, engine: str, option: str) -> None:
        self.engine = engine
        self.option = option
        super().__init__(f"{engine} does not support option {option}")


class CLINotFoundError(BelayKitError):
    """The engine executable could not be located."""

    def __init__(self, engine: str, executable: str) -> None:
        self.engine = engine
        self.executable = executable
        super().__init__(f"{engine} CLI not found: {executable}")


class SpawnError(BelayKitError):
    """The OS refused to start the engine process for a reason other than a missing binary."""

    def __init__(self, engine: str, cause: BaseException) -> None:
        self.engine = engine
        self.cause = cause
        super().__init__(f"{engine} failed to start: {cause}")


class PipeSetupError(BelayKitError):
    """Stdout or stderr of the engine process could not be captured."""


class ExitError(BelayKitError):
    """Non-zero exit of the engine process, carrying captured diagnostics."""

    def __init__(self, engine: str, returncode: int, stderr: str = "") -> None:
        self.engine = engine
        self.returncode = returncode
        self.stderr = stderr
        if stderr:
            message = f"{engine} exited with error: exit status {returncode}, stderr: {stderr}"
        else:
            message = f"{engine} exited with error: exit status {returncode}"
        super().__init__(message)


class ProviderError(BelayKitError):
    """The engine reported a terminal failure in its event stream."""

    def __init__(self, engine: str, message: str, stderr: str = "") -> None:
        self.engine = engine
        self.message = message
        self.stderr = stderr
        text = f"{engine} reported failure: {message}"
        if stderr:
            text = f"{text}, stderr: {stderr}"
        super().__init__(text)


class RunTimeoutError(BelayKitError, TimeoutError):
    """The per-run deadline expired before the engine process exited."""

    def __init__(self, engine: str, timeout_sec: float) -> None:
        self.engine = engine
        self.timeout_sec = timeout_sec
        super().__init__(f"{engine} run exceeded timeout of {timeout_sec}s")


class NoJSONError(BelayKitError, ValueError):
    """No JSON object or array was found in a response."""

    def __init__(self, message: str = "no JSON found in response") -> None:
        super().__init__(message)
