from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from jinja2 import Environment, StrictUndefined, TemplateError

from .errors import BelayKitError


class PromptTemplateError(BelayKitError):
    """A prompt template could not be read, parsed or rendered."""


class PromptTemplate:
    """A parsed jinja2 prompt template."""

    def __init__(self, source: str, *, name: str = "<string>", filters: dict[str, Callable[..., Any]] | None = None) -> None:
        self.name = name
        env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)
        if filters:
            env.filters.update(filters)
        try:
            self._template = env.from_string(source)
        except TemplateError as exc:
            raise PromptTemplateError(f"parsing template {name}: {exc}") from exc

    @classmethod
    def from_string(cls, source: str, *, filters: dict[str, Callable[..., Any]] | None = None) -> "PromptTemplate":
        return cls(source, filters=filters)

    @classmethod
    def load(cls, path: str | Path, *, filters: dict[str, Callable[..., Any]] | None = None) -> "PromptTemplate":
        template_path = Path(path)
        try:
            source = template_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PromptTemplateError(f"reading template {template_path}: {exc}") from exc
        return cls(source, name=str(template_path), filters=filters)

    def render(self, **context: Any) -> str:
        try:
            return self._template.render(**context)
        except TemplateError as exc:
            raise PromptTemplateError(f"executing template {self.name}: {exc}") from exc
