from pathlib import Path

import pytest

from belaykit.engines.claude import context_window_for_model, pricing_for_model
from belaykit.pricing import ModelPricing, estimate_tokens
from belaykit.prompt import PromptTemplate, PromptTemplateError


def test_estimate_tokens_rounds_up():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abc") == 1
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_model_pricing_cost():
    pricing = ModelPricing(input_per_mtok=3, output_per_mtok=15)
    assert pricing.cost(1_000_000, 1_000_000) == pytest.approx(18.0)
    assert pricing.cost(0, 0) == 0


def test_claude_model_tables():
    assert pricing_for_model("sonnet") == ModelPricing(3, 15)
    assert pricing_for_model("haiku") == ModelPricing(1, 5)
    assert pricing_for_model("unknown-model") == pricing_for_model("opus")
    assert context_window_for_model("opus") == 200_000
    assert context_window_for_model("whatever") == 200_000


def test_prompt_template_load_and_render(tmp_path: Path):
    path = tmp_path / "review.j2"
    path.write_text("Review {{ file }} for {{ focus | shout }}.\n", encoding="utf-8")
    template = PromptTemplate.load(path, filters={"shout": str.upper})
    assert template.render(file="a.py", focus="bugs") == "Review a.py for BUGS.\n"


def test_prompt_template_errors(tmp_path: Path):
    with pytest.raises(PromptTemplateError, match="reading template"):
        PromptTemplate.load(tmp_path / "missing.j2")
    with pytest.raises(PromptTemplateError, match="parsing template"):
        PromptTemplate.from_string("{% if %}")
    with pytest.raises(PromptTemplateError, match="executing template"):
        PromptTemplate.from_string("Hello {{ name }}").render()
