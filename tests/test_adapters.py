from __future__ import annotations

import pytest

from src.agent.errors import UpstreamEmptyError, UpstreamTimeoutError, UpstreamTransportError
from src.listing.adapters import ensure_trailing_semicolon, format_features, generate_story_caption


@pytest.mark.parametrize(
    "block, expected",
    [
        ("✅ 3 quartos;\n✅ 2 vagas", "✅ 3 quartos;\n✅ 2 vagas;"),
        ("✅ 3 quartos;\n✅ 2 vagas\n", "✅ 3 quartos;\n✅ 2 vagas;\n"),
        ("✅ Piscina", "✅ Piscina;"),
    ],
)
def test_semicolon_repair(block, expected):
    repaired = ensure_trailing_semicolon(block)
    assert repaired == expected
    assert ensure_trailing_semicolon(repaired) == repaired


@pytest.mark.parametrize("block", ["✅ 3 quartos;\n✅ 2 vagas;", "✅ a;\n\n", ""])
def test_semicolon_repair_noop_when_terminated(block):
    assert ensure_trailing_semicolon(block) == block


def test_format_features_repairs_and_sends_prompt(stub_model):
    model = stub_model({"formattedFeatures": "✅ 3 quartos;\n✅ 2 vagas de garagem"})
    out = format_features("3 quartos, 2 vagas de garagem", model=model)
    assert out == "✅ 3 quartos;\n✅ 2 vagas de garagem;"
    assert len(model.prompts) == 1
    assert "Here is the features text: 3 quartos, 2 vagas de garagem" in model.prompts[0]
    assert '"formattedFeatures"' in model.prompts[0]


@pytest.mark.parametrize(
    "response",
    [
        {"somethingElse": "✅ a;"},
        {"formattedFeatures": 3},
        {"formattedFeatures": "   "},
        "not json at all",
        "",
    ],
)
def test_format_features_rejects_unusable_responses(stub_model, response):
    with pytest.raises(UpstreamEmptyError):
        format_features("3 quartos", model=stub_model(response))


def test_format_features_transport_and_timeout(stub_model, monkeypatch):
    from src.common import config

    monkeypatch.setattr(config.settings, "LLM_MAX_ATTEMPTS", 1)
    with pytest.raises(UpstreamTransportError):
        format_features("3 quartos", model=stub_model(exc=RuntimeError("403")))

    monkeypatch.setattr(config.settings, "LLM_TIMEOUT_SECS", 0.05)
    with pytest.raises(UpstreamTimeoutError):
        format_features("3 quartos", model=stub_model({"formattedFeatures": "✅ a;"}, delay=0.5))


def test_story_caption_strips_stray_pipes(stub_model):
    model = stub_model({"storyText": " | 04 Quartos | 02 Suítes | Piscina | "})
    out = generate_story_caption("casa com 4 qts e 2 suites e piscina", model=model)
    assert out == "04 Quartos | 02 Suítes | Piscina"
    assert "casa com 4 qts e 2 suites e piscina" in model.prompts[0]
    assert "90 characters" in model.prompts[0]


def test_story_caption_over_budget_is_kept(stub_model):
    long_caption = " | ".join(["Quartos Amplos E Arejados"] * 5)
    out = generate_story_caption("texto qualquer", model=stub_model({"storyText": long_caption}))
    assert out == long_caption


@pytest.mark.parametrize("response", [{"storyText": ""}, {"storyText": " | "}, {"text": "x"}, {"storyText": None}])
def test_story_caption_rejects_unusable_responses(stub_model, response):
    with pytest.raises(UpstreamEmptyError):
        generate_story_caption("texto qualquer", model=stub_model(response))
