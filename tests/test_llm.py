from __future__ import annotations

import pathlib
import subprocess
import sys
import textwrap
import time

import pytest

from src.agent import llm
from src.agent.errors import UpstreamEmptyError, UpstreamTimeoutError, UpstreamTransportError


def test_ok_completion(stub_model):
    model = stub_model('{"storyText": "04 Quartos"}')
    c = llm.complete("prompt", model=model, timeout_s=5, max_attempts=1)
    assert c.status == llm.STATUS_OK
    assert c.ok
    assert c.raise_for_status() == '{"storyText": "04 Quartos"}'
    assert model.prompts == ["prompt"]


def test_blank_response_is_empty(stub_model):
    c = llm.complete("prompt", model=stub_model("   \n"), timeout_s=5, max_attempts=3)
    assert c.status == llm.STATUS_EMPTY
    assert c.attempts == 1
    with pytest.raises(UpstreamEmptyError):
        c.raise_for_status()


def test_transport_failure(stub_model):
    model = stub_model(exc=RuntimeError("quota exceeded"))
    c = llm.complete("prompt", model=model, timeout_s=5, max_attempts=1)
    assert c.status == llm.STATUS_TRANSPORT_ERROR
    assert "quota exceeded" in c.error
    with pytest.raises(UpstreamTransportError):
        c.raise_for_status()


def test_timeout_is_bounded_and_not_retried(stub_model):
    model = stub_model("{}", delay=0.5)
    c = llm.complete("prompt", model=model, timeout_s=0.05, max_attempts=3)
    assert c.status == llm.STATUS_TIMEOUT
    assert len(model.prompts) == 1
    with pytest.raises(UpstreamTimeoutError) as ei:
        c.raise_for_status()
    assert "timed out" in str(ei.value)


def test_transport_failures_retry_when_configured(stub_model):
    model = stub_model('{"ok": true}', fail_times=1)
    c = llm.complete("prompt", model=model, timeout_s=5, max_attempts=2)
    assert c.ok
    assert c.attempts == 2


def test_single_attempt_by_default(stub_model, monkeypatch):
    from src.common import config

    monkeypatch.setattr(config.settings, "LLM_MAX_ATTEMPTS", 1)
    model = stub_model('{"ok": true}', fail_times=1)
    c = llm.complete("prompt", model=model, timeout_s=5)
    assert c.status == llm.STATUS_TRANSPORT_ERROR
    assert len(model.prompts) == 1


@pytest.mark.parametrize(
    "text",
    [
        '{"a": 1}',
        '```json\n{"a": 1}\n```',
        '[{"a": 1}]',
    ],
)
def test_parse_json_object(text):
    assert llm.parse_json_object(text) == {"a": 1}


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '"just a string"', ""])
def test_parse_json_object_rejects(text):
    with pytest.raises(UpstreamEmptyError):
        llm.parse_json_object(text)


def test_provider_selection():
    assert isinstance(llm.get_text_model("vertex"), llm.GeminiTextModel)
    assert isinstance(llm.get_text_model("openai"), llm.OpenAITextModel)
    with pytest.raises(ValueError):
        llm.get_text_model("bogus")


def test_gemini_requires_project():
    pytest.importorskip("vertexai")
    model = llm.GeminiTextModel()
    model.project = None
    with pytest.raises(RuntimeError, match="GOOGLE_CLOUD_PROJECT"):
        model.generate("hi")


def test_timed_out_call_does_not_hold_up_process_exit():
    root = pathlib.Path(__file__).resolve().parents[1]
    script = textwrap.dedent(
        """
        import sys, time
        from src.agent import llm

        class Stalled:
            name = "stalled"

            def generate(self, prompt):
                time.sleep(10)
                return "{}"

        c = llm.complete("prompt", model=Stalled(), timeout_s=0.1, max_attempts=1)
        print(c.status)
        sys.exit(1)
        """
    )
    start = time.time()
    proc = subprocess.run([sys.executable, "-c", script], cwd=root, capture_output=True, text=True, timeout=30)
    elapsed = time.time() - start

    assert proc.stdout.strip() == llm.STATUS_TIMEOUT, proc.stderr
    assert proc.returncode == 1
    assert elapsed < 5


def test_gemini_client_is_built_once(monkeypatch):
    vertexai = pytest.importorskip("vertexai")
    from vertexai import generative_models

    inits = []
    built = []

    class FakeResponse:
        text = '{"ok": true}'

    class FakeGenerativeModel:
        def __init__(self, name):
            built.append(name)

        def generate_content(self, contents, generation_config=None):
            return FakeResponse()

    monkeypatch.setattr(vertexai, "init", lambda **kw: inits.append(kw))
    monkeypatch.setattr(generative_models, "GenerativeModel", FakeGenerativeModel)

    model = llm.GeminiTextModel("gemini-test", project="demo-project", region="us-central1")
    assert model.generate("one") == '{"ok": true}'
    assert model.generate("two") == '{"ok": true}'
    assert inits == [{"project": "demo-project", "location": "us-central1"}]
    assert built == ["gemini-test"]
