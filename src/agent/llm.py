from __future__ import annotations
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from tenacity import Retrying, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from src.common.config import cfg
from src.common.jsonlog import jlog
from .errors import UpstreamEmptyError, UpstreamTimeoutError, UpstreamTransportError

log = logging.getLogger("agent.llm")

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_TRANSPORT_ERROR = "transport_error"
STATUS_TIMEOUT = "timeout"


class TextModel(Protocol):
    """Anything that turns a prompt into raw response text."""

    name: str

    def generate(self, prompt: str) -> str: ...


class GeminiTextModel:
    """Gemini on Vertex AI, asked for a JSON response body."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        *,
        project: Optional[str] = None,
        region: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ):
        self.name = model_name or cfg("llm", "model", default="gemini-2.0-flash-001")
        self.project = project or cfg("vertex", "project")
        self.region = region or cfg("vertex", "region", default="us-central1")
        self.temperature = cfg("llm", "temperature", default=0.2) if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or cfg("llm", "max_output_tokens", default=512)
        self._model = None
        self._lock = threading.Lock()

    def _client(self):
        """Initialise Vertex and build the GenerativeModel once per instance."""
        with self._lock:
            if self._model is None:
                from vertexai import init as vertex_init
                from vertexai.generative_models import GenerativeModel

                if not self.project:
                    raise RuntimeError("GOOGLE_CLOUD_PROJECT is not set")
                vertex_init(project=self.project, location=self.region)
                self._model = GenerativeModel(self.name)
            return self._model

    def generate(self, prompt: str) -> str:
        from vertexai.generative_models import GenerationConfig

        model = self._client()
        gen_cfg = GenerationConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            response_mime_type="application/json",
        )
        resp = model.generate_content(contents=[prompt], generation_config=gen_cfg)
        try:
            return resp.text or ""
        except ValueError:
            # .text raises when the candidate was blocked or has no parts
            log.warning("Gemini response had no text part (finish reason / safety block)")
            return ""


class OpenAITextModel:
    """OpenAI chat completions in JSON mode."""

    def __init__(self, model_name: Optional[str] = None, *, api_key: Optional[str] = None,
                 temperature: Optional[float] = None, max_tokens: Optional[int] = None):
        self.name = model_name or cfg("openai", "model", default="gpt-4.1-mini")
        self.api_key = api_key or cfg("openai", "api_key")
        self.temperature = cfg("llm", "temperature", default=0.2) if temperature is None else temperature
        self.max_tokens = max_tokens or cfg("llm", "max_output_tokens", default=512)
        self._openai = None
        self._lock = threading.Lock()

    def _client(self):
        with self._lock:
            if self._openai is None:
                from openai import OpenAI

                if not self.api_key:
                    raise RuntimeError("Missing OPENAI_API_KEY in environment")
                self._openai = OpenAI(api_key=self.api_key)
            return self._openai

    def generate(self, prompt: str) -> str:
        resp = self._client().chat.completions.create(
            model=self.name,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )
        return resp.choices[0].message.content or ""


_PROVIDERS: Dict[str, Callable[[], TextModel]] = {
    "vertex": GeminiTextModel,
    "gemini": GeminiTextModel,
    "openai": OpenAITextModel,
}


def get_text_model(provider: Optional[str] = None) -> TextModel:
    name = (provider or cfg("llm", "provider", default="vertex")).lower()
    try:
        factory = _PROVIDERS[name]
    except KeyError:
        raise ValueError(f"Unknown LLM_PROVIDER {name!r}; expected one of {sorted(_PROVIDERS)}") from None
    return factory()


@dataclass
class Completion:
    """Outcome of one model call: ok, empty, transport_error or timeout."""

    status: str
    text: str = ""
    error: Optional[str] = None
    attempts: int = 1
    duration_ms: int = 0
    timeout_s: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def raise_for_status(self) -> str:
        """Return the text, or raise the matching upstream error."""
        if self.status == STATUS_OK:
            return self.text
        if self.status == STATUS_TIMEOUT:
            raise UpstreamTimeoutError(self.timeout_s or 0.0)
        if self.status == STATUS_TRANSPORT_ERROR:
            raise UpstreamTransportError(f"Falha ao chamar o modelo: {self.error}")
        raise UpstreamEmptyError("A IA retornou uma resposta vazia.")


class CallTimedOut(TimeoutError):
    """The model call did not return within the deadline."""


def _call_with_timeout(fn: Callable[[], str], timeout_s: float) -> str:
    # Daemon thread: a hung SDK call is abandoned and cannot hold up interpreter exit.
    box: Dict[str, Any] = {}

    def _run() -> None:
        try:
            box["value"] = fn()
        except BaseException as e:
            box["error"] = e

    worker = threading.Thread(target=_run, name="llm-call", daemon=True)
    worker.start()
    worker.join(timeout_s)
    if worker.is_alive():
        raise CallTimedOut(f"model call exceeded {timeout_s:g}s")
    if "error" in box:
        raise box["error"]
    return box["value"]


def complete(
    prompt: str,
    *,
    model: Optional[TextModel] = None,
    timeout_s: Optional[float] = None,
    max_attempts: Optional[int] = None,
    req_id: Optional[str] = None,
    tool: str = "llm.complete",
) -> Completion:
    """
    Send `prompt` to the model once (or up to LLM_MAX_ATTEMPTS times for
    transport failures) with a bounded timeout. Model failures never raise; the caller
    decides what a non-ok Completion means.
    """
    model = model or get_text_model()
    timeout_s = float(timeout_s if timeout_s is not None else cfg("llm", "timeout_secs", default=30.0))
    max_attempts = max(1, int(max_attempts or cfg("llm", "max_attempts", default=1)))

    start = time.time()
    attempts = 0

    def _elapsed_ms() -> int:
        return int((time.time() - start) * 1000)

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.6, min=0.6, max=3),
        retry=retry_if_not_exception_type(CallTimedOut),
        reraise=True,
    )
    try:
        for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                text = _call_with_timeout(lambda: model.generate(prompt), timeout_s)
    except CallTimedOut:
        jlog(log, logging.ERROR, tool=tool, event="timeout", req_id=req_id,
             model=getattr(model, "name", None), timeout_s=timeout_s, attempt=attempts)
        return Completion(STATUS_TIMEOUT, attempts=attempts, duration_ms=_elapsed_ms(), timeout_s=timeout_s,
                          error=f"timed out after {timeout_s:g}s")
    except Exception as e:
        jlog(log, logging.ERROR, tool=tool, event="transport_error", req_id=req_id,
             model=getattr(model, "name", None), attempt=attempts, err=type(e).__name__, detail=str(e)[:300])
        return Completion(STATUS_TRANSPORT_ERROR, attempts=attempts, duration_ms=_elapsed_ms(),
                          error=f"{type(e).__name__}: {e}")

    text = (text or "").strip()
    status = STATUS_OK if text else STATUS_EMPTY
    jlog(log, logging.INFO if text else logging.WARNING, tool=tool, event=status, req_id=req_id,
         model=getattr(model, "name", None), attempt=attempts, chars=len(text), duration_ms=_elapsed_ms())
    return Completion(status, text=text, attempts=attempts, duration_ms=_elapsed_ms())


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a model response into a single JSON object.
    Accept:  { ... }  or  [ { ... } ]  (optionally inside ```json fences)
    Reject:  anything else -> UpstreamEmptyError
    """
    text = (text or "").strip()
    # Guard: strip accidental ```json fences
    if text.startswith("```"):
        text = text.strip("` \n")
        if text.lower().startswith("json"):
            text = text[4:].lstrip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        # Log a short snippet for debugging (avoid logging entire output)
        snippet = text[:200].replace("\n", " ")
        log.warning("JSON parse failed: %s (snippet: %r)", e, snippet)
        raise UpstreamEmptyError("A IA retornou uma resposta malformada.", cause=e) from e

    if isinstance(data, list) and data and isinstance(data[0], dict):
        log.debug("Model returned a list; unwrapping the first object.")
        data = data[0]
    if not isinstance(data, dict):
        raise UpstreamEmptyError(f"A IA retornou {type(data).__name__} em vez de um objeto JSON.")
    return data
