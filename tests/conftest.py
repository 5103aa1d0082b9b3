from __future__ import annotations
import json
import time
from typing import Any, List, Optional

import pytest


class StubModel:
    """Deterministic TextModel: returns a canned response, raises, or stalls."""

    name = "stub-model"

    def __init__(self, response: Any = "", *, exc: Optional[BaseException] = None,
                 delay: float = 0.0, fail_times: int = 0):
        self.response = response if isinstance(response, str) else json.dumps(response, ensure_ascii=False)
        self.exc = exc
        self.delay = delay
        self.fail_times = fail_times
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            time.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        if len(self.prompts) <= self.fail_times:
            raise ConnectionError("upstream unavailable")
        return self.response


@pytest.fixture
def stub_model():
    """Factory: stub_model({"storyText": "..."}) or stub_model(exc=RuntimeError("boom"))."""
    return StubModel


@pytest.fixture
def listing_payload():
    return {
        "codigo": "AP0123",
        "valor": "350.000,00",
        "bairro": "Centro",
        "cidade": "Belo Horizonte",
        "areaTotal": 120,
        "areaPrivada": 90,
        "descricaoAdicional": "",
        "caracteristicasPrincipais": "3 quartos, 2 vagas de garagem",
    }
