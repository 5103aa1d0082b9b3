# src/service/http.py
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.agent.errors import (
    AgentError,
    ListingValidationError,
    UpstreamError,
    UpstreamTimeoutError,
)
from src.agent.llm import TextModel, get_text_model
from src.agent.logging_config import setup_logging
from src.common.config import cfg
from src.common.jsonlog import jlog
from src.listing.pipeline import compose_description, compose_story
from src.listing.schemas import SplitRequest
from src.listing.story import split_caption

setup_logging()
log = logging.getLogger("service")

DESCRIPTION_ERROR_TITLE = "Erro ao gerar descrição"
STORY_ERROR_TITLE = "Erro ao gerar texto"

app = FastAPI(title="Listing Writer")

# Add CORS middleware to allow frontend requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=cfg("service", "cors_origins", default=["http://localhost:3000"]),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.req_id = req_id

        jlog(
            log,
            logging.INFO,
            event="http_request_start",
            req_id=req_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception as e:
            jlog(
                log,
                logging.ERROR,
                event="http_request_failed",
                req_id=req_id,
                method=request.method,
                path=request.url.path,
                duration_secs=round(time.time() - start_time, 3),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        jlog(
            log,
            logging.INFO,
            event="http_request_complete",
            req_id=req_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_secs=round(time.time() - start_time, 3),
        )
        response.headers["x-request-id"] = req_id
        return response


app.add_middleware(RequestLoggingMiddleware)


# ---------- Dependencies ----------
def get_model() -> TextModel:
    """The text model used by both pipelines; tests override this dependency."""
    return get_text_model()


# ---------- Helpers ----------
def _req_id(request: Request) -> str:
    return getattr(request.state, "req_id", None) or str(uuid.uuid4())


def _status_for(e: AgentError) -> int:
    if isinstance(e, ListingValidationError):
        return 422
    if isinstance(e, UpstreamTimeoutError):
        return 504
    if isinstance(e, UpstreamError):
        return 502
    return 500


def _error_response(title: str, e: AgentError, req_id: str) -> JSONResponse:
    status = _status_for(e)
    body: Dict[str, Any] = {"ok": False, "title": title, "detail": str(e), "req_id": req_id}
    if isinstance(e, ListingValidationError):
        body["errors"] = e.errors
    jlog(log, logging.WARNING if status == 422 else logging.ERROR, event="request_failed",
         req_id=req_id, status_code=status, error_type=type(e).__name__, detail=str(e))
    return JSONResponse(status_code=status, content=body)


# ---------- Routes ----------
@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.post("/description")
async def description(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    model: TextModel = Depends(get_model),
):
    req_id = _req_id(request)
    try:
        text = await asyncio.to_thread(compose_description, payload, model=model, req_id=req_id)
    except AgentError as e:
        return _error_response(DESCRIPTION_ERROR_TITLE, e, req_id)
    return {"ok": True, "description": text, "req_id": req_id}


@app.post("/story")
async def story(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    model: TextModel = Depends(get_model),
):
    req_id = _req_id(request)
    try:
        res = await asyncio.to_thread(compose_story, payload, model=model, req_id=req_id)
    except AgentError as e:
        return _error_response(STORY_ERROR_TITLE, e, req_id)
    return {"ok": True, "story": res.caption, "clipboard": res.clipboard, "req_id": req_id}


@app.post("/story/split")
async def story_split(req: SplitRequest):
    return {"ok": True, "clipboard": split_caption(req.caption)}
