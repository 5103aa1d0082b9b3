from __future__ import annotations
import json, logging, time, uuid, os
from typing import Any

# Google client debug logging - controlled by environment variable
_GCP_DEBUG_SETUP = False

def _setup_gcp_debug_logging():
    """Turn on Vertex AI / Google client debug loggers when ENABLE_GCP_DEBUG_LOGGING=true"""
    global _GCP_DEBUG_SETUP
    if _GCP_DEBUG_SETUP:
        return

    if os.getenv("ENABLE_GCP_DEBUG_LOGGING", "false").lower() == "true":
        for name in ("google.api_core", "google.auth", "google.cloud", "vertexai", "urllib3"):
            logging.getLogger(name).setLevel(logging.DEBUG)
        logging.getLogger("listing").debug("google client debug logging enabled")

    _GCP_DEBUG_SETUP = True


def new_req_id() -> str:
    return str(uuid.uuid4())


def jlog(logger: logging.Logger, level: int, **kv: Any) -> None:
    """Emit one JSON object per log line: ts_ms, level, req_id plus the caller's fields."""
    _setup_gcp_debug_logging()

    kv.setdefault("ts_ms", int(time.time() * 1000))
    kv.setdefault("level", logging.getLevelName(level))
    if "req_id" not in kv or kv["req_id"] is None:
        kv["req_id"] = new_req_id()  # caller can override; useful for tracing

    logger.log(level, json.dumps(kv, ensure_ascii=False, default=str))
