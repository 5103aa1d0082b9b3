from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from src.agent.llm import TextModel
from src.common.jsonlog import jlog, new_req_id
from .adapters import format_features, generate_story_caption
from .description import assemble_description
from .schemas import validate_listing, validate_story_request
from .story import split_caption

log = logging.getLogger("listing.pipeline")


@dataclass
class StoryResult:
    caption: str
    clipboard: str


def compose_description(
    data: Any,
    *,
    model: Optional[TextModel] = None,
    req_id: Optional[str] = None,
) -> str:
    """
    Flow:
      1) validate the listing fields (ListingValidationError, per field)
      2) features.format -> bullet block (upstream errors propagate as-is)
      3) assemble the final text (pure)
    """
    req_id = req_id or new_req_id()
    start = time.time()

    listing = validate_listing(data).unwrap()
    jlog(log, logging.INFO, event="description_start", req_id=req_id, code=listing.code,
         features_chars=len(listing.features))

    features_block = format_features(listing.features, model=model, req_id=req_id)
    description = assemble_description(listing, features_block)

    jlog(log, logging.INFO, event="description_ok", req_id=req_id, code=listing.code,
         chars=len(description), duration_secs=round(time.time() - start, 3))
    return description


def compose_story(
    data: Any,
    *,
    model: Optional[TextModel] = None,
    req_id: Optional[str] = None,
) -> StoryResult:
    req_id = req_id or new_req_id()
    start = time.time()

    request = validate_story_request(data).unwrap()
    jlog(log, logging.INFO, event="story_start", req_id=req_id, text_chars=len(request.text))

    caption = generate_story_caption(request.text, model=model, req_id=req_id)
    result = StoryResult(caption=caption, clipboard=split_caption(caption))

    jlog(log, logging.INFO, event="story_ok", req_id=req_id, chars=len(caption),
         two_lines="\n" in result.clipboard, duration_secs=round(time.time() - start, 3))
    return result
