# Adapters between the listing core and the text-completion model.
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from src.agent.errors import UpstreamEmptyError
from src.agent.llm import TextModel, complete, parse_json_object
from src.agent.prompts import STORY_MAX_CHARS, build_features_prompt, build_story_prompt
from src.common.jsonlog import jlog
from .schemas import FormatFeaturesOutput, StoryTextOutput
from .story import strip_pipes

log = logging.getLogger("listing.adapters")

FEATURES_ERROR = (
    "A IA não retornou uma formatação válida para as características. "
    "O resultado pode estar vazio ou malformado."
)
STORY_ERROR = "A IA não conseguiu gerar o texto para o story. O resultado pode estar vazio ou malformado."


def ensure_trailing_semicolon(block: str) -> str:
    """Append ';' to the last non-empty line if it lacks one. Trailing whitespace is kept."""
    body = block.rstrip()
    if not body or body.endswith(";"):
        return block
    return body + ";" + block[len(body):]


def format_features(features_text: str, *, model: Optional[TextModel] = None, req_id: Optional[str] = None) -> str:
    """Raw feature text -> "✅ ...;" bullet block, one feature per line."""
    completion = complete(build_features_prompt(features_text), model=model, req_id=req_id, tool="features.format")
    text = completion.raise_for_status()

    try:
        out = FormatFeaturesOutput.model_validate(parse_json_object(text))
    except ValidationError as e:
        jlog(log, logging.ERROR, tool="features.format", event="bad_shape", req_id=req_id, err=str(e)[:300])
        raise UpstreamEmptyError(FEATURES_ERROR, cause=e) from e

    if not out.formattedFeatures.strip():
        jlog(log, logging.ERROR, tool="features.format", event="empty_field", req_id=req_id)
        raise UpstreamEmptyError(FEATURES_ERROR)

    formatted = ensure_trailing_semicolon(out.formattedFeatures)
    if formatted != out.formattedFeatures:
        jlog(log, logging.INFO, tool="features.format", event="semicolon_repaired", req_id=req_id)
    return formatted


def generate_story_caption(raw_text: str, *, model: Optional[TextModel] = None, req_id: Optional[str] = None) -> str:
    """Raw description -> single " | "-delimited caption line."""
    completion = complete(build_story_prompt(raw_text), model=model, req_id=req_id, tool="story.generate")
    text = completion.raise_for_status()

    try:
        out = StoryTextOutput.model_validate(parse_json_object(text))
    except ValidationError as e:
        jlog(log, logging.ERROR, tool="story.generate", event="bad_shape", req_id=req_id, err=str(e)[:300])
        raise UpstreamEmptyError(STORY_ERROR, cause=e) from e

    story = strip_pipes(out.storyText)
    if not story:
        jlog(log, logging.ERROR, tool="story.generate", event="empty_field", req_id=req_id)
        raise UpstreamEmptyError(STORY_ERROR)

    if len(story) > STORY_MAX_CHARS:
        # kept as returned; the splitter copes with any length
        jlog(log, logging.WARNING, tool="story.generate", event="over_budget", req_id=req_id,
             chars=len(story), budget=STORY_MAX_CHARS)
    return story
