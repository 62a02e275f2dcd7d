"""Turn loosely formatted model output into an Activity.

The model is asked for a bare JSON object, but in practice it sometimes wraps the
object in markdown fences, adds chatter around it, or ignores the format entirely.
`normalize_response` works through the cases in order:

1. strip fences and pull out the outermost ``{...}`` block, then parse it strictly;
2. if that fails, guess a title/description pair from the raw text;
3. otherwise report the text as unrecoverable so the caller can fall back.
"""
import json
import logging
import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from activities import Activity

logger = logging.getLogger("response-parser")

PLACEHOLDER_TITLE = "Spontaneous Activity"
MAX_TITLE_WORDS = 5
MAX_TITLE_CHARS = 30

_FENCE_RE = re.compile(r"```json|```")
_JSON_BLOCK_RE = re.compile(r"\{.*\}", flags=re.S)
_QUOTED_RE = re.compile(r"\"([^\"]+)\"|'([^']+)'")
_SEGMENT_SPLIT_RE = re.compile(r"[\n.]")
_EDGE_PUNCT_RE = re.compile(r"^[\s.,:;!?-]+|[\s.,:;!?-]+$")


class Parsed(BaseModel):
    kind: Literal["parsed"] = "parsed"
    activity: Activity


class Recovered(BaseModel):
    kind: Literal["recovered"] = "recovered"
    activity: Activity


class Unrecoverable(BaseModel):
    kind: Literal["unrecoverable"] = "unrecoverable"


ParseOutcome = Union[Parsed, Recovered, Unrecoverable]


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text)


def extract_json_block(text: str) -> str:
    """Return the greedy ``{...}`` span of the fence-free text, or the trimmed text when there is none."""
    cleaned = strip_fences(text.strip()).strip()
    m = _JSON_BLOCK_RE.search(cleaned)
    if m:
        return m.group(0)
    return cleaned


def parse_activity(text: str) -> Optional[Activity]:
    """Strictly parse a JSON object with non-empty string ``title`` and ``description``."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return Activity(title=data.get("title"), description=data.get("description"))
    except ValidationError:
        return None


def _guess_title(clean: str):
    m = _QUOTED_RE.search(clean)
    if m:
        title = m.group(1) or m.group(2)
        return title, clean.replace(m.group(0), "", 1).strip()

    for segment in _SEGMENT_SPLIT_RE.split(clean):
        trimmed = segment.strip()
        if trimmed and len(trimmed.split()) <= MAX_TITLE_WORDS and len(trimmed) <= MAX_TITLE_CHARS:
            return trimmed, clean.replace(trimmed, "", 1).strip()

    words = clean.split()
    if len(words) > MAX_TITLE_WORDS:
        return " ".join(words[:MAX_TITLE_WORDS]), " ".join(words[MAX_TITLE_WORDS:])
    return PLACEHOLDER_TITLE, clean


def recover_activity(raw_text: str) -> Optional[Activity]:
    """Best-effort title/description extraction from free text.

    Tries, in order: a quoted phrase as the title, the first short sentence or line,
    and finally the first five words. Returns None when either field ends up empty.
    """
    try:
        clean = strip_fences(raw_text).strip()
        title, description = _guess_title(clean)
        title = title.strip()
        description = _EDGE_PUNCT_RE.sub("", description)
        if not title or not description:
            return None
        return Activity(title=title, description=description)
    except Exception:
        logger.exception("Heuristic recovery failed")
        return None


def normalize_response(raw_text: str) -> ParseOutcome:
    candidate = extract_json_block(raw_text or "")
    activity = parse_activity(candidate)
    if activity is not None:
        return Parsed(activity=activity)

    logger.warning("Model output was not the expected JSON object; raw output: %.500s", raw_text)
    recovered = recover_activity(raw_text or "")
    if recovered is not None:
        logger.info("Recovered activity %r from unstructured output", recovered.title)
        return Recovered(activity=recovered)
    return Unrecoverable()
