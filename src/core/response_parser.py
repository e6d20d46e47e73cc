"""
Response Normalizer
===================

Extracts a well-formed ``SEOMetadata`` value from the text a provider returned.
Provider output is not guaranteed to be clean JSON: some models wrap the object
in markdown code fences, others prepend or append prose. The parser is forgiving
about the wrapping and strict about the content:

1. Empty text fails immediately.
2. Markdown fence markers (```json / ```) are stripped.
3. The remaining text is parsed as JSON; if that fails, the substring between
   the first ``{`` and the last ``}`` is parsed instead.
4. The object must carry a string ``title`` and a ``keywords`` sequence
   (a comma separated string is accepted too). ``description`` is kept only
   when the platform accepts it.

Any failure raises ``ParseError``.
"""

import json
import logging
import re
from typing import Any, List, Optional

from . import config
from .errors import ParseError
from .models import SEOMetadata

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


def strip_code_fences(text: str) -> str:
    """Remove every markdown code-fence marker and surrounding whitespace."""
    return _FENCE_RE.sub("", text).strip()


def _load_json_object(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ParseError(f"No JSON object found in response: {text[:120]!r}")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in response: {exc}") from exc


def _coerce_keywords(raw: Any) -> List[str]:
    if isinstance(raw, str):
        return [k for k in raw.split(",")]
    if isinstance(raw, (list, tuple)):
        return [k if isinstance(k, str) else str(k) for k in raw if k is not None]
    raise ParseError(f"'keywords' must be a list of strings, got {type(raw).__name__}")


def normalize(raw_text: Optional[str], platform: Optional[str] = None) -> SEOMetadata:
    """
    Parse provider text into metadata.

    Args:
        raw_text: Text returned by the provider adapter.
        platform: Active platform; when it does not accept descriptions any
                  description in the response is discarded. ``None`` keeps it.

    Returns:
        SEOMetadata with raw (not yet post-processed) values.

    Raises:
        ParseError: empty text, no JSON object, or missing/invalid fields.
    """
    if raw_text is None or not str(raw_text).strip():
        raise ParseError("Empty AI response")

    cleaned = strip_code_fences(str(raw_text))
    data = _load_json_object(cleaned)
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ParseError("Response is missing a 'title' string")

    if "keywords" not in data or data["keywords"] is None:
        raise ParseError("Response is missing 'keywords'")
    keywords = _coerce_keywords(data["keywords"])

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        description = str(description)
    if platform is not None and not config.PLATFORM_FIELDS.get(platform, {}).get("description", True):
        description = None

    logger.debug(f"Parsed response: title={title[:60]!r}, {len(keywords)} keywords")
    return SEOMetadata(title=title, keywords=tuple(keywords), description=description)
