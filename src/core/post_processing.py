"""
Metadata Post-Processing
========================

Enforces the constraint budget on parsed metadata. It never fails and never
re-queries a provider; it only trims, truncates and cleans. Rules run in a
fixed order:

1. Title: collapse whitespace, drop excluded title words, truncate to
   ``max_title_length``.
2. Prefix: prepend the enabled, non-empty prefix followed by one space.
3. Suffix: append the enabled, non-empty suffix preceded by one space.
4. Keywords: split comma-joined entries, trim, lower-case, drop empties and
   excluded keywords, de-duplicate case-insensitively keeping first-seen
   order, then cut to ``target_keyword_count``.

The description, when the platform accepts one, is truncated with the same
rule as the title; otherwise it is dropped.

Truncation cuts at the last word boundary inside the budget. A single word
longer than the budget is cut mid-word at exactly the budget. No ellipsis is
added, so the result is never longer than the budget.
"""

import re
from typing import Iterable, List, Optional

from .models import GenerationConstraints, SEOMetadata

# Characters left dangling at a word-boundary cut
_TRAILING_PUNCTUATION = " ,;:-"


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def truncate_text(text: str, max_length: int) -> str:
    """Truncate ``text`` to at most ``max_length`` characters on a word boundary."""
    text = collapse_whitespace(text)
    if len(text) <= max_length:
        return text

    cut = text[:max_length]
    if text[max_length] == " ":
        # The budget ends exactly on a word boundary
        result = cut
    else:
        last_space = cut.rfind(" ")
        result = cut[:last_space] if last_space > 0 else cut
    return result.rstrip(_TRAILING_PUNCTUATION) or cut.strip()


def remove_words(text: str, words: Iterable[str]) -> str:
    """Remove whole-word occurrences of ``words`` (case-insensitive)."""
    for word in words:
        pattern = re.compile(r"(?<!\w)" + re.escape(word) + r"(?!\w)", re.IGNORECASE)
        text = pattern.sub(" ", text)
    return collapse_whitespace(text)


def clean_keywords(
    keywords: Iterable[str],
    limit: int,
    excluded: Iterable[str] = (),
) -> List[str]:
    """
    Normalize a keyword list.

    Args:
        keywords: Raw keywords as returned by the model.
        limit: Maximum number of keywords to keep.
        excluded: Keywords to drop (compared case-insensitively).

    Returns:
        Lower-cased, unique keywords in first-seen order, at most ``limit`` long.
    """
    excluded_set = {e.strip().lower() for e in excluded if e and e.strip()}
    seen = set()
    result: List[str] = []
    for raw in keywords:
        for part in str(raw).split(","):
            keyword = collapse_whitespace(part).lower()
            if not keyword or keyword in excluded_set or keyword in seen:
                continue
            seen.add(keyword)
            result.append(keyword)
    return result[:limit]


def _affix(value: Optional[str]) -> str:
    return value.strip() if value else ""


def apply_post_processing(metadata: SEOMetadata, constraints: GenerationConstraints) -> SEOMetadata:
    """
    Apply the constraint budget to parsed metadata.

    Args:
        metadata: Metadata as parsed from the provider response.
        constraints: Limits, affixes and exclusions to enforce.

    Returns:
        A new SEOMetadata value; the input is left untouched.
    """
    title = collapse_whitespace(metadata.title)
    if constraints.excluded_title_words:
        title = remove_words(title, constraints.excluded_title_words)
    title = truncate_text(title, constraints.max_title_length)

    prefix = _affix(constraints.title_prefix)
    if prefix:
        title = f"{prefix} {title}" if title else prefix
    suffix = _affix(constraints.title_suffix)
    if suffix:
        title = f"{title} {suffix}" if title else suffix

    keywords = clean_keywords(
        metadata.keywords,
        constraints.target_keyword_count,
        constraints.excluded_keywords,
    )

    description = None
    if constraints.fields["description"] and metadata.description:
        description = truncate_text(metadata.description, constraints.max_description_length)

    return SEOMetadata(title=title, keywords=tuple(keywords), description=description)
