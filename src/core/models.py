"""
Engine Data Model
=================

Value types passed between the stages of the inference engine. All of them are
frozen dataclasses: every processing stage returns a new value instead of
mutating the one it received.

- GenerationConstraints: desired output shape (limits, platform, exclusions)
- AttemptPlanEntry: one (model, provider) step of the ordered attempt plan
- SEOMetadata: title, optional description and keyword list
- AttemptFailure: one failed attempt, kept in the attempt log
- Resolution: successful outcome of a resolve call
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from . import config


def split_terms(raw) -> Tuple[str, ...]:
    """
    Normalize a user supplied word list into a tuple of trimmed terms.

    Accepts ``None``, a single string separated by commas and/or newlines, or
    any iterable of strings. Empty entries are dropped.
    """
    if not raw:
        return ()
    if isinstance(raw, str):
        parts = raw.replace("\n", ",").split(",")
    else:
        parts = [str(p) for p in raw]
    return tuple(p.strip() for p in parts if p and p.strip())


@dataclass(frozen=True)
class GenerationConstraints:
    """
    Immutable description of the metadata the caller wants back.

    Attributes:
        platform: Target stock platform (key of config.PLATFORM_FIELDS)
        max_title_length: Character budget for the title body (prefix/suffix excluded)
        max_description_length: Character budget for the description
        target_keyword_count: Exact number of keywords requested (upper bound after cleanup)
        image_kind: 'None', 'Photo', 'Vector' or 'Illustration'
        excluded_title_words: Words that must not appear in the title
        excluded_keywords: Keywords that must not appear in the keyword list
        title_prefix: Text placed before the title, None when disabled
        title_suffix: Text placed after the title, None when disabled
    """
    platform: str = config.DEFAULT_PLATFORM
    max_title_length: int = config.DEFAULT_MAX_TITLE_CHARS
    max_description_length: int = config.DEFAULT_MAX_DESC_CHARS
    target_keyword_count: int = config.DEFAULT_KEYWORD_COUNT
    image_kind: str = config.DEFAULT_IMAGE_KIND
    excluded_title_words: Tuple[str, ...] = ()
    excluded_keywords: Tuple[str, ...] = ()
    title_prefix: Optional[str] = None
    title_suffix: Optional[str] = None

    def __post_init__(self):
        if self.platform not in config.PLATFORM_FIELDS:
            raise ValueError(f"Unknown platform: {self.platform!r}")
        if self.image_kind not in config.IMAGE_KINDS:
            raise ValueError(f"Unknown image kind: {self.image_kind!r}")
        for name in ("max_title_length", "max_description_length", "target_keyword_count"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "excluded_title_words", split_terms(self.excluded_title_words))
        object.__setattr__(self, "excluded_keywords", split_terms(self.excluded_keywords))

    @property
    def fields(self) -> Dict[str, bool]:
        """Field requirements of the selected platform."""
        return platform_fields(self.platform)


def platform_fields(platform: str) -> Dict[str, bool]:
    """Return a copy of the title/description/keywords requirements for a platform."""
    try:
        return dict(config.PLATFORM_FIELDS[platform])
    except KeyError:
        raise ValueError(f"Unknown platform: {platform!r}") from None


@dataclass(frozen=True)
class AttemptPlanEntry:
    """One step of the attempt plan."""
    model: str
    provider: str

    def __str__(self) -> str:
        return f"{self.provider} [{self.model}]"


def build_attempt_plan(entries: Optional[Iterable] = None) -> Tuple[AttemptPlanEntry, ...]:
    """
    Build an attempt plan from (model, provider) pairs or AttemptPlanEntry values.

    With no argument the default plan from config is returned.
    """
    if entries is None:
        entries = config.DEFAULT_ATTEMPT_PLAN
    plan = []
    for entry in entries:
        if isinstance(entry, AttemptPlanEntry):
            plan.append(entry)
        else:
            model, provider = entry
            plan.append(AttemptPlanEntry(model=model, provider=provider))
    return tuple(plan)


@dataclass(frozen=True)
class SEOMetadata:
    """Generated stock metadata."""
    title: str
    keywords: Tuple[str, ...] = ()
    description: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"title": self.title, "keywords": list(self.keywords)}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class AttemptFailure:
    """A failed attempt recorded in the attempt log."""
    provider: str
    model: str
    reason: str

    def __str__(self) -> str:
        return f"{self.provider} [{self.model}]: {self.reason}"


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of a successful resolve call.

    Attributes:
        metadata: Final post-processed metadata
        provider: Provider that produced it
        model: Model that produced it
        failures: Attempts that failed before the successful one
    """
    metadata: SEOMetadata
    provider: str
    model: str
    failures: Tuple[AttemptFailure, ...] = field(default_factory=tuple)
