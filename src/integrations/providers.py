"""
Provider Capability Table
=========================

One row per provider id describing how to talk to it: which adapter variant
handles it, the chat-completions endpoint, whether a JSON response-format
hint is sent, and any extra headers. Dispatch is keyed on the provider id
only; model names are never inspected.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict

from src.core import config

VARIANT_NATIVE = "native"
VARIANT_HTTP = "http"


def _no_headers() -> Dict[str, str]:
    return {}


def _openrouter_headers() -> Dict[str, str]:
    return {"HTTP-Referer": config.APP_URL, "X-Title": config.APP_NAME}


@dataclass(frozen=True)
class ProviderSpec:
    """
    Static description of one provider.

    Attributes:
        provider_id: Key used in the attempt plan and credential store
        variant: VARIANT_NATIVE or VARIANT_HTTP
        endpoint: Chat-completions URL (HTTP variant only)
        json_mode: Send ``response_format: {"type": "json_object"}``
        extra_headers: Callable returning provider specific headers
    """
    provider_id: str
    variant: str
    endpoint: str = ""
    json_mode: bool = True
    extra_headers: Callable[[], Dict[str, str]] = field(default=_no_headers)


PROVIDERS: Dict[str, ProviderSpec] = {
    config.PROVIDER_GEMINI: ProviderSpec(
        provider_id=config.PROVIDER_GEMINI,
        variant=VARIANT_NATIVE,
    ),
    config.PROVIDER_GROQ: ProviderSpec(
        provider_id=config.PROVIDER_GROQ,
        variant=VARIANT_HTTP,
        endpoint="https://api.groq.com/openai/v1/chat/completions",
    ),
    config.PROVIDER_OPENAI: ProviderSpec(
        provider_id=config.PROVIDER_OPENAI,
        variant=VARIANT_HTTP,
        endpoint="https://api.openai.com/v1/chat/completions",
    ),
    config.PROVIDER_OPENROUTER: ProviderSpec(
        provider_id=config.PROVIDER_OPENROUTER,
        variant=VARIANT_HTTP,
        endpoint="https://openrouter.ai/api/v1/chat/completions",
        extra_headers=_openrouter_headers,
    ),
    config.PROVIDER_DEEPSEEK: ProviderSpec(
        provider_id=config.PROVIDER_DEEPSEEK,
        variant=VARIANT_HTTP,
        endpoint="https://api.deepseek.com/chat/completions",
    ),
}


def get_provider(provider_id: str) -> ProviderSpec:
    """Look up a provider row; raises KeyError for unknown ids."""
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        raise KeyError(f"Unknown provider: {provider_id!r}") from None
