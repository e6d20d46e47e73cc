"""
Provider Adapter
================

Single entry point for "perform one visual-inference call". Looks the provider
up in the capability table and routes the call to the matching variant:

- native: ``GeminiClient`` (google-genai SDK, inline bytes, schema hint)
- http:   ``OpenAICompatibleClient`` over the configured transport

The adapter performs exactly one request per ``invoke``; it never retries.
"""

import logging
from typing import Any, Dict, Optional

from src.core import config
from .gemini_client import GeminiClient
from .openai_compatible_client import OpenAICompatibleClient
from .providers import VARIANT_NATIVE, get_provider
from .transport import DirectTransport, make_transport

logger = logging.getLogger(__name__)


class ProviderAdapter:
    """
    Dispatch one inference attempt to the right provider client.

    Example:
        >>> adapter = ProviderAdapter(relay_url=None)
        >>> text = adapter.invoke("openai", "gpt-4o-mini", "sk-...", data, "image/png", prompt)
    """

    def __init__(
        self,
        transport: Optional[DirectTransport] = None,
        relay_url: Optional[str] = None,
        http_client: Optional[OpenAICompatibleClient] = None,
        native_client: Optional[GeminiClient] = None,
    ):
        if transport is None:
            transport = make_transport(relay_url)
        self.http_client = http_client or OpenAICompatibleClient(transport)
        self.native_client = native_client or GeminiClient()

    def invoke(
        self,
        provider_id: str,
        model_name: str,
        credential: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
    ) -> str:
        """
        Run a single attempt and return the provider's raw text.

        Raises:
            KeyError: unknown provider id.
            SEOEngineError subclasses: see the individual clients.
        """
        spec = get_provider(provider_id)
        logger.debug(f"Invoking {provider_id} [{model_name}] via {spec.variant} variant")

        if spec.variant == VARIANT_NATIVE:
            return self.native_client.chat_with_image(
                model_name=model_name,
                api_key=credential,
                image_bytes=image_bytes,
                mime_type=mime_type,
                prompt=prompt,
                response_schema=response_schema,
                timeout=timeout,
            )

        return self.http_client.chat_with_image(
            spec,
            model_name=model_name,
            api_key=credential,
            image_bytes=image_bytes,
            mime_type=mime_type,
            prompt=prompt,
            timeout=timeout,
        )

    def close(self):
        """Release the HTTP session and connection pool."""
        self.http_client.close()
