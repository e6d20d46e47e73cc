"""
Google Gemini Client
====================

Native-SDK provider variant built on the ``google-genai`` package. A client is
created per call and scoped to the single API key being tried, the image is
sent as inline bytes together with the prompt, and the response is constrained
to JSON through ``response_mime_type`` plus a response schema derived from the
platform's field requirements.

Obtain an API key at: https://aistudio.google.com/app/apikey
"""

import logging
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from src.core import config
from src.core.errors import MissingCredentialError, ParseError, ProviderRejectedError, TransportError
from src.core.credentials import mask_key

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client wrapper for the Gemini API.

    Mirrors ``OpenAICompatibleClient.chat_with_image`` so the adapter can treat
    both variants the same way.
    """

    def _make_client(self, api_key: str, timeout: float) -> "genai.Client":
        # HttpOptions.timeout is expressed in milliseconds
        return genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    @staticmethod
    def _to_schema(schema: Dict[str, Any]) -> types.Schema:
        properties = {}
        for name, prop in schema["properties"].items():
            if prop["type"] == "ARRAY":
                properties[name] = types.Schema(
                    type=types.Type.ARRAY,
                    items=types.Schema(type=types.Type.STRING),
                )
            else:
                properties[name] = types.Schema(type=types.Type.STRING)
        return types.Schema(
            type=types.Type.OBJECT,
            properties=properties,
            required=list(schema["required"]),
        )

    def chat_with_image(
        self,
        model_name: str,
        api_key: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
    ) -> str:
        """
        Send a text+image prompt to Gemini and return the generated text.

        Args:
            model_name: Model identifier (e.g. ``gemini-2.0-flash``).
            api_key: The single key this attempt is scoped to.
            image_bytes: Raw image data, sent inline.
            mime_type: MIME type of ``image_bytes``.
            prompt: Text instruction.
            response_schema: Optional schema dict from ``build_response_schema``.
            timeout: Request timeout in seconds.

        Raises:
            MissingCredentialError: empty API key.
            ProviderRejectedError: the API answered with an error.
            TransportError: network failure or timeout below the SDK.
            ParseError: the response carried no text.
        """
        if not api_key:
            raise MissingCredentialError("No API key for gemini")

        generation_config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=self._to_schema(response_schema) if response_schema else None,
            temperature=config.GENERATION_TEMPERATURE,
        )
        contents = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            prompt,
        ]

        logger.info(f"Gemini request: model={model_name}, key={mask_key(api_key)}")
        client = self._make_client(api_key, timeout)
        try:
            response = client.models.generate_content(
                model=model_name,
                contents=contents,
                config=generation_config,
            )
        except genai_errors.APIError as exc:
            detail = getattr(exc, "message", None) or str(exc)
            raise ProviderRejectedError(
                f"Gemini API error ({exc.code}): {detail}", status_code=exc.code
            ) from exc
        except httpx.TimeoutException as exc:
            raise TransportError(f"Gemini request timed out after {timeout:.0f}s") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Gemini request failed: {exc}") from exc
        finally:
            client.close()

        text = response.text
        if not text:
            raise ParseError("Empty AI response")
        return text
