"""
OpenAI-Compatible Chat Client
=============================

Generic client for every provider that exposes an OpenAI-style
``/chat/completions`` endpoint (Groq, OpenAI, OpenRouter, DeepSeek). The
provider-specific bits (endpoint, image part shape, JSON hint, extra headers)
come from the capability table in ``providers.py``.

One call == one attempt. No retries happen here; trying another key or
provider is the engine's job.
"""

import base64
import logging
from typing import Any, Dict, Optional

import requests

from src.core import config
from src.core.errors import MissingCredentialError, ParseError, ProviderRejectedError, TransportError
from .providers import ProviderSpec
from .transport import DirectTransport

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
    """
    Client wrapper for OpenAI-compatible chat-completions APIs.

    Attributes:
        transport: Direct or relayed transport used for every request.
    """

    def __init__(self, transport: Optional[DirectTransport] = None):
        self.transport = transport or DirectTransport()

    def build_payload(
        self,
        spec: ProviderSpec,
        model_name: str,
        prompt: str,
        image_bytes: bytes,
        mime_type: str,
    ) -> Dict[str, Any]:
        """Build the chat-completions request body for one image."""
        image_b64 = base64.b64encode(image_bytes).decode()
        data_url = f"data:{mime_type};base64,{image_b64}"

        payload = {
            "model": model_name,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            "temperature": config.GENERATION_TEMPERATURE,
        }
        if spec.json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

    def build_headers(self, spec: ProviderSpec, api_key: str) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        headers.update(spec.extra_headers())
        return headers

    def chat_with_image(
        self,
        spec: ProviderSpec,
        model_name: str,
        api_key: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
    ) -> str:
        """
        Send a prompt with an image and return the model's text.

        Raises:
            MissingCredentialError: empty API key.
            TransportError: network failure or timeout.
            ProviderRejectedError: non-2xx status (provider message when available).
            ParseError: 2xx response without usable content.
        """
        if not api_key:
            raise MissingCredentialError(f"No API key for {spec.provider_id}")

        payload = self.build_payload(spec, model_name, prompt, image_bytes, mime_type)
        headers = self.build_headers(spec, api_key)

        try:
            resp = self.transport.post_json(spec.endpoint, headers, payload, timeout)
        except requests.exceptions.Timeout as exc:
            raise TransportError(f"Request timed out after {timeout:.0f}s") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Request failed: {exc}") from exc

        try:
            if not resp.ok:
                raise ProviderRejectedError(self._error_message(resp), status_code=resp.status_code)
            try:
                data = resp.json()
            except ValueError as exc:
                raise ParseError(f"Response body is not JSON: {exc}") from exc
        finally:
            resp.close()

        return self.extract_text(data)

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        """Provider's own error message when parseable, else the status line."""
        detail = ""
        try:
            body = resp.json()
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                detail = error.get("message") or ""
            elif isinstance(error, str):
                detail = error
            elif isinstance(body, dict):
                detail = body.get("message") or ""
        except ValueError:
            pass
        status_line = f"HTTP {resp.status_code} {resp.reason or ''}".strip()
        return f"{status_line}: {detail}" if detail else status_line

    @staticmethod
    def extract_text(data: Any) -> str:
        """Pull ``choices[0].message.content`` out of a chat-completions body."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ParseError("Empty AI response (no choices)") from exc

        if isinstance(content, list):
            content = "".join(
                part["text"] for part in content
                if isinstance(part, dict)
                and part.get("type", "text") == "text"
                and isinstance(part.get("text"), str)
            )
        if not isinstance(content, str) or not content:
            raise ParseError("Empty AI response")
        return content

    def close(self):
        self.transport.close()
