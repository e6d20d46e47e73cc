"""
HTTP Transport Strategies
=========================

The generic provider client never posts directly; it hands the request to a
transport. Two strategies exist:

- DirectTransport: POST the JSON body to the provider endpoint.
- RelayTransport: POST an envelope ``{targetUrl, method, headers, body}`` to a
  relay endpoint that performs the real request and returns the provider's
  response verbatim. Used where the caller cannot reach providers directly
  (e.g. cross-origin restrictions in a browser front end).

Both return the ``requests.Response`` so status handling is identical.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests

from src.utils.logger import log_api_request, log_api_response

logger = logging.getLogger(__name__)


class DirectTransport:
    """Send requests straight to the provider."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def post_json(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        timeout: float,
    ) -> requests.Response:
        log_api_request(logger, "POST", url, headers=headers)
        start = time.time()
        resp = self.session.post(url, headers=headers, json=payload, timeout=timeout)
        log_api_response(logger, resp.status_code, elapsed_time=time.time() - start)
        return resp

    def close(self):
        self.session.close()

    def __repr__(self) -> str:
        return "<DirectTransport>"


class RelayTransport(DirectTransport):
    """
    Send requests through a relay endpoint.

    Attributes:
        relay_url: URL accepting the ``{targetUrl, method, headers, body}`` envelope.
    """

    def __init__(self, relay_url: str, session: Optional[requests.Session] = None):
        super().__init__(session)
        if not relay_url:
            raise ValueError("relay_url must not be empty")
        self.relay_url = relay_url

    def post_json(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        timeout: float,
    ) -> requests.Response:
        envelope = {
            "targetUrl": url,
            "method": "POST",
            "headers": headers,
            "body": payload,
        }
        logger.debug(f"Relaying request for {url} via {self.relay_url}")
        log_api_request(logger, "POST", self.relay_url, headers=headers)
        start = time.time()
        resp = self.session.post(
            self.relay_url,
            headers={"Content-Type": "application/json"},
            json=envelope,
            timeout=timeout,
        )
        log_api_response(logger, resp.status_code, elapsed_time=time.time() - start)
        return resp

    def __repr__(self) -> str:
        return f"<RelayTransport relay_url={self.relay_url}>"


def make_transport(relay_url: Optional[str] = None, session: Optional[requests.Session] = None) -> DirectTransport:
    """Pick the transport strategy: relayed when a relay URL is configured, direct otherwise."""
    if relay_url:
        return RelayTransport(relay_url, session=session)
    return DirectTransport(session=session)
