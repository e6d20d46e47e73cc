"""
Inference Fallback Engine
=========================

Drives the attempt plan across providers and credentials until one attempt
produces usable metadata.

Workflow per resolve call:
1. Build the prompt and response schema from the constraints.
2. Walk the attempt plan in order. Providers without credentials are skipped
   silently (not configured is not a failure).
3. For each credential of the provider, in order:
   a. Invoke the provider adapter (one request, no retries)
   b. Parse the text with the response normalizer
   c. Apply post-processing and return immediately on success
   Any engine error is appended to the attempt log and the next credential
   (then the next plan entry) is tried.
4. When the plan is exhausted, raise AggregateError listing every failure in
   attempted order.

Attempts are strictly sequential: one request in flight per call, so the same
image is never billed twice in parallel and "first configured, first successful"
is deterministic. Independent calls for different images share no mutable
state and may run concurrently.

A cancel signal or deadline abandons the attempt in flight (recorded as a
TransportError); no further request is sent after that, so the walk only
records the remaining attempts as failed.
"""

import logging
import threading
import time
from typing import Callable, Iterable, List, Optional

from . import config
from .credentials import CredentialSet, mask_key
from .errors import AggregateError, SEOEngineError, TransportError
from .models import AttemptFailure, GenerationConstraints, Resolution, SEOMetadata, build_attempt_plan
from .post_processing import apply_post_processing
from .prompt_builder import build_prompt, build_response_schema
from .response_parser import normalize

logger = logging.getLogger(__name__)

NO_KEYS_MESSAGE = "No active API keys found."

# How often an in-flight attempt checks the cancel signal and deadline
CANCEL_POLL_SECONDS = 0.05


class InferenceEngine:
    """
    Fallback orchestrator.

    Attributes:
        adapter: Object exposing ``invoke(provider_id, model, credential, image_bytes,
                 mime_type, prompt, response_schema=..., timeout=...)``
        attempt_plan: Default plan used when resolve() is not given one
        request_timeout: Upper bound for a single provider request, in seconds

    Example:
        >>> engine = InferenceEngine(ProviderAdapter())
        >>> metadata = engine.resolve(data, "image/jpeg", constraints, credentials=creds)
    """

    def __init__(
        self,
        adapter,
        attempt_plan: Optional[Iterable] = None,
        request_timeout: float = config.REQUEST_TIMEOUT_SECONDS,
    ):
        self.adapter = adapter
        self.attempt_plan = build_attempt_plan(attempt_plan)
        self.request_timeout = request_timeout

    def resolve(
        self,
        image_bytes: bytes,
        mime_type: str,
        constraints: GenerationConstraints,
        attempt_plan: Optional[Iterable] = None,
        credentials: Optional[CredentialSet] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> SEOMetadata:
        """Return post-processed metadata for one image, or raise AggregateError."""
        return self.resolve_detailed(
            image_bytes,
            mime_type,
            constraints,
            attempt_plan=attempt_plan,
            credentials=credentials,
            cancel_event=cancel_event,
            deadline=deadline,
        ).metadata

    def resolve_detailed(
        self,
        image_bytes: bytes,
        mime_type: str,
        constraints: GenerationConstraints,
        attempt_plan: Optional[Iterable] = None,
        credentials: Optional[CredentialSet] = None,
        cancel_event: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> Resolution:
        """
        Run the attempt plan and describe the successful attempt.

        Args:
            image_bytes: Raw image data.
            mime_type: MIME type of the image (e.g. ``image/jpeg``).
            constraints: Output shape to request and enforce.
            attempt_plan: Ordered (model, provider) pairs; defaults to the engine's plan.
            credentials: Keys per provider. Read-only for the duration of the call.
            cancel_event: When set, the in-flight attempt is abandoned and every
                          remaining attempt fails as TransportError.
            deadline: Absolute ``time.monotonic()`` value with the same effect once
                      reached; also caps each request timeout.

        Returns:
            Resolution with the metadata, winning provider/model and prior failures.

        Raises:
            AggregateError: every attempt failed, or no provider had keys.
        """
        plan = build_attempt_plan(attempt_plan) if attempt_plan is not None else self.attempt_plan
        credentials = credentials if credentials is not None else CredentialSet()

        prompt = build_prompt(constraints)
        schema = build_response_schema(constraints.platform)
        attempt_log: List[AttemptFailure] = []

        for entry in plan:
            keys = credentials.keys_for(entry.provider)
            if not keys:
                logger.debug(f"Skipping {entry}: no credentials configured")
                continue

            for index, api_key in enumerate(keys, start=1):
                logger.info(
                    f"Attempt {len(attempt_log) + 1}: {entry} "
                    f"key {index}/{len(keys)} ({mask_key(api_key)})"
                )
                try:
                    timeout = self._attempt_timeout(cancel_event, deadline)
                    raw_text = self._invoke(
                        lambda: self.adapter.invoke(
                            entry.provider,
                            entry.model,
                            api_key,
                            image_bytes,
                            mime_type,
                            prompt,
                            response_schema=schema,
                            timeout=timeout,
                        ),
                        cancel_event,
                        deadline,
                    )
                    parsed = normalize(raw_text, constraints.platform)
                except SEOEngineError as exc:
                    failure = AttemptFailure(provider=entry.provider, model=entry.model, reason=str(exc))
                    attempt_log.append(failure)
                    logger.warning(f"Fallback triggered: {failure}")
                    continue

                metadata = apply_post_processing(parsed, constraints)
                logger.info(
                    f"Resolved with {entry} after {len(attempt_log)} failed attempt(s): "
                    f"{len(metadata.keywords)} keywords"
                )
                return Resolution(
                    metadata=metadata,
                    provider=entry.provider,
                    model=entry.model,
                    failures=tuple(attempt_log),
                )

        raise self._aggregate(attempt_log)

    def _attempt_timeout(
        self,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> float:
        if cancel_event is not None and cancel_event.is_set():
            raise TransportError("Cancelled before request was sent")
        if deadline is None:
            return self.request_timeout
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError("Deadline exceeded before request was sent")
        return min(self.request_timeout, remaining)

    def _invoke(
        self,
        call: Callable[[], str],
        cancel_event: Optional[threading.Event],
        deadline: Optional[float],
    ) -> str:
        """
        Run one adapter call, abandoning it when cancelled or past the deadline.

        Without a cancel signal or deadline the call runs on the current thread.
        Otherwise it runs on a daemon thread while this thread watches both;
        an abandoned call finishes in the background and its outcome is dropped.
        """
        if cancel_event is None and deadline is None:
            return call()

        outcome = {}
        finished = threading.Event()

        def target():
            try:
                outcome["result"] = call()
            except BaseException as exc:
                outcome["error"] = exc
            finally:
                finished.set()

        threading.Thread(target=target, name="SEOAttempt", daemon=True).start()

        while not finished.wait(CANCEL_POLL_SECONDS):
            if cancel_event is not None and cancel_event.is_set():
                raise TransportError("Cancelled while request was in flight")
            if deadline is not None and time.monotonic() >= deadline:
                raise TransportError("Deadline exceeded while request was in flight")

        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    @staticmethod
    def _aggregate(attempt_log: List[AttemptFailure]) -> AggregateError:
        if not attempt_log:
            logger.error(f"Engine stopped: {NO_KEYS_MESSAGE}")
            return AggregateError(NO_KEYS_MESSAGE)

        details = "; ".join(str(f) for f in attempt_log)
        message = f"Engine stopped after {len(attempt_log)} failed attempt(s): {details}"
        logger.error(message)
        return AggregateError(message, failures=attempt_log)
