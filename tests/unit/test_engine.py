"""
Unit Tests — Inference Fallback Engine
======================================

Tests for src/core/engine.py. A scripted adapter stands in for the network:
each (provider, key) pair maps to a response text or an exception.
"""

import json
import threading
import time
import unittest

from src.core import config
from src.core.credentials import CredentialSet
from src.core.engine import NO_KEYS_MESSAGE, InferenceEngine
from src.core.errors import AggregateError, ProviderRejectedError, TransportError
from src.core.models import GenerationConstraints

GOOD_RESPONSE = json.dumps({"title": "Red barn in snow", "keywords": ["Barn", "snow", "barn"]})

PLAN = [
    ("gemini-2.0-flash", "gemini"),
    ("llama-3.2-90b-vision-preview", "groq"),
    ("gpt-4o-mini", "openai"),
]


class FakeAdapter:
    """Adapter double that replays scripted outcomes and records every call."""

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def invoke(self, provider_id, model_name, credential, image_bytes, mime_type, prompt,
               response_schema=None, timeout=60):
        self.calls.append({"provider": provider_id, "model": model_name, "key": credential, "timeout": timeout})
        outcome = self.outcomes.get((provider_id, credential), GOOD_RESPONSE)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class BlockingAdapter:
    """Adapter double whose request hangs until released."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def invoke(self, provider_id, model_name, credential, image_bytes, mime_type, prompt,
               response_schema=None, timeout=60):
        self.calls += 1
        self.started.set()
        self.release.wait(5)
        return GOOD_RESPONSE


class TestInferenceEngine(unittest.TestCase):

    def setUp(self):
        self.constraints = GenerationConstraints(platform=config.PLATFORM_ADOBE_STOCK)

    def _resolve(self, adapter, credentials, **kwargs):
        engine = InferenceEngine(adapter, attempt_plan=PLAN)
        return engine.resolve_detailed(b"img", "image/jpeg", self.constraints, credentials=credentials, **kwargs)

    def test_provider_without_keys_is_skipped(self):
        adapter = FakeAdapter()
        resolution = self._resolve(adapter, CredentialSet({"groq": "g1"}))

        self.assertEqual([c["provider"] for c in adapter.calls], ["groq"])
        self.assertEqual(resolution.provider, "groq")
        self.assertEqual(resolution.failures, ())

    def test_first_success_wins(self):
        adapter = FakeAdapter()
        resolution = self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1"}))

        self.assertEqual(len(adapter.calls), 1)
        self.assertEqual(resolution.provider, "gemini")
        self.assertEqual(resolution.model, "gemini-2.0-flash")
        self.assertEqual(resolution.metadata.keywords, ("barn", "snow"))

    def test_all_rejected_raises_aggregate(self):
        adapter = FakeAdapter({
            ("gemini", "k1"): ProviderRejectedError("HTTP 401 Unauthorized", status_code=401),
            ("groq", "g1"): ProviderRejectedError("HTTP 401 Unauthorized", status_code=401),
            ("openai", "o1"): ProviderRejectedError("HTTP 401 Unauthorized", status_code=401),
        })
        with self.assertRaises(AggregateError) as ctx:
            self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1", "openai": "o1"}))

        message = str(ctx.exception)
        for provider in ("gemini", "groq", "openai"):
            self.assertIn(provider, message)
        self.assertEqual([f.provider for f in ctx.exception.failures], ["gemini", "groq", "openai"])
        self.assertEqual(len(adapter.calls), 3)

    def test_key_rotation(self):
        adapter = FakeAdapter({("gemini", "k1"): TransportError("Connection reset")})
        resolution = self._resolve(adapter, CredentialSet({"gemini": "k1,k2"}))

        self.assertEqual([c["key"] for c in adapter.calls], ["k1", "k2"])
        self.assertEqual(resolution.provider, "gemini")
        self.assertEqual(len(resolution.failures), 1)
        self.assertIn("Connection reset", resolution.failures[0].reason)

    def test_parse_failure_falls_through(self):
        adapter = FakeAdapter({("gemini", "k1"): "I cannot help with that."})
        resolution = self._resolve(adapter, CredentialSet({"gemini": "k1", "openai": "o1"}))

        self.assertEqual(resolution.provider, "openai")
        self.assertEqual(resolution.failures[0].provider, "gemini")

    def test_no_keys_at_all(self):
        adapter = FakeAdapter()
        with self.assertRaises(AggregateError) as ctx:
            self._resolve(adapter, CredentialSet())

        self.assertEqual(str(ctx.exception), NO_KEYS_MESSAGE)
        self.assertEqual(adapter.calls, [])

    def test_resolve_returns_metadata(self):
        engine = InferenceEngine(FakeAdapter(), attempt_plan=PLAN)
        metadata = engine.resolve(b"img", "image/png", self.constraints, credentials=CredentialSet({"openai": "o"}))
        self.assertEqual(metadata.title, "Red barn in snow")
        self.assertIsNone(metadata.description)

    def test_attempt_plan_override(self):
        adapter = FakeAdapter()
        engine = InferenceEngine(adapter, attempt_plan=PLAN)
        resolution = engine.resolve_detailed(
            b"img", "image/jpeg", self.constraints,
            attempt_plan=[("gpt-4o", "openai")],
            credentials=CredentialSet({"gemini": "k1", "openai": "o1"}),
        )
        self.assertEqual(resolution.model, "gpt-4o")
        self.assertEqual(len(adapter.calls), 1)

    def test_cancel_event_stops_attempts(self):
        adapter = FakeAdapter()
        cancel = threading.Event()
        cancel.set()
        with self.assertRaises(AggregateError) as ctx:
            self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1"}), cancel_event=cancel)

        self.assertEqual(adapter.calls, [])
        self.assertEqual(len(ctx.exception.failures), 2)

    def test_past_deadline_stops_attempts(self):
        adapter = FakeAdapter()
        with self.assertRaises(AggregateError):
            self._resolve(adapter, CredentialSet({"gemini": "k1"}), deadline=time.monotonic() - 1)
        self.assertEqual(adapter.calls, [])

    def test_deadline_caps_request_timeout(self):
        adapter = FakeAdapter()
        self._resolve(adapter, CredentialSet({"gemini": "k1"}), deadline=time.monotonic() + 5)
        self.assertLessEqual(adapter.calls[0]["timeout"], 5)

    def test_cancel_during_request_abandons_attempt(self):
        adapter = BlockingAdapter()
        self.addCleanup(adapter.release.set)
        cancel = threading.Event()

        def cancel_when_started():
            adapter.started.wait(5)
            cancel.set()

        threading.Thread(target=cancel_when_started, daemon=True).start()
        start = time.monotonic()
        with self.assertRaises(AggregateError) as ctx:
            self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1"}), cancel_event=cancel)

        self.assertLess(time.monotonic() - start, 2)
        self.assertEqual(adapter.calls, 1)
        failures = ctx.exception.failures
        self.assertEqual([f.provider for f in failures], ["gemini", "groq"])
        self.assertIn("in flight", failures[0].reason)
        self.assertIn("before request", failures[1].reason)

    def test_deadline_during_request_abandons_attempt(self):
        adapter = BlockingAdapter()
        self.addCleanup(adapter.release.set)

        start = time.monotonic()
        with self.assertRaises(AggregateError) as ctx:
            self._resolve(adapter, CredentialSet({"gemini": "k1"}), deadline=time.monotonic() + 0.2)

        self.assertLess(time.monotonic() - start, 2)
        self.assertIn("Deadline exceeded", ctx.exception.failures[0].reason)

    def test_error_inside_watched_request_is_recorded(self):
        adapter = FakeAdapter({("gemini", "k1"): ProviderRejectedError("HTTP 429", status_code=429)})
        resolution = self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1"}),
                                   cancel_event=threading.Event())
        self.assertEqual(resolution.provider, "groq")
        self.assertEqual(resolution.failures[0].reason, "HTTP 429")

    def test_unexpected_error_propagates(self):
        adapter = FakeAdapter({("gemini", "k1"): RuntimeError("bug")})
        with self.assertRaises(RuntimeError):
            self._resolve(adapter, CredentialSet({"gemini": "k1", "groq": "g1"}))


if __name__ == "__main__":
    unittest.main()
