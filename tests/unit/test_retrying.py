"""Unit tests for the retrying translator."""

import random
from unittest.mock import call, patch

import pytest

from booktrans.core.exceptions import RateLimitError, TranslationFailure
from booktrans.translation.retrying import RetryingTranslator

from conftest import StubBackend


def test_success_on_first_attempt(make_translator):
    backend = StubBackend(mapping={"Hello": "Привет"})
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Привет"
    assert backend.call_count == 1
    assert translator.get_stats()["succeeded"] == 1


def test_two_failures_then_success():
    """Third attempt succeeds after two backoff waits."""
    backend = StubBackend(script=[
        TranslationFailure("stub", "timeout"),
        TranslationFailure("stub", "timeout"),
        "Привет"
    ])
    translator = RetryingTranslator(backend, pacing=(0.0, 0.0), backoff_base=2.0)

    with patch("booktrans.translation.retrying.time.sleep") as sleep:
        assert translator.translate("Hello") == "Привет"

    assert backend.call_count == 3
    assert sleep.call_args_list == [call(2.0), call(4.0)]

    stats = translator.get_stats()
    assert stats["calls"] == 3
    assert stats["failures"] == 2
    assert stats["succeeded"] == 1
    assert stats["degraded"] == 0


def test_exhausted_attempts_return_original(make_translator, network_error):
    backend = StubBackend(script=[network_error] * 3)
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Hello"
    assert backend.call_count == 3
    assert translator.get_stats()["degraded"] == 1


def test_unexpected_exceptions_do_not_escape(make_translator):
    backend = StubBackend(script=[RuntimeError("boom")] * 3)
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Hello"


def test_empty_response_counts_as_failure(make_translator):
    class EmptyBackend(StubBackend):
        def translate_sync(self, request):
            response = super().translate_sync(request)
            response.translations = []
            return response

    backend = EmptyBackend()
    translator = make_translator(backend, max_attempts=2)

    assert translator.translate("Hello") == "Hello"
    assert translator.get_stats()["failures"] == 2


def test_rate_limits_are_counted(make_translator, rate_limit_error):
    backend = StubBackend(script=[rate_limit_error, "Привет"])
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Привет"
    stats = translator.get_stats()
    assert stats["rate_limited"] == 1
    assert stats["failures"] == 0


def test_blank_text_skips_backend(make_translator):
    backend = StubBackend()
    translator = make_translator(backend)

    assert translator.translate("   ") == "   "
    assert translator.translate("") == ""
    assert backend.call_count == 0


def test_pacing_sleeps_before_each_call():
    backend = StubBackend(script=[TranslationFailure("stub", "x"), "ok"])
    translator = RetryingTranslator(
        backend, pacing=(0.1, 0.3), backoff_base=1.0, rng=random.Random(7)
    )

    with patch("booktrans.translation.retrying.time.sleep") as sleep:
        translator.translate("Hello")

    delays = [c.args[0] for c in sleep.call_args_list]
    # pacing, backoff, pacing
    assert len(delays) == 3
    assert 0.1 <= delays[0] <= 0.3
    assert delays[1] == 1.0
    assert 0.1 <= delays[2] <= 0.3


def test_zero_pacing_never_sleeps(make_translator):
    translator = make_translator(StubBackend())

    with patch("booktrans.translation.retrying.time.sleep") as sleep:
        translator.translate("Hello")

    sleep.assert_not_called()


def test_request_carries_languages(make_translator):
    seen = []

    class RecordingBackend(StubBackend):
        def translate_sync(self, request):
            seen.append((request.source_lang, request.target_lang))
            return super().translate_sync(request)

    make_translator(RecordingBackend(), source_lang="en", target_lang="de").translate("Hi")

    assert seen == [("en", "de")]


def test_invalid_attempts():
    with pytest.raises(ValueError):
        RetryingTranslator(StubBackend(), max_attempts=0)


@pytest.mark.parametrize("empty", ["", "   "])
def test_blank_translation_counts_as_failure(make_translator, empty):
    """A blank answer is retried and never replaces the source text."""
    backend = StubBackend(script=[empty, empty, empty])
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Hello"
    assert backend.call_count == 3

    stats = translator.get_stats()
    assert stats["succeeded"] == 0
    assert stats["failures"] == 3
    assert stats["degraded"] == 1


def test_blank_translation_then_success(make_translator):
    backend = StubBackend(script=["", "Привет"])
    translator = make_translator(backend)

    assert translator.translate("Hello") == "Привет"
    assert backend.call_count == 2
