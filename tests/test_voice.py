"""Tests for single-shot voice capture."""

from __future__ import annotations

import pytest

from smartdine.services.exceptions import CapabilityUnavailable, RecognitionError
from smartdine.services.voice import CaptureState, VoiceCapture


@pytest.mark.asyncio
async def test_missing_capability_fails_without_listening(settings):
    capture = VoiceCapture(None, settings=settings)

    with pytest.raises(CapabilityUnavailable):
        capture.start()

    assert capture.state is CaptureState.IDLE
    assert capture.supported is False


@pytest.mark.asyncio
async def test_start_configures_single_shot_recognizer(settings, speech):
    capture = VoiceCapture(speech, settings=settings)

    capture.start()

    recognizer = speech.recognizers[0]
    assert recognizer.started is True
    assert recognizer.lang == "en-IN"
    assert recognizer.interim_results is False
    assert recognizer.max_alternatives == 1
    assert capture.state is CaptureState.LISTENING


@pytest.mark.asyncio
async def test_transcript_completes_capture(settings, speech):
    capture = VoiceCapture(speech, settings=settings)
    handle = capture.start()

    speech.recognizers[0].emit_result("paneer tikka near me")

    assert await handle.result() == "paneer tikka near me"
    assert capture.state is CaptureState.IDLE
    assert capture.last_outcome is CaptureState.COMPLETED


@pytest.mark.asyncio
async def test_recognition_error_fails_capture(settings, speech):
    capture = VoiceCapture(speech, settings=settings)
    handle = capture.start()

    speech.recognizers[0].emit_error("network")

    with pytest.raises(RecognitionError):
        await handle.result()
    assert capture.state is CaptureState.IDLE
    assert capture.last_outcome is CaptureState.FAILED


@pytest.mark.asyncio
async def test_end_without_result_yields_none(settings, speech):
    capture = VoiceCapture(speech, settings=settings)
    handle = capture.start()

    capture.stop()

    assert speech.recognizers[0].stopped is True
    assert await handle.result() is None
    assert capture.state is CaptureState.IDLE


@pytest.mark.asyncio
async def test_superseded_capture_does_not_touch_state(settings, speech):
    capture = VoiceCapture(speech, settings=settings)
    first = capture.start()
    second = capture.start()

    speech.recognizers[0].emit_result("old")

    assert await first.result() == "old"
    assert capture.state is CaptureState.LISTENING
    assert not second.done


class _RefusingRecognizer:
    lang = None
    interim_results = None
    max_alternatives = None
    on_result = None
    on_error = None
    on_end = None

    def start(self) -> None:
        raise RuntimeError("microphone busy")

    def stop(self) -> None:
        pass


class _RefusingCapability:
    def create_recognizer(self) -> _RefusingRecognizer:
        return _RefusingRecognizer()


@pytest.mark.asyncio
async def test_recognizer_start_failure_returns_to_idle(settings):
    capture = VoiceCapture(_RefusingCapability(), settings=settings)

    with pytest.raises(RecognitionError):
        capture.start()

    assert capture.state is CaptureState.IDLE
    assert capture.last_outcome is CaptureState.FAILED
    capture.stop()
