"""Single-shot speech capture exposed as an awaitable result.

A speech capability hands out recognisers that report back through
``on_result`` / ``on_error`` / ``on_end`` callbacks. ``VoiceCapture`` folds
those callbacks into one future per capture, so callers simply await the
transcript.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Protocol

from smartdine.config import SmartDineSettings, get_settings
from smartdine.logging import logger
from smartdine.services.exceptions import CapabilityUnavailable, RecognitionError


class Recognizer(Protocol):
    lang: str
    interim_results: bool
    max_alternatives: int
    on_result: Callable[[str], None] | None
    on_error: Callable[[str], None] | None
    on_end: Callable[[], None] | None

    def start(self) -> None: ...

    def stop(self) -> None: ...


class SpeechCapability(Protocol):
    def create_recognizer(self) -> Recognizer: ...


class CaptureState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    COMPLETED = "completed"
    FAILED = "failed"


class CaptureHandle:
    """One recognition pass. Exactly one terminal outcome is kept."""

    def __init__(self, owner: "VoiceCapture", recognizer: Recognizer) -> None:
        self._owner = owner
        self._recognizer = recognizer
        self._future: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()

    @property
    def done(self) -> bool:
        return self._future.done()

    async def result(self) -> str | None:
        """Transcript, or ``None`` when the capture ended without one.

        Raises ``RecognitionError`` when the recogniser reported an error.
        """

        return await self._future

    def stop(self) -> None:
        self._recognizer.stop()

    def _on_result(self, transcript: str) -> None:
        if self._future.done():
            return
        self._future.set_result(transcript)
        self._owner._finish(self, CaptureState.COMPLETED)

    def _on_error(self, reason: str) -> None:
        if self._future.done():
            return
        logger.warning("voice_recognition_error", reason=reason)
        self._future.set_exception(RecognitionError(reason))
        self._owner._finish(self, CaptureState.FAILED)

    def _on_end(self) -> None:
        if not self._future.done():
            self._future.set_result(None)
        self._owner._finish(self, None)


class VoiceCapture:
    def __init__(
        self,
        capability: SpeechCapability | None,
        settings: SmartDineSettings | None = None,
    ) -> None:
        self._capability = capability
        self._settings = settings or get_settings()
        self._state = CaptureState.IDLE
        self._active: CaptureHandle | None = None
        self.last_outcome: CaptureState | None = None

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def supported(self) -> bool:
        return self._capability is not None

    def start(self) -> CaptureHandle:
        """Begin listening. Must be called from a running event loop.

        Raises ``CapabilityUnavailable`` without a speech capability and
        ``RecognitionError`` when the recogniser refuses to start.
        """

        if self._capability is None:
            raise CapabilityUnavailable("speech recognition capability is not available")

        recognizer = self._capability.create_recognizer()
        recognizer.lang = self._settings.voice.language
        recognizer.interim_results = False
        recognizer.max_alternatives = self._settings.voice.max_alternatives

        handle = CaptureHandle(self, recognizer)
        recognizer.on_result = handle._on_result
        recognizer.on_error = handle._on_error
        recognizer.on_end = handle._on_end

        # A newer capture takes over; the old one may still finish on its own.
        self._active = handle
        self._state = CaptureState.LISTENING
        try:
            recognizer.start()
        except Exception as exc:
            self._active = None
            self._state = CaptureState.IDLE
            self.last_outcome = CaptureState.FAILED
            logger.warning("voice_capture_start_failed", error=str(exc))
            raise RecognitionError(f"recogniser failed to start: {exc}") from exc
        logger.info("voice_capture_started", language=recognizer.lang)
        return handle

    def stop(self) -> None:
        if self._active is not None:
            self._active.stop()

    def _finish(self, handle: CaptureHandle, outcome: CaptureState | None) -> None:
        if handle is not self._active:
            return
        if outcome is not None:
            self.last_outcome = outcome
        self._state = CaptureState.IDLE
        self._active = None


__all__ = [
    "CaptureHandle",
    "CaptureState",
    "Recognizer",
    "SpeechCapability",
    "VoiceCapture",
]
