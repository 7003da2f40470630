"""Top-level state machine for one search session.

Modes are exclusive: ``IDLE`` (editing the craving, location banner shown),
``CHOOSING_LOCATION`` (suggestion list visible), ``LISTENING`` (voice capture
owns the screen) and ``SEARCHING`` (processing phase). A successful search
hands control to navigation and the session accepts no further actions.
"""

from __future__ import annotations

from smartdine.config import SmartDineSettings, get_settings
from smartdine.domain.models import (
    PlaceSuggestion,
    RecommendationResult,
    SearchQuery,
    SessionMode,
    SessionState,
    UserProfile,
)
from smartdine.i18n import I18nService
from smartdine.logging import logger
from smartdine.services.exceptions import (
    GeocodingError,
    InvalidTransition,
    ProfileUpdateError,
    RecognitionError,
    RecommendationRequestError,
    SearchValidationError,
    ServiceError,
    VoiceCaptureError,
)
from smartdine.services.location import LocationResolver
from smartdine.services.profile_store import ProfileStore
from smartdine.services.recommendations import SearchRequestCoordinator
from smartdine.services.voice import VoiceCapture


class SearchSessionController:
    def __init__(
        self,
        *,
        user_id: int,
        store: ProfileStore,
        locations: LocationResolver,
        voice: VoiceCapture,
        coordinator: SearchRequestCoordinator,
        i18n: I18nService | None = None,
        settings: SmartDineSettings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.user_id = user_id
        self.state = SessionState()
        self.profile = UserProfile(id=user_id)
        self.handed_off = False
        self._store = store
        self._locations = locations
        self._voice = voice
        self._coordinator = coordinator
        self._i18n = i18n or I18nService(default_locale=self.settings.default_language)
        # Generation counters; a finished task whose counter moved on is stale.
        self._suggest_generation = 0
        self._capture_generation = 0
        self._submitting = False

    @property
    def mode(self) -> SessionMode:
        return self.state.mode

    async def load(self) -> UserProfile:
        self.profile = await self._store.get(self.user_id) or UserProfile(id=self.user_id)
        logger.info("session_loaded", user_id=self.user_id, location=self.profile.location)
        return self.profile

    # -- location --------------------------------------------------------

    def begin_location_change(self) -> None:
        self._require(SessionMode.IDLE)
        self.state.location_input = self.profile.location or ""
        self.state.mode = SessionMode.CHOOSING_LOCATION

    def cancel_location_change(self) -> None:
        self._require(SessionMode.CHOOSING_LOCATION)
        self._suggest_generation += 1
        self.state.suggestions = []
        self.state.mode = SessionMode.IDLE

    async def update_location_input(self, text: str) -> list[PlaceSuggestion]:
        self._require(SessionMode.CHOOSING_LOCATION)
        self.state.location_input = text
        self._suggest_generation += 1
        generation = self._suggest_generation

        if not text.strip():
            self.state.suggestions = []
            return []

        try:
            places = await self._locations.suggest(text)
        except GeocodingError as exc:
            logger.warning("location_suggest_failed", query=text, error=str(exc))
            places = []

        if generation != self._suggest_generation or self.state.mode is not SessionMode.CHOOSING_LOCATION:
            logger.debug("stale_suggestions_discarded", query=text)
            return self.state.suggestions
        self.state.suggestions = places
        return places

    async def select_suggestion(self, suggestion: PlaceSuggestion) -> str:
        self._require(SessionMode.CHOOSING_LOCATION)
        city = self._locations.resolve_city(suggestion)
        self._suggest_generation += 1
        self.state.suggestions = []
        self.state.location_input = city
        self.state.mode = SessionMode.IDLE

        try:
            self.profile = await self._locations.commit(self.user_id, city)
        except ProfileUpdateError as exc:
            if self.settings.profile_update_errors == "surface":
                self._show_error(exc)
            else:
                logger.info("profile_update_error_ignored", city=city)
        return city

    # -- query -----------------------------------------------------------

    def edit_query(self, text: str) -> None:
        self._require(SessionMode.IDLE, SessionMode.CHOOSING_LOCATION)
        self.state.query = SearchQuery(text=text)

    async def start_listening(self) -> str | None:
        self._require(SessionMode.IDLE)
        try:
            handle = self._voice.start()
        except VoiceCaptureError as exc:
            self._show_error(exc)
            return None

        self._capture_generation += 1
        generation = self._capture_generation
        self.state.error_message = None
        self.state.mode = SessionMode.LISTENING

        transcript: str | None = None
        try:
            transcript = await handle.result()
        except RecognitionError as exc:
            if generation == self._capture_generation:
                self._show_error(exc)
            return None
        finally:
            if generation == self._capture_generation and self.state.mode is SessionMode.LISTENING:
                self.state.mode = SessionMode.IDLE

        if transcript is not None and generation == self._capture_generation:
            self.state.query = SearchQuery(text=transcript)
            self.state.error_message = None
        return transcript

    def stop_listening(self) -> None:
        self._require(SessionMode.LISTENING)
        self._voice.stop()

    # -- search ----------------------------------------------------------

    async def submit(self) -> RecommendationResult | None:
        self._require(SessionMode.IDLE)
        self._submitting = True
        self.state.error_message = None
        try:
            self.profile = await self._store.get(self.user_id) or self.profile
            result = await self._coordinator.submit(
                self.state.query,
                self.profile.location,
                on_phase=self._on_processing_phase,
            )
        except (SearchValidationError, RecommendationRequestError) as exc:
            self.state.mode = SessionMode.IDLE
            self._show_error(exc)
            return None
        finally:
            self._submitting = False

        self.handed_off = True
        logger.info("session_handed_off", user_id=self.user_id)
        return result

    def _on_processing_phase(self, active: bool) -> None:
        self.state.mode = SessionMode.SEARCHING if active else SessionMode.IDLE

    # -- helpers ---------------------------------------------------------

    def _show_error(self, error: ServiceError) -> None:
        self.state.error_message = self._i18n.error_text(error, locale=self.settings.default_language)

    def _require(self, *modes: SessionMode) -> None:
        if self.handed_off:
            raise InvalidTransition("session already handed off to results")
        if self._submitting:
            raise InvalidTransition("a search is already in progress")
        if self.state.mode not in modes:
            raise InvalidTransition(f"action not allowed while {self.state.mode.value}")


__all__ = ["SearchSessionController"]
