"""Recommendation search: validation, request, location stamping and hand-off."""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

import httpx

from smartdine.config import SmartDineSettings
from smartdine.domain.models import RecommendationResult, SearchQuery
from smartdine.logging import logger
from smartdine.services.base import BaseHttpService
from smartdine.services.exceptions import EmptyQuery, MissingLocation, RecommendationRequestError

PhaseListener = Callable[[bool], None]


class Navigator(Protocol):
    async def show_results(self, result: RecommendationResult) -> None: ...


class SearchRequestCoordinator(BaseHttpService):
    """Runs one search attempt from validation through navigation hand-off.

    While the request is in flight a "processing" phase is reported through
    ``on_phase``. The phase lasts at least ``processing_floor_seconds`` from
    its start on success, so an instant backend does not flash the progress
    view; a slow backend is not delayed further. Failures leave the phase at
    once.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        navigator: Navigator,
        settings: SmartDineSettings | None = None,
    ) -> None:
        super().__init__(http_client, settings=settings)
        self._navigator = navigator

    @staticmethod
    def validate(query: SearchQuery, user_location: str | None) -> None:
        if not query.is_valid:
            raise EmptyQuery("query is empty")
        if not user_location:
            raise MissingLocation("no city selected")

    async def submit(
        self,
        query: SearchQuery,
        user_location: str | None,
        *,
        on_phase: PhaseListener | None = None,
    ) -> RecommendationResult:
        self.validate(query, user_location)
        assert user_location is not None

        floor = self._settings.search.processing_floor_seconds
        if on_phase is not None:
            on_phase(True)
        floor_task = asyncio.create_task(asyncio.sleep(floor))
        handed_off = False
        try:
            result = (await self._fetch(query.text)).stamped(user_location)
            await floor_task

            logger.info(
                "search_completed",
                best_match=result.best_match.name,
                alternatives=len(result.alternatives),
                location=user_location,
            )
            await self._navigator.show_results(result)
            handed_off = True
        finally:
            # Every exit short of a completed hand-off leaves the phase.
            if not handed_off:
                floor_task.cancel()
                if on_phase is not None:
                    on_phase(False)
        return result

    async def _fetch(self, text: str) -> RecommendationResult:
        try:
            response = await self._client.post(
                self._settings.api_url("rag/recommend"),
                json={"query": text},
                timeout=self._settings.api.request_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
            return RecommendationResult.from_backend(payload)
        except httpx.HTTPError as exc:
            logger.warning("search_request_failed", error=self.describe_http_error(exc))
            raise RecommendationRequestError(
                f"Recommendation request failed: {self.describe_http_error(exc)}"
            ) from exc
        except ValueError as exc:
            logger.warning("search_response_invalid", error=str(exc))
            raise RecommendationRequestError("Recommendation response is malformed.") from exc


__all__ = ["Navigator", "PhaseListener", "SearchRequestCoordinator"]
