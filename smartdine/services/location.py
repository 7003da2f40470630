"""Place lookup, city normalisation and profile location updates."""

from __future__ import annotations

from typing import Sequence

import httpx
from pydantic import ValidationError

from smartdine.config import SmartDineSettings
from smartdine.domain.models import PlaceSuggestion, UserProfile
from smartdine.logging import logger
from smartdine.services.base import BaseHttpService
from smartdine.services.exceptions import GeocodingError, ProfileUpdateError
from smartdine.services.profile_store import ProfileStore
from smartdine.utils.retry import retry_async

# Precedence is policy: a town beats the state it sits in.
CITY_FIELDS = ("city", "town", "state", "county", "village")
UNKNOWN_CITY = "Unknown"


class LocationResolver(BaseHttpService):
    """Turns free text into place suggestions and a chosen place into a saved city."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        store: ProfileStore,
        settings: SmartDineSettings | None = None,
    ) -> None:
        super().__init__(http_client, settings=settings)
        self._store = store

    async def suggest(self, text: str) -> list[PlaceSuggestion]:
        query = (text or "").strip()
        if not query:
            return []

        geo = self._settings.geocoding
        params = {
            "format": "json",
            "addressdetails": 1,
            "countrycodes": geo.country_codes,
            "limit": geo.result_limit,
            "q": query,
        }
        try:
            response = await self._client.get(
                f"{str(geo.base_url).rstrip('/')}/search",
                params=params,
                headers={"User-Agent": geo.user_agent},
                timeout=geo.request_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Place lookup failed: {self.describe_http_error(exc)}") from exc
        except ValueError as exc:
            raise GeocodingError("Place lookup returned invalid JSON.") from exc

        if not isinstance(payload, list):
            raise GeocodingError("Place lookup response format is invalid.")
        return self._parse_places(payload)

    @staticmethod
    def resolve_city(suggestion: PlaceSuggestion) -> str:
        address = suggestion.address
        for field in CITY_FIELDS:
            value = getattr(address, field)
            if value:
                return value
        return UNKNOWN_CITY

    async def commit(self, user_id: int, city: str) -> UserProfile:
        """Save ``city`` on the backend, then merge it into the local profile.

        The local profile is only touched once the backend call succeeds.
        """

        url = self._settings.api_url("user/update-location")
        payload = {"id": user_id, "location": city}

        async def _request():
            response = await self._client.post(
                url,
                json=payload,
                timeout=self._settings.api.request_timeout_seconds,
            )
            response.raise_for_status()
            return response

        try:
            await retry_async(
                _request,
                max_attempts=self._settings.api.profile_update_attempts,
                base_delay=0.5,
                retry_on=(httpx.TransportError,),
                logger=logger,
                operation_name="profile_update",
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "location_commit_failed",
                user_id=user_id,
                city=city,
                error=self.describe_http_error(exc),
            )
            raise ProfileUpdateError(
                f"Profile update failed: {self.describe_http_error(exc)}"
            ) from exc

        profile = await self._store.merge(user_id, {"location": city})
        logger.info("location_committed", user_id=user_id, city=city)
        return profile

    @staticmethod
    def _parse_places(records: Sequence[object]) -> list[PlaceSuggestion]:
        places: list[PlaceSuggestion] = []
        for record in records:
            try:
                places.append(PlaceSuggestion.model_validate(record))
            except ValidationError:
                logger.warning("place_record_skipped", record=str(record)[:200])
        return places


__all__ = ["CITY_FIELDS", "LocationResolver", "UNKNOWN_CITY"]
