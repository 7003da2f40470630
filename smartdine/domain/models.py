"""Pydantic models shared across the session, services and persistence."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UserProfile(BaseModel):
    """Persisted user record; fields other than ``location`` ride along untouched."""

    model_config = ConfigDict(extra="allow")

    id: int
    location: str | None = None


class PlaceAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    city: str | None = None
    town: str | None = None
    state: str | None = None
    county: str | None = None
    village: str | None = None


class PlaceSuggestion(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | str = Field(alias="place_id")
    display_name: str = ""
    address: PlaceAddress = Field(default_factory=PlaceAddress)


class SearchQuery(BaseModel):
    text: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.text.strip())


class Restaurant(BaseModel):
    """Restaurant as returned by the backend; unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    name: str
    location: str | None = None


class RecommendationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    best_match: Restaurant = Field(alias="bestMatch")
    alternatives: list[Restaurant] = Field(default_factory=list)
    explanation: str = ""

    @classmethod
    def from_backend(cls, payload: Any) -> "RecommendationResult":
        """Build a result from the backend's ``bestRestaurant`` envelope."""

        if not isinstance(payload, dict):
            raise ValueError("recommendation payload must be an object")
        best = payload.get("bestRestaurant")
        if not best:
            raise ValueError("recommendation payload has no bestRestaurant")
        return cls(
            best_match=best,
            alternatives=payload.get("alternatives") or [],
            explanation=payload.get("explanation") or "",
        )

    def stamped(self, location: str) -> "RecommendationResult":
        """Copy with ``location`` overwritten on every restaurant."""

        return RecommendationResult(
            best_match=self.best_match.model_copy(update={"location": location}),
            alternatives=[
                item.model_copy(update={"location": location}) for item in self.alternatives
            ],
            explanation=self.explanation,
        )

    def handoff_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SessionMode(str, Enum):
    IDLE = "idle"
    CHOOSING_LOCATION = "choosing_location"
    LISTENING = "listening"
    SEARCHING = "searching"


class SessionState(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    mode: SessionMode = SessionMode.IDLE
    query: SearchQuery = Field(default_factory=SearchQuery)
    location_input: str = ""
    suggestions: list[PlaceSuggestion] = Field(default_factory=list)
    error_message: str | None = None

    @model_validator(mode="after")
    def _suggestions_only_while_choosing(self) -> "SessionState":
        if self.suggestions and self.mode is not SessionMode.CHOOSING_LOCATION:
            raise ValueError("suggestions are only kept while choosing a location")
        return self


__all__ = [
    "PlaceAddress",
    "PlaceSuggestion",
    "RecommendationResult",
    "Restaurant",
    "SearchQuery",
    "SessionMode",
    "SessionState",
    "UserProfile",
]
