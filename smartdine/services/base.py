"""Shared plumbing for services that talk to HTTP collaborators."""

from __future__ import annotations

import httpx

from smartdine.config import SmartDineSettings, get_settings


class BaseHttpService:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: SmartDineSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or get_settings()

    @staticmethod
    def describe_http_error(exc: httpx.HTTPError) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            detail = response.text[:500] if response is not None else str(exc)
            status_code = response.status_code if response is not None else "unknown"
            return f"({status_code}) {detail}"
        return str(exc)


__all__ = ["BaseHttpService"]
