"""Message catalog for session prompts and user-visible errors.

Catalogs are JSON files named after a language (``en.json``). Region tags
such as ``en-IN`` (the voice language) fall back to their base language and
then to the default catalog.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from smartdine.services.exceptions import ServiceError

DEFAULT_LOCALES_PATH = Path(__file__).with_name("locales")


@lru_cache(maxsize=16)
def _read_catalog(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


class I18nService:
    def __init__(self, *, locales_path: str | Path | None = None, default_locale: str = "en") -> None:
        self.locales_path = Path(locales_path or DEFAULT_LOCALES_PATH)
        self.default_locale = default_locale.lower()

    def candidates(self, locale: str | None) -> list[str]:
        """Catalog names to try for ``locale``, most specific first."""

        chain: list[str] = []
        tag = (locale or self.default_locale).replace("_", "-").lower()
        for name in (tag, tag.split("-", 1)[0], self.default_locale):
            if name and name not in chain:
                chain.append(name)
        return chain

    def lookup(self, key: str, *, locale: str | None = None) -> str | None:
        for name in self.candidates(locale):
            text = _read_catalog(self.locales_path / f"{name}.json").get(key)
            if text is not None:
                return text
        return None

    def gettext(self, key: str, *, locale: str | None = None, **kwargs: Any) -> str:
        text = self.lookup(key, locale=locale)
        if text is None:
            text = key
        return text.format(**kwargs) if kwargs else text

    def error_text(self, error: ServiceError, *, locale: str | None = None) -> str:
        """Text for the session error slot.

        Errors whose key has no catalog entry render the generic message
        rather than a raw key.
        """

        text = self.lookup(error.message_key, locale=locale)
        if text is None:
            text = self.gettext(ServiceError.message_key, locale=locale)
        return text


__all__ = ["I18nService"]
