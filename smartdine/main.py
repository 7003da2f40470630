"""Application entrypoint: a line-oriented search session in the terminal."""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable

import httpx

from smartdine.config import get_settings
from smartdine.db.session import Database
from smartdine.domain.models import RecommendationResult, SessionMode
from smartdine.i18n import I18nService
from smartdine.logging import bind_session, configure_logging, logger
from smartdine.services.exceptions import InvalidTransition
from smartdine.services.location import LocationResolver
from smartdine.services.profile_store import SqlProfileStore
from smartdine.services.recommendations import SearchRequestCoordinator
from smartdine.services.voice import VoiceCapture
from smartdine.session.controller import SearchSessionController

LineReader = Callable[[], Awaitable[str | None]]
Writer = Callable[[str], None]

HELP_TEXT = (
    "Type your craving, then /search.\n"
    "/city  change city (then type to look up places, /pick N to choose, /cancel)\n"
    "/speak voice input    /quit exit"
)


class ConsoleNavigator:
    def __init__(self, i18n: I18nService, write: Writer = print) -> None:
        self._i18n = i18n
        self._write = write

    async def show_results(self, result: RecommendationResult) -> None:
        best = result.best_match
        self._write(self._i18n.gettext("result.best_match", name=best.name, location=best.location))
        for item in result.alternatives:
            self._write(self._i18n.gettext("result.alternative", name=item.name, location=item.location))
        if result.explanation:
            self._write(result.explanation)


async def _stdin_line() -> str | None:
    try:
        return await asyncio.to_thread(input, "> ")
    except EOFError:
        return None


async def run_session(
    controller: SearchSessionController,
    i18n: I18nService,
    *,
    read_line: LineReader = _stdin_line,
    write: Writer = print,
) -> None:
    """Drive ``controller`` from text commands until a search hands off or input ends."""

    def banner() -> None:
        city = controller.profile.location
        write(i18n.gettext("location.current", city=city) if city else i18n.gettext("location.unset"))

    write(HELP_TEXT)
    banner()
    shown_error: str | None = None
    while not controller.handed_off:
        line = await read_line()
        if line is None:
            break
        line = line.strip()
        command, _, argument = line.partition(" ")
        try:
            if command == "/quit":
                break
            elif command == "/city":
                controller.begin_location_change()
            elif command == "/cancel":
                controller.cancel_location_change()
                banner()
            elif command == "/pick":
                if not argument.isdigit():
                    write("Usage: /pick N")
                    continue
                index = int(argument) - 1
                suggestions = controller.state.suggestions
                if not 0 <= index < len(suggestions):
                    write("No such suggestion.")
                    continue
                await controller.select_suggestion(suggestions[index])
                banner()
            elif command == "/speak":
                write(i18n.gettext("voice.listening"))
                await controller.start_listening()
                write(f"Craving: {controller.state.query.text}")
            elif command == "/search":
                write(i18n.gettext("search.processing"))
                await controller.submit()
            elif controller.mode is SessionMode.CHOOSING_LOCATION:
                places = await controller.update_location_input(line)
                for number, place in enumerate(places, start=1):
                    write(f"{number}. {place.display_name}")
            else:
                controller.edit_query(line)
        except InvalidTransition as exc:
            write(str(exc))

        error = controller.state.error_message
        if error and error != shown_error:
            write(error)
        shown_error = error


async def main() -> None:
    configure_logging(json=False)
    settings = get_settings()
    i18n = I18nService(default_locale=settings.default_language)

    database = Database(settings=settings)
    await database.create_schema()
    store = SqlProfileStore(database)

    try:
        async with httpx.AsyncClient() as client:
            controller = SearchSessionController(
                user_id=settings.user_id,
                store=store,
                locations=LocationResolver(client, store, settings=settings),
                # Terminals have no speech recogniser.
                voice=VoiceCapture(None, settings=settings),
                coordinator=SearchRequestCoordinator(
                    client, ConsoleNavigator(i18n), settings=settings
                ),
                i18n=i18n,
                settings=settings,
            )
            bind_session(settings.user_id, uuid.uuid4().hex)
            await controller.load()
            logger.info("session_starting", environment=settings.environment)
            await run_session(controller, i18n)
    finally:
        await database.dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
