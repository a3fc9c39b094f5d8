#!/usr/bin/env python3
"""
Terminal client for exercising the Sentient meditation API.

Features:
    * Check in with a mood and optional note (/entries).
    * Pick one of the reachable destination moods (/moods/destinations).
    * Prepare the meditation: script, narration and bundle hand-off.
    * Play the session with the playback engine and record completion.
    * Show profile statistics (/profile/stats).

Set API_BASE_URL and API_TOKEN (a bearer token from the auth provider).
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from sentient.playback import (
    InMemoryBundleStore,
    IntervalClock,
    MeditationPreparer,
    PlaybackEngine,
    PlaybackState,
    TrackedAudioPlayer,
    to_css_hsl,
)
from sentient.playback.gateways import GatewayError
from sentient.playback.http_gateway import SentientApiClient

DEFAULT_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
DEFAULT_TOKEN = os.getenv("API_TOKEN")


class ConsoleNavigator:
    """Records where the client would navigate next."""

    def __init__(self) -> None:
        self.target: Optional[str] = None
        self.requested = asyncio.Event()
        self.arrived = asyncio.Event()

    def navigate(self, target: str, *, delay: float = 0.0) -> None:
        self.requested.set()
        print(f"\n-> {target}" + (f" in {delay:g}s" if delay else ""))
        if delay:
            asyncio.get_running_loop().call_later(delay, self._arrive, target)
        else:
            self._arrive(target)

    def _arrive(self, target: str) -> None:
        self.target = target
        self.arrived.set()


async def ask(prompt: str) -> str:
    return (await run_in_threadpool(input, prompt)).strip()


async def read_command(
    prompt: str, interrupted: asyncio.Event
) -> tuple[Optional[str], Optional[asyncio.Future]]:
    """Wait for a typed command or for ``interrupted``, whichever comes first.

    When interrupted, the unanswered prompt is returned so the caller can
    wait for it later; a blocked ``input()`` cannot be cancelled.
    """

    answer = asyncio.ensure_future(ask(prompt))
    stop = asyncio.ensure_future(interrupted.wait())
    await asyncio.wait({answer, stop}, return_when=asyncio.FIRST_COMPLETED)
    if answer.done():
        stop.cancel()
        return answer.result().lower(), None
    return None, answer


async def choose(prompt: str, options: list[str]) -> str:
    for number, option in enumerate(options, start=1):
        print(f"  {number}. {option}")
    while True:
        answer = await ask(prompt)
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1]
        if answer.lower() in options:
            return answer.lower()
        print("Pick one of the numbers above.")


def print_progress(percent: int, step: str) -> None:
    bar = "#" * (percent // 5)
    print(f"[{bar:<20}] {percent:3d}% {step}")


def print_phase(engine: PlaybackEngine) -> None:
    phase = engine.current_phase
    if phase is None:
        return
    print(
        f"\nPhase {engine.phase_index + 1} of {len(engine.phases)}: {phase.phase}"
        f"  ({to_css_hsl(engine.background)})"
    )
    print(phase.text)


async def play(client: SentientApiClient, entry_id: str, bundles: InMemoryBundleStore) -> None:
    navigator = ConsoleNavigator()
    engine = PlaybackEngine(
        entry_id,
        entries=client,
        bundles=bundles,
        narration=client,
        clock=IntervalClock(),
        player=TrackedAudioPlayer(),
        navigator=navigator,
        recorder=client,
    )
    if await engine.initialize() is not PlaybackState.IDLE:
        return

    print("\nCommands: [p]lay/pause, [s]kip, [e]nd, [q]uit")
    shown = -1
    unanswered: Optional[asyncio.Future] = None
    try:
        while engine.state in (PlaybackState.IDLE, PlaybackState.PLAYING):
            if shown != engine.phase_index:
                print_phase(engine)
                shown = engine.phase_index
            prompt = f"{engine.state.value} {engine.total_progress_percent:5.1f}% > "
            command, unanswered = await read_command(prompt, navigator.requested)
            if command is None:
                break
            if command.startswith("p"):
                engine.toggle_play_pause()
            elif command.startswith("s"):
                await engine.skip_to_next_phase()
            elif command.startswith("e"):
                await engine.end_session()
            elif command.startswith("q"):
                break
    finally:
        engine.teardown()

    if engine.state is PlaybackState.COMPLETE:
        print(f"\nBeautiful work. You meditated for {engine.total_elapsed} seconds.")
        if unanswered is not None:
            print("Press Enter to continue.")
            await unanswered
        await navigator.arrived.wait()


async def run_wizard(base_url: str, token: Optional[str]) -> None:
    client = SentientApiClient(base_url, token)
    bundles = InMemoryBundleStore()
    try:
        moods = await client.list_check_in_moods()
        print("How are you feeling right now?")
        mood = await choose("Mood: ", [item["id"] for item in moods])
        note = await ask("Anything on your mind? (optional) ") or None
        entry = await client.create_entry(mood, note)

        destinations = await client.destinations(entry.checked_in_mood)
        print("\nWhere would you like to go?")
        destination = await choose("Destination: ", destinations)
        await client.set_destination(entry.id, destination)

        print()
        preparer = MeditationPreparer(
            entry.id,
            entries=client,
            scripts=client,
            narration=client,
            bundles=bundles,
            navigator=ConsoleNavigator(),
            player=TrackedAudioPlayer(),
            on_progress=print_progress,
        )
        if await preparer.prepare() is None:
            print(preparer.error or "Preparation did not finish.")
            return

        await play(client, entry.id, bundles)

        stats = await client.profile_stats()
        print(
            f"\nSessions: {stats['completed_sessions']}/{stats['total_sessions']} completed,"
            f" {stats['total_minutes']} minutes in total."
        )
    except GatewayError as exc:
        print(f"Request failed: {exc}")
    finally:
        client.close()


def main() -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s | %(name)s | %(message)s")
    if not DEFAULT_TOKEN:
        print("API_TOKEN is not set; authenticated endpoints will reject requests.")
    try:
        asyncio.run(run_wizard(DEFAULT_BASE_URL, DEFAULT_TOKEN))
    except (KeyboardInterrupt, EOFError):
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
