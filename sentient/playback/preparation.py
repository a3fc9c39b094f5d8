"""Client-side preparation: entry lookup, script, narration and bundle hand-off."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from sentient.domain.emotions import ambient_track_for
from sentient.domain.errors import NotFoundRedirect
from sentient.services.response_contract import PHASE_COUNT

from .audio import AudioPlayer
from .bundle import BundleStore, SessionBundle
from .engine import AMBIENCE_VOLUME
from .gateways import (
    CHECK_IN_PATH,
    EntryGateway,
    EntrySnapshot,
    GatewayError,
    NarrationGateway,
    Navigator,
    ScriptGateway,
    destination_path,
)

logger = logging.getLogger(__name__)

PREPARATION_FAILURE_DELAY = 1.6
FAILURE_MESSAGE = "Something went wrong preparing your meditation. Please try again."

ProgressCallback = Callable[[int, str], None]


class PreparationError(RuntimeError):
    """A preparation step returned something the playback engine cannot use."""


class MeditationPreparer:
    """Prepare one meditation; repeated calls share the first run."""

    def __init__(
        self,
        entry_id: Optional[str],
        *,
        entries: EntryGateway,
        scripts: ScriptGateway,
        narration: NarrationGateway,
        bundles: BundleStore,
        navigator: Navigator,
        player: Optional[AudioPlayer] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.entry_id = entry_id or ""
        self._entries = entries
        self._scripts = scripts
        self._narration = narration
        self._bundles = bundles
        self._navigator = navigator
        self._player = player
        self._on_progress = on_progress

        self.progress = 0
        self.step = "Initializing..."
        self.entry: Optional[EntrySnapshot] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    async def prepare(self) -> Optional[SessionBundle]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._prepare())
        return await self._task

    async def _prepare(self) -> Optional[SessionBundle]:
        try:
            self._report(10, "Fetching your emotional state...")
            entry = await self._require_entry()
            self.entry = entry
            self._report(20, "Mood entry loaded")

            self._report(30, "Generating your personalized meditation...")
            phases = await self._scripts.generate(
                entry.checked_in_mood,
                entry.destination_mood or "",
                entry.note,
            )
            if len(phases) != PHASE_COUNT:
                raise PreparationError(f"Invalid meditation format (need {PHASE_COUNT} phases)")
            self._report(50, "Preparing voice narration...")

            urls = await self._narration.synthesize_batch(
                self.entry_id, [phase.text for phase in phases]
            )
            if len(urls) != len(phases):
                raise PreparationError("Narration not fully prepared")
            self._report(85, "Loading ambient music...")

            self._preload_ambience(entry.destination_mood)
            bundle = self._bundles.put(self.entry_id, phases, urls)
            self._report(100, "Ready!")
            return bundle
        except NotFoundRedirect as exc:
            logger.info("Preparation redirected entry=%s: %s", self.entry_id or "-", exc.message)
            self._navigator.navigate(exc.target)
            return None
        except (GatewayError, PreparationError) as exc:
            logger.error("Preparation failed entry=%s: %s", self.entry_id, exc)
            self.error = FAILURE_MESSAGE
            self._navigator.navigate(
                destination_path(self.entry_id),
                delay=PREPARATION_FAILURE_DELAY,
            )
            return None

    async def _require_entry(self) -> EntrySnapshot:
        if not self.entry_id:
            raise NotFoundRedirect("No mood entry selected", target=CHECK_IN_PATH)
        entry = await self._entries.fetch_entry(self.entry_id)
        if entry is None:
            raise NotFoundRedirect("Mood entry not found", target=CHECK_IN_PATH)
        if not entry.destination_mood:
            raise NotFoundRedirect(
                "Destination mood not chosen",
                target=destination_path(self.entry_id),
            )
        return entry

    def _preload_ambience(self, destination: Optional[str]) -> None:
        if self._player is None:
            return
        try:
            self._player.load(
                f"/music/{ambient_track_for(destination)}",
                volume=AMBIENCE_VOLUME,
                loop=True,
            )
        except Exception as exc:
            logger.warning("Ambient preload skipped: %s", exc)

    def _report(self, percent: int, step: str) -> None:
        self.progress = percent
        self.step = step
        if self._on_progress is not None:
            self._on_progress(percent, step)


__all__ = [
    "FAILURE_MESSAGE",
    "MeditationPreparer",
    "PREPARATION_FAILURE_DELAY",
    "PreparationError",
]
