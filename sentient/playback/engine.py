"""Playback state machine for a prepared meditation.

States move ``INITIALIZING -> IDLE <-> PLAYING -> COMPLETE``; ``ERRORED`` is
reachable from ``INITIALIZING`` only. ``tick`` is the single transition
that moves time forward, so the engine can be driven by a wall-clock
``IntervalClock`` or a ``VirtualClock`` in tests.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional

from sentient.domain.emotions import HSLColor, ambient_track_for
from sentient.domain.errors import NotFoundRedirect
from sentient.services.response_contract import MeditationPhase, phase_duration

from .audio import AudioHandle, AudioPlaybackError, AudioPlayer
from .bundle import BundleStore, SessionBundle
from .clock import Clock
from .colors import background_color
from .gateways import (
    CHECK_IN_PATH,
    PROFILE_PATH,
    CompletionRecorder,
    EntryGateway,
    EntrySnapshot,
    GatewayError,
    NarrationGateway,
    Navigator,
    destination_path,
    ready_path,
)

logger = logging.getLogger(__name__)

COMPLETION_REDIRECT_DELAY = 2.0
NARRATION_VOLUME = 0.9
AMBIENCE_VOLUME = 0.2


class PlaybackState(str, enum.Enum):
    INITIALIZING = "initializing"
    IDLE = "idle"
    PLAYING = "playing"
    COMPLETE = "complete"
    ERRORED = "errored"


class PlaybackEngine:
    """Drive six timed phases with ambience and per-phase narration."""

    def __init__(
        self,
        entry_id: Optional[str],
        *,
        entries: EntryGateway,
        bundles: BundleStore,
        narration: NarrationGateway,
        clock: Clock,
        player: AudioPlayer,
        navigator: Navigator,
        recorder: Optional[CompletionRecorder] = None,
    ) -> None:
        self.entry_id = entry_id or ""
        self._entries = entries
        self._bundles = bundles
        self._narration_gateway = narration
        self._clock = clock
        self._player = player
        self._navigator = navigator
        self._recorder = recorder

        self.state = PlaybackState.INITIALIZING
        self.entry: Optional[EntrySnapshot] = None
        self.phases: tuple[MeditationPhase, ...] = ()
        self.narration_refs: tuple[str, ...] = ()
        self.phase_index = 0
        self.time_in_phase = 0
        self.total_elapsed = 0
        self.redirect_target: Optional[str] = None

        self._init_task: Optional[asyncio.Task] = None
        self._ambience: Optional[AudioHandle] = None
        self._narration: Optional[AudioHandle] = None
        self._completed = False
        self._torn_down = False

    @property
    def current_phase(self) -> Optional[MeditationPhase]:
        if 0 <= self.phase_index < len(self.phases):
            return self.phases[self.phase_index]
        return None

    @property
    def current_duration(self) -> int:
        phase = self.current_phase
        return phase_duration(phase.theme if phase else None)

    @property
    def phase_progress_percent(self) -> float:
        return self.time_in_phase / self.current_duration * 100

    @property
    def total_progress_percent(self) -> float:
        if not self.phases:
            return 0.0
        fraction = self.time_in_phase / self.current_duration
        return (self.phase_index + fraction) / len(self.phases) * 100

    @property
    def background(self) -> HSLColor:
        entry = self.entry
        return background_color(
            entry.checked_in_mood if entry else None,
            entry.destination_mood if entry else None,
            self.phase_index,
            len(self.phases),
        )

    @property
    def narration_handle(self) -> Optional[AudioHandle]:
        return self._narration

    async def initialize(self) -> PlaybackState:
        """Load entry and bundle once; concurrent callers share the first run."""

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        await self._init_task
        return self.state

    async def _initialize(self) -> None:
        try:
            entry = await self._require_entry()
            bundle = await self._load_bundle(entry)
        except NotFoundRedirect as exc:
            self._fail(exc)
            return
        if self._torn_down:
            return

        self.entry = entry
        self.phases = bundle.phases
        self.narration_refs = bundle.narration_refs
        self._load_ambience(entry.destination_mood)
        self.state = PlaybackState.IDLE
        logger.info("Playback ready entry=%s phases=%s", self.entry_id, len(self.phases))

    async def _require_entry(self) -> EntrySnapshot:
        if not self.entry_id:
            raise NotFoundRedirect("No mood entry selected", target=CHECK_IN_PATH)
        try:
            entry = await self._entries.fetch_entry(self.entry_id)
        except GatewayError as exc:
            raise NotFoundRedirect(
                f"Mood entry could not be loaded: {exc}",
                target=ready_path(self.entry_id),
            ) from exc
        if entry is None:
            raise NotFoundRedirect("Mood entry not found", target=CHECK_IN_PATH)
        if not entry.destination_mood:
            raise NotFoundRedirect(
                "Destination mood not chosen",
                target=destination_path(self.entry_id),
            )
        return entry

    async def _load_bundle(self, entry: EntrySnapshot) -> SessionBundle:
        bundle = self._bundles.get()
        if bundle is not None and bundle.entry_id == self.entry_id:
            return bundle

        # Narration is rebuilt from the stored script when only the URLs are unusable.
        phases = self._bundles.read_script(self.entry_id)
        if phases is None:
            raise NotFoundRedirect("Session bundle missing", target=ready_path(self.entry_id))

        logger.warning("Session bundle incomplete for entry=%s; re-synthesising narration", entry.id)
        try:
            urls = await self._narration_gateway.synthesize_batch(
                self.entry_id, [phase.text for phase in phases]
            )
        except GatewayError as exc:
            raise NotFoundRedirect(
                f"Narration could not be rebuilt: {exc}",
                target=ready_path(self.entry_id),
            ) from exc
        if len(urls) != len(phases):
            raise NotFoundRedirect("Narration not fully prepared", target=ready_path(self.entry_id))
        return self._bundles.put(self.entry_id, phases, urls)

    def _fail(self, exc: NotFoundRedirect) -> None:
        self.state = PlaybackState.ERRORED
        self.redirect_target = exc.target
        logger.warning("Playback unavailable entry=%s: %s", self.entry_id or "-", exc.message)
        if not self._torn_down:
            self._navigator.navigate(exc.target)

    def _load_ambience(self, destination: Optional[str]) -> None:
        try:
            self._ambience = self._player.load(
                f"/music/{ambient_track_for(destination)}",
                volume=AMBIENCE_VOLUME,
                loop=True,
            )
        except Exception as exc:
            logger.warning("Ambient track unavailable: %s", exc)
            self._ambience = None

    async def tick(self, elapsed_seconds: int = 1) -> None:
        """Advance time by whole seconds while playing."""

        for _ in range(max(0, int(elapsed_seconds))):
            if self.state is not PlaybackState.PLAYING or self._torn_down:
                return
            self.total_elapsed += 1
            self.time_in_phase += 1
            if self.time_in_phase < self.current_duration:
                continue
            if self.phase_index < len(self.phases) - 1:
                self._advance()
            else:
                self.time_in_phase = self.current_duration
                await self._complete()

    def toggle_play_pause(self) -> PlaybackState:
        if self._torn_down:
            return self.state
        if self.state is PlaybackState.PLAYING:
            self.state = PlaybackState.IDLE
            self._clock.stop()
            self._pause(self._ambience)
            self._pause(self._narration)
        elif self.state is PlaybackState.IDLE:
            self.state = PlaybackState.PLAYING
            self._clock.start(self.tick)
            self._play(self._ambience)
            if self._narration is None:
                self._narration = self._load_narration(self.phase_index)
            self._play(self._narration)
        return self.state

    async def skip_to_next_phase(self) -> None:
        if self._torn_down or self.state not in (PlaybackState.IDLE, PlaybackState.PLAYING):
            return
        self._pause(self._narration)
        if self.phase_index < len(self.phases) - 1:
            self._advance()
        else:
            await self._complete()

    async def end_session(self) -> None:
        if self._torn_down or self.state not in (PlaybackState.IDLE, PlaybackState.PLAYING):
            return
        await self._complete()

    def teardown(self) -> None:
        """Stop timers and audio; later handlers become no-ops."""

        self._torn_down = True
        self._clock.stop()
        self._pause(self._ambience)
        self._pause(self._narration)

    def _advance(self) -> None:
        self.phase_index += 1
        self.time_in_phase = 0
        self._switch_narration()

    def _switch_narration(self) -> None:
        previous, self._narration = self._narration, None
        self._pause(previous)
        self._narration = self._load_narration(self.phase_index)
        if self.state is PlaybackState.PLAYING:
            self._play(self._narration)

    def _load_narration(self, index: int) -> Optional[AudioHandle]:
        if not 0 <= index < len(self.narration_refs):
            return None
        return self._player.load(self.narration_refs[index], volume=NARRATION_VOLUME)

    async def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        self.state = PlaybackState.COMPLETE
        self._clock.stop()
        self._pause(self._ambience)
        previous, self._narration = self._narration, None
        self._pause(previous)
        logger.info(
            "Meditation complete entry=%s elapsed=%ss phase=%s/%s",
            self.entry_id,
            self.total_elapsed,
            self.phase_index + 1,
            len(self.phases),
        )

        if self._recorder is not None:
            try:
                await self._recorder.record_completion(self.entry_id, self.total_elapsed)
            except Exception as exc:
                logger.warning("Completion record not saved for entry=%s: %s", self.entry_id, exc)

        if not self._torn_down:
            self._navigator.navigate(PROFILE_PATH, delay=COMPLETION_REDIRECT_DELAY)

    @staticmethod
    def _play(handle: Optional[AudioHandle]) -> None:
        if handle is None:
            return
        try:
            handle.play()
        except AudioPlaybackError as exc:
            logger.warning("Playback failed for %s: %s", handle.source, exc)

    @staticmethod
    def _pause(handle: Optional[AudioHandle]) -> None:
        if handle is not None:
            handle.pause()


__all__ = [
    "AMBIENCE_VOLUME",
    "COMPLETION_REDIRECT_DELAY",
    "NARRATION_VOLUME",
    "PlaybackEngine",
    "PlaybackState",
]
