"""Client-side preparation and playback of a meditation session."""

from .audio import AudioPlaybackError, TrackedAudioHandle, TrackedAudioPlayer
from .bundle import BundleStore, InMemoryBundleStore, SessionBundle
from .clock import IntervalClock, VirtualClock
from .colors import background_color, interpolate_color, to_css_hsl
from .engine import PlaybackEngine, PlaybackState
from .gateways import EntrySnapshot, GatewayError
from .preparation import MeditationPreparer, PreparationError

__all__ = [
    "AudioPlaybackError",
    "BundleStore",
    "EntrySnapshot",
    "GatewayError",
    "InMemoryBundleStore",
    "IntervalClock",
    "MeditationPreparer",
    "PlaybackEngine",
    "PlaybackState",
    "PreparationError",
    "SessionBundle",
    "TrackedAudioHandle",
    "TrackedAudioPlayer",
    "VirtualClock",
    "background_color",
    "interpolate_color",
    "to_css_hsl",
]
