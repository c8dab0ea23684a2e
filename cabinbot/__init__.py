"""cabinbot - Discord bot for in-flight audio, verification and flight intake."""

from .playback import PlaybackAction, PlaybackController, PlaybackMode, PlaybackState
from .track import Track, TrackCatalog

__all__ = [
    "PlaybackAction",
    "PlaybackController",
    "PlaybackMode",
    "PlaybackState",
    "Track",
    "TrackCatalog",
]
