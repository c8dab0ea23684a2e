"""Playback controller - state machine for the single IFE audio stream."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from .dashboard import DashboardView, build_dashboard
from .errors import NoActiveTrack, NotConnected
from .i18n import t
from .sink import StreamSink
from .track import Track, TrackCatalog
from .voice import VoiceSession

logger = logging.getLogger(__name__)


class PlaybackMode(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackAction(Enum):
    """What ``toggle_pause`` did."""

    PAUSED = "paused"
    RESUMED = "resumed"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the controller state."""

    active_track_id: str | None = None
    paused: bool = False

    def __post_init__(self) -> None:
        if self.paused and self.active_track_id is None:
            raise ValueError("paused requires an active track")

    @property
    def mode(self) -> PlaybackMode:
        if self.active_track_id is None:
            return PlaybackMode.IDLE
        return PlaybackMode.PAUSED if self.paused else PlaybackMode.PLAYING


class PlaybackController:
    """Plays at most one catalog track at a time on the session's sink.

    State changes only after the sink accepted the command, so a failed
    command leaves the previous state in place. Mutations are serialized
    with a lock because discord.py reports playback end from its audio
    thread.
    """

    def __init__(self, catalog: TrackCatalog, sink: StreamSink, session: VoiceSession):
        """Initialize the controller.

        Args:
            catalog: The fixed track catalog.
            sink: Output the tracks are played on.
            session: Voice session that must be connected for playback.
        """
        self._catalog = catalog
        self._sink = sink
        self._session = session
        self._state = PlaybackState()
        self._lock = threading.Lock()

    @property
    def catalog(self) -> TrackCatalog:
        return self._catalog

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current(self) -> Track | None:
        """The selected track, playing or paused."""
        track_id = self._state.active_track_id
        return self._catalog.get(track_id) if track_id is not None else None

    def _require_connected(self) -> None:
        if not self._session.is_connected():
            raise NotConnected(t("error.not_connected"))

    def select_track(self, track_id: str) -> Track:
        """Play a catalog track from the beginning.

        Selecting the active track restarts it. Whatever was playing is
        superseded by the new track.

        Args:
            track_id: Id of the track to play.

        Returns:
            The track now playing.

        Raises:
            UnknownTrack: If the id is not in the catalog.
            NotConnected: If the voice session is not connected.
            StreamCommandFailed: If the sink rejected the command.
        """
        track = self._catalog.get(track_id)
        with self._lock:
            self._require_connected()
            self._sink.play(track.source)
            self._state = PlaybackState(active_track_id=track.id, paused=False)

        logger.info(t("log.now_playing", label=track.label, source=track.source))
        return track

    def toggle_pause(self) -> PlaybackAction:
        """Pause a playing track or resume a paused one.

        Raises:
            NotConnected: If the voice session is not connected.
            NoActiveTrack: If nothing is selected.
            StreamCommandFailed: If the sink rejected the command.
        """
        with self._lock:
            self._require_connected()
            state = self._state
            if state.active_track_id is None:
                raise NoActiveTrack(t("error.no_active_track"))

            if state.paused:
                self._sink.resume()
                action = PlaybackAction.RESUMED
            else:
                self._sink.pause()
                action = PlaybackAction.PAUSED
            self._state = PlaybackState(active_track_id=state.active_track_id, paused=not state.paused)

        label = self._catalog.get(state.active_track_id).label
        logger.info(t("log.paused" if action is PlaybackAction.PAUSED else "log.resumed", label=label))
        return action

    def stop(self) -> None:
        """Halt playback and return to idle. Idempotent.

        Raises:
            NotConnected: If the voice session is not connected.
            StreamCommandFailed: If the sink rejected the command.
        """
        with self._lock:
            self._require_connected()
            self._sink.stop()
            self._state = PlaybackState()

        logger.info(t("log.stopped"))

    def render_status(self) -> DashboardView:
        """Render the current state as a dashboard view. No side effects."""
        state = self._state
        return build_dashboard(self._catalog, state.active_track_id, state.paused)

    def handle_release(self) -> None:
        """Session callback for a dropped voice client.

        The player went away with the client, so nothing is playing any more.
        """
        with self._lock:
            previous = self._state
            self._state = PlaybackState()

        if previous.active_track_id is not None:
            logger.info(t("log.playback_reset", label=self._catalog.get(previous.active_track_id).label))

    def handle_idle(self, source: str, error: Exception | None) -> None:
        """Sink callback for a resource that stopped playing.

        Only logs; a finished track stays selected on the dashboard.
        """
        if error is not None:
            return
        for track in self._catalog:
            if track.source == source:
                logger.info(t("log.finished", label=track.label))
                return
