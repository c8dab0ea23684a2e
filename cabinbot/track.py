"""Track records and the fixed IFE catalog."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .errors import CatalogError, UnknownTrack
from .i18n import t


@dataclass(frozen=True)
class Track:
    """A playable audio resource in the catalog."""

    id: str
    label: str
    description: str
    source: str  # Path to the local audio file


class TrackCatalog:
    """Ordered, read-only set of tracks.

    Insertion order is display order. Ids are validated once at
    construction and the catalog never changes afterwards.
    """

    def __init__(self, tracks: Iterable[Track]):
        """Build and validate the catalog.

        Args:
            tracks: Tracks in display order.

        Raises:
            CatalogError: If an id is empty or appears twice.
        """
        self._tracks: dict[str, Track] = {}
        for track in tracks:
            if not track.id:
                raise CatalogError(t("error.empty_track_id"))
            if track.id in self._tracks:
                raise CatalogError(t("error.duplicate_track_id", track_id=track.id))
            self._tracks[track.id] = track

    def get(self, track_id: str) -> Track:
        """Look up a track by id.

        Raises:
            UnknownTrack: If the id is not in the catalog.
        """
        try:
            return self._tracks[track_id]
        except KeyError:
            raise UnknownTrack(track_id) from None

    @property
    def ids(self) -> list[str]:
        return list(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks.values())

    def __len__(self) -> int:
        return len(self._tracks)


# (id, label, description, file name)
IFE_TRACKS = [
    ("new_boarding", "Boarding – New Music", "Emirates new boarding music.", "emirates new boarding music.mp3"),
    ("old_boarding", "Boarding – Old Music", "Emirates old boarding music.", "emirates old boarding music.mp3"),
    ("safety_generic", "Safety – Generic", "Generic Emirates safety video music.", "emirates safety video music.mp3"),
    ("safety_a350", "Safety – A350", "Emirates A350 safety video audio.", "emirates a350 safety video.mp3"),
    ("safety_a380", "Safety – A380", "Emirates A380 safety video audio.", "emirates a380 safety video.mp3"),
    ("safety_b777", "Safety – Boeing 777", "Emirates Boeing 777 safety video audio.", "emirates boeing 777 safety video.mp3"),
    ("welcome_ice", "Welcome Onboard – ICE", "Standard ICE welcome onboard announcement.", "welcome onboard ice.mp3"),
    ("welcome_ice_old", "Welcome Onboard – ICE (Old)", "Legacy ICE welcome onboard announcement.", "welcome onboard ice old.mp3"),
    ("welcome_dubai", "Welcome to Dubai", "Arrival welcome to Dubai.", "welcome to dubai.mp3"),
    ("i_want_to_fly_world", "I Want to Fly the World", "“I want to fly the world” music.", "i want to fly the world music.mp3"),
]


def default_catalog(audio_dir: str | Path) -> TrackCatalog:
    """Build the in-flight entertainment catalog.

    Args:
        audio_dir: Directory holding the audio files.

    Returns:
        The catalog with sources resolved against ``audio_dir``.
    """
    audio_dir = Path(audio_dir)
    return TrackCatalog(
        Track(id=track_id, label=label, description=description, source=str(audio_dir / file_name))
        for track_id, label, description, file_name in IFE_TRACKS
    )
