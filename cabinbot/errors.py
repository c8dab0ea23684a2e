"""Exception hierarchy for cabinbot.

Every operation reports failure through one of these named exceptions so
the Discord layer can turn it into a user-facing message and leave the
bot in its previous state.
"""


class CabinBotError(Exception):
    """Base exception for all cabinbot errors."""


class ConfigurationError(CabinBotError):
    """Raised when environment configuration is invalid."""


class CatalogError(CabinBotError):
    """Raised when a track catalog fails validation."""


class PlaybackError(CabinBotError):
    """Base exception for playback controller failures."""


class NotConnected(PlaybackError):
    """Raised when no voice session is connected."""


class UnknownTrack(PlaybackError):
    """Raised when a track id is not in the catalog."""

    def __init__(self, track_id: str):
        super().__init__(track_id)
        self.track_id = track_id


class NoActiveTrack(PlaybackError):
    """Raised when pausing or resuming with nothing selected."""


class StreamCommandFailed(PlaybackError):
    """Raised when the stream sink rejects a command."""


class ConnectError(CabinBotError):
    """Base exception for voice session establishment failures."""


class InvalidChannel(ConnectError):
    """Raised when the target channel is missing or not voice-capable."""


class ConnectionFailed(ConnectError):
    """Raised when the voice transport fails or times out."""


class RoleGrantFailed(CabinBotError):
    """Raised when the verification role cannot be added to a member."""


class IntakeError(CabinBotError):
    """Base exception for intake requests.

    ``status`` is the HTTP status an API layer should answer with.
    """

    status = 500


class IntakeValidationError(IntakeError):
    """Raised when a submission is missing required fields."""

    status = 400


class DeliveryFailed(IntakeError):
    """Raised when a direct message could not be delivered."""


class BotNotReady(IntakeError):
    """Raised when the gateway client is not ready yet."""

    status = 503


class IntakeNotConfigured(IntakeError):
    """Raised when the unified guild is not configured."""


class EventCreationFailed(IntakeError):
    """Raised when Discord rejects a scheduled event."""
