"""Stream sink protocol and the discord.py voice client implementation."""

import logging
from functools import partial
from typing import Callable, Protocol

import discord

from .errors import StreamCommandFailed
from .i18n import t

logger = logging.getLogger(__name__)

FFMPEG_OPTIONS = {
    "options": "-vn",
}

IdleCallback = Callable[[str, Exception | None], None]


class StreamSink(Protocol):
    """Single output that plays one resource at a time."""

    def play(self, source: str) -> None:
        """Start playing ``source``, superseding whatever is playing."""
        ...

    def pause(self) -> None:
        ...

    def resume(self) -> None:
        ...

    def stop(self) -> None:
        ...


class VoiceClientSink:
    """Stream sink backed by a bound ``discord.VoiceClient``.

    The voice session binds its client on connect and unbinds it on
    disconnect. Commands issued while nothing is bound, or rejected by
    discord.py, raise ``StreamCommandFailed``.
    """

    def __init__(
        self,
        on_idle: IdleCallback | None = None,
        audio_factory: Callable[..., discord.AudioSource] | None = None,
    ):
        """Initialize the sink.

        Args:
            on_idle: Called from the audio thread with the source and the
                playback error (or None) whenever a resource stops.
            audio_factory: Builds an audio source from a file path.
                Defaults to ``discord.FFmpegPCMAudio``.
        """
        self.on_idle = on_idle
        self._audio_factory = audio_factory or partial(discord.FFmpegPCMAudio, **FFMPEG_OPTIONS)
        self._voice_client: discord.VoiceClient | None = None

    @property
    def is_bound(self) -> bool:
        return self._voice_client is not None

    def bind(self, voice_client: discord.VoiceClient) -> None:
        self._voice_client = voice_client

    def unbind(self) -> None:
        self._voice_client = None

    def _require_client(self) -> discord.VoiceClient:
        if self._voice_client is None:
            raise StreamCommandFailed(t("error.no_voice_client"))
        return self._voice_client

    def _after(self, source: str, error: Exception | None) -> None:
        if error:
            logger.error(t("log.player_error", error=error))
        if self.on_idle is not None:
            self.on_idle(source, error)

    def play(self, source: str) -> None:
        voice_client = self._require_client()
        try:
            # VoiceClient.play refuses to start while another source is active
            if voice_client.is_playing() or voice_client.is_paused():
                voice_client.stop()
            voice_client.play(self._audio_factory(source), after=partial(self._after, source))
        except (discord.ClientException, OSError) as e:
            raise StreamCommandFailed(str(e)) from e

    def pause(self) -> None:
        self._require_client().pause()

    def resume(self) -> None:
        self._require_client().resume()

    def stop(self) -> None:
        self._require_client().stop()
