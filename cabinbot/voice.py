"""Voice session manager for the IFE stage channel."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

import discord

from .errors import ConnectionFailed, InvalidChannel
from .i18n import t
from .sink import VoiceClientSink

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 30.0


class SessionStatus(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class VoiceSession:
    """Owns the single outbound voice connection used for IFE playback.

    A lost connection is not detected here; callers must call
    ``connect`` again. ``on_release`` is called whenever a held voice
    client is let go.
    """

    def __init__(
        self,
        client: discord.Client,
        sink: VoiceClientSink,
        *,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        on_release: Callable[[], None] | None = None,
    ):
        self._client = client
        self._sink = sink
        self._timeout = timeout
        self.on_release = on_release
        self._lock = asyncio.Lock()
        self.guild_id: int | None = None
        self.channel_id: int | None = None
        self.status = SessionStatus.DISCONNECTED
        self.voice_client: discord.VoiceClient | None = None

    def is_connected(self) -> bool:
        return self.status is SessionStatus.CONNECTED

    async def connect(self, guild_id: int, channel_id: int) -> discord.VoiceClient:
        """Join the target stage or voice channel.

        An existing connection is torn down first.

        Args:
            guild_id: The guild holding the channel.
            channel_id: The stage or voice channel to join.

        Returns:
            The connected voice client, also bound to the sink.

        Raises:
            InvalidChannel: If an id is missing, the channel does not exist,
                or it is not a stage/voice channel.
            ConnectionFailed: If the voice transport errors or times out.
        """
        if not guild_id or not channel_id:
            raise InvalidChannel(t("error.missing_ids"))

        async with self._lock:
            if self.voice_client is not None:
                logger.info(t("log.voice_replacing", guild_id=self.guild_id))
                await self._release()

            self.guild_id = guild_id
            self.channel_id = channel_id
            self.status = SessionStatus.CONNECTING

            try:
                channel = await self._resolve_channel(guild_id, channel_id)
                voice_client = await channel.connect(timeout=self._timeout, self_deaf=True)
            except InvalidChannel:
                self.status = SessionStatus.FAILED
                raise
            except asyncio.TimeoutError as e:
                self.status = SessionStatus.FAILED
                raise ConnectionFailed(t("error.connect_timeout", channel_id=channel_id)) from e
            except discord.DiscordException as e:
                self.status = SessionStatus.FAILED
                raise ConnectionFailed(
                    t("error.connect_failed", channel_id=channel_id, error=e)
                ) from e

            self.voice_client = voice_client
            self._sink.bind(voice_client)
            self.status = SessionStatus.CONNECTED
            logger.info(t("log.voice_connected", channel=channel.name))

            await self._unsuppress(channel)
            return voice_client

    async def disconnect(self) -> None:
        """Leave the voice channel. Safe to call when not connected."""
        async with self._lock:
            await self._release()

    async def _release(self) -> None:
        voice_client = self.voice_client
        self.voice_client = None
        self._sink.unbind()
        self.status = SessionStatus.DISCONNECTED
        if voice_client is None:
            return

        if self.on_release is not None:
            self.on_release()
        # force also drops a client stuck in discord.py's own reconnect loop
        await voice_client.disconnect(force=True)
        logger.info(t("log.voice_disconnected", guild_id=self.guild_id))

    async def _resolve_channel(
        self, guild_id: int, channel_id: int
    ) -> discord.VoiceChannel | discord.StageChannel:
        try:
            guild = self._client.get_guild(guild_id) or await self._client.fetch_guild(guild_id)
            channel = guild.get_channel(channel_id) or await guild.fetch_channel(channel_id)
        except discord.NotFound as e:
            raise InvalidChannel(
                t("error.channel_not_found", channel_id=channel_id, guild_id=guild_id)
            ) from e

        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise InvalidChannel(t("error.not_voice_channel", channel_id=channel_id))
        return channel

    async def _unsuppress(self, channel: discord.VoiceChannel | discord.StageChannel) -> None:
        """Ask to speak on a stage. Failure is logged, never raised."""
        try:
            me = channel.guild.me
            if me is not None and me.voice is not None and me.voice.suppress:
                await me.edit(suppress=False)
                logger.info(t("log.voice_unsuppressed"))
        except discord.DiscordException as e:
            logger.warning(t("log.unsuppress_failed", error=e))
