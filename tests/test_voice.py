"""Unit tests for the voice session manager."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from cabinbot.errors import ConnectionFailed, InvalidChannel, NoActiveTrack
from cabinbot.i18n import t
from cabinbot.playback import PlaybackController, PlaybackState
from cabinbot.sink import VoiceClientSink
from cabinbot.track import Track, TrackCatalog
from cabinbot.voice import SessionStatus, VoiceSession

GUILD_ID = 12345
CHANNEL_ID = 67890


def http_error(cls: type[discord.HTTPException], status: int, message: str) -> discord.HTTPException:
    """Build a discord.py HTTP exception without a real response."""
    return cls(MagicMock(status=status, reason=message), message)


def make_voice_client() -> MagicMock:
    voice_client = MagicMock()
    voice_client.is_connected.return_value = True
    voice_client.disconnect = AsyncMock()
    return voice_client


def make_channel(voice_client: MagicMock, suppressed: bool = False) -> MagicMock:
    channel = MagicMock(spec=discord.StageChannel)
    channel.name = "IFE Stage"
    channel.connect = AsyncMock(return_value=voice_client)
    channel.guild = MagicMock()
    channel.guild.me.voice.suppress = suppressed
    channel.guild.me.edit = AsyncMock()
    return channel


def make_client(channel: object) -> MagicMock:
    guild = MagicMock()
    guild.get_channel.return_value = channel
    client = MagicMock()
    client.get_guild.return_value = guild
    return client


class TestVoiceSession:
    """Tests for VoiceSession.connect and friends."""

    def test_initial_state(self) -> None:
        """Test a new session is disconnected."""
        session = VoiceSession(MagicMock(), VoiceClientSink())

        assert session.status is SessionStatus.DISCONNECTED
        assert session.is_connected() is False
        assert session.voice_client is None

    @pytest.mark.asyncio
    async def test_connect_success(self) -> None:
        """Test a successful connect binds the sink and reports connected."""
        voice_client = make_voice_client()
        channel = make_channel(voice_client)
        sink = VoiceClientSink()
        session = VoiceSession(make_client(channel), sink, timeout=5.0)

        result = await session.connect(GUILD_ID, CHANNEL_ID)

        assert result is voice_client
        assert session.is_connected() is True
        assert session.guild_id == GUILD_ID
        assert session.channel_id == CHANNEL_ID
        assert sink.is_bound is True
        channel.connect.assert_awaited_once_with(timeout=5.0, self_deaf=True)

    @pytest.mark.asyncio
    async def test_connect_voice_channel(self) -> None:
        """Test plain voice channels are accepted too."""
        voice_client = make_voice_client()
        channel = MagicMock(spec=discord.VoiceChannel)
        channel.name = "Cabin"
        channel.connect = AsyncMock(return_value=voice_client)
        channel.guild = MagicMock()
        channel.guild.me.voice = None
        session = VoiceSession(make_client(channel), VoiceClientSink())

        await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.is_connected() is True

    @pytest.mark.asyncio
    async def test_missing_ids(self) -> None:
        """Test empty ids are rejected before any lookup."""
        client = MagicMock()
        session = VoiceSession(client, VoiceClientSink())

        with pytest.raises(InvalidChannel):
            await session.connect(0, CHANNEL_ID)
        with pytest.raises(InvalidChannel):
            await session.connect(GUILD_ID, None)  # type: ignore[arg-type]

        client.get_guild.assert_not_called()
        assert session.status is SessionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_text_channel_rejected(self) -> None:
        """Test a non-voice channel fails with InvalidChannel."""
        channel = MagicMock(spec=discord.TextChannel)
        session = VoiceSession(make_client(channel), VoiceClientSink())

        with pytest.raises(InvalidChannel):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.status is SessionStatus.FAILED
        assert session.is_connected() is False

    @pytest.mark.asyncio
    async def test_channel_not_found(self) -> None:
        """Test a channel missing from cache and API fails with InvalidChannel."""
        client = make_client(None)
        guild = client.get_guild.return_value
        guild.fetch_channel = AsyncMock(side_effect=http_error(discord.NotFound, 404, "Unknown Channel"))
        session = VoiceSession(client, VoiceClientSink())

        with pytest.raises(InvalidChannel):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.status is SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_guild_fetched_when_not_cached(self) -> None:
        """Test the guild is fetched from the API when not cached."""
        voice_client = make_voice_client()
        channel = make_channel(voice_client)
        guild = MagicMock()
        guild.get_channel.return_value = channel
        client = MagicMock()
        client.get_guild.return_value = None
        client.fetch_guild = AsyncMock(return_value=guild)
        session = VoiceSession(client, VoiceClientSink())

        await session.connect(GUILD_ID, CHANNEL_ID)

        client.fetch_guild.assert_awaited_once_with(GUILD_ID)
        assert session.is_connected() is True

    @pytest.mark.asyncio
    async def test_connect_timeout(self) -> None:
        """Test a transport timeout fails fast with ConnectionFailed."""
        channel = make_channel(make_voice_client())
        channel.connect = AsyncMock(side_effect=asyncio.TimeoutError())
        sink = VoiceClientSink()
        session = VoiceSession(make_client(channel), sink)

        with pytest.raises(ConnectionFailed):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.status is SessionStatus.FAILED
        assert sink.is_bound is False

    @pytest.mark.asyncio
    async def test_connect_client_error(self) -> None:
        """Test a discord.py error during connect becomes ConnectionFailed."""
        channel = make_channel(make_voice_client())
        channel.connect = AsyncMock(side_effect=discord.ClientException("Already connected to a voice channel."))
        session = VoiceSession(make_client(channel), VoiceClientSink())

        with pytest.raises(ConnectionFailed):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.status is SessionStatus.FAILED

    @pytest.mark.asyncio
    async def test_unsuppress_on_stage(self) -> None:
        """Test the bot asks to speak when suppressed on a stage."""
        channel = make_channel(make_voice_client(), suppressed=True)
        session = VoiceSession(make_client(channel), VoiceClientSink())

        await session.connect(GUILD_ID, CHANNEL_ID)

        channel.guild.me.edit.assert_awaited_once_with(suppress=False)

    @pytest.mark.asyncio
    async def test_not_suppressed_skips_edit(self) -> None:
        """Test no edit is made when the bot can already speak."""
        channel = make_channel(make_voice_client(), suppressed=False)
        session = VoiceSession(make_client(channel), VoiceClientSink())

        await session.connect(GUILD_ID, CHANNEL_ID)

        channel.guild.me.edit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsuppress_failure_is_not_fatal(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a failed unsuppress is logged and the session stays connected."""
        channel = make_channel(make_voice_client(), suppressed=True)
        channel.guild.me.edit = AsyncMock(side_effect=http_error(discord.Forbidden, 403, "Missing Permissions"))
        session = VoiceSession(make_client(channel), VoiceClientSink())

        with caplog.at_level("WARNING", logger="cabinbot.voice"):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.is_connected() is True
        assert "Could not unsuppress" in caplog.text

    @pytest.mark.asyncio
    async def test_reconnect_releases_previous_client(self) -> None:
        """Test connecting again disconnects the old client first."""
        first = make_voice_client()
        second = make_voice_client()
        channel = make_channel(first)
        channel.connect = AsyncMock(side_effect=[first, second])
        sink = VoiceClientSink()
        session = VoiceSession(make_client(channel), sink)

        await session.connect(GUILD_ID, CHANNEL_ID)
        await session.connect(GUILD_ID, CHANNEL_ID)

        first.disconnect.assert_awaited_once_with(force=True)
        second.disconnect.assert_not_awaited()
        assert session.voice_client is second
        assert session.is_connected() is True

    @pytest.mark.asyncio
    async def test_disconnect(self) -> None:
        """Test disconnect releases the client and unbinds the sink."""
        voice_client = make_voice_client()
        sink = VoiceClientSink()
        session = VoiceSession(make_client(make_channel(voice_client)), sink)
        await session.connect(GUILD_ID, CHANNEL_ID)

        await session.disconnect()

        voice_client.disconnect.assert_awaited_once_with(force=True)
        assert session.status is SessionStatus.DISCONNECTED
        assert session.voice_client is None
        assert sink.is_bound is False

    @pytest.mark.asyncio
    async def test_disconnect_when_not_connected(self) -> None:
        """Test disconnect is safe without a connection."""
        session = VoiceSession(MagicMock(), VoiceClientSink())

        await session.disconnect()

        assert session.status is SessionStatus.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disconnect_forces_half_open_client(self) -> None:
        """Test a client that reports disconnected is still force-disconnected."""
        voice_client = make_voice_client()
        session = VoiceSession(make_client(make_channel(voice_client)), VoiceClientSink())
        await session.connect(GUILD_ID, CHANNEL_ID)
        voice_client.is_connected.return_value = False

        await session.disconnect()

        voice_client.disconnect.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_on_release_called_once_per_client(self) -> None:
        """Test the release hook fires for a held client only."""
        on_release = MagicMock()
        session = VoiceSession(
            make_client(make_channel(make_voice_client())), VoiceClientSink(), on_release=on_release
        )

        await session.disconnect()
        on_release.assert_not_called()

        await session.connect(GUILD_ID, CHANNEL_ID)
        await session.disconnect()
        on_release.assert_called_once_with()


class TestReconnectWithPlayback:
    """Tests for reconnecting while the controller has a track selected."""

    def make_controller(self, channel: MagicMock) -> tuple[PlaybackController, VoiceSession]:
        catalog = TrackCatalog([Track("a", "Track A", "First track.", "/audio/a.mp3")])
        sink = VoiceClientSink(audio_factory=MagicMock())
        session = VoiceSession(make_client(channel), sink)
        controller = PlaybackController(catalog, sink, session)
        session.on_release = controller.handle_release
        return controller, session

    @pytest.mark.asyncio
    async def test_reconnect_clears_playing_track(self) -> None:
        """Test the dashboard goes idle when the playing client is replaced."""
        first = make_voice_client()
        second = make_voice_client()
        channel = make_channel(first)
        channel.connect = AsyncMock(side_effect=[first, second])
        controller, session = self.make_controller(channel)
        await session.connect(GUILD_ID, CHANNEL_ID)
        controller.select_track("a")

        await session.connect(GUILD_ID, CHANNEL_ID)

        assert controller.state == PlaybackState()
        second.pause.assert_not_called()
        with pytest.raises(NoActiveTrack):
            controller.toggle_pause()
        second.pause.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_reconnect_leaves_idle(self) -> None:
        """Test a failed reconnect does not leave a stale track behind."""
        voice_client = make_voice_client()
        channel = make_channel(voice_client)
        channel.connect = AsyncMock(side_effect=[voice_client, asyncio.TimeoutError()])
        controller, session = self.make_controller(channel)
        await session.connect(GUILD_ID, CHANNEL_ID)
        controller.select_track("a")

        with pytest.raises(ConnectionFailed):
            await session.connect(GUILD_ID, CHANNEL_ID)

        assert session.status is SessionStatus.FAILED
        assert controller.state == PlaybackState()
        assert controller.render_status().title == t("dashboard.idle_title")
