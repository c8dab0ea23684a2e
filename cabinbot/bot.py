"""Discord bot wiring IFE playback, verification and intake together."""

import logging

import discord
from discord.ext import commands

from .config import Settings
from .errors import ConnectError
from .i18n import t
from .intake import IntakeService
from .playback import PlaybackController
from .sink import VoiceClientSink
from .track import TrackCatalog, default_catalog
from .ui import IFEControlPanel, send_dashboard
from .verification import VerifyPanel, build_verify_embed
from .voice import VoiceSession

logger = logging.getLogger(__name__)


class CabinBot(commands.Bot):
    """Discord bot for the virtual airline community."""

    def __init__(self, settings: Settings, catalog: TrackCatalog | None = None):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(command_prefix="!", intents=intents, help_command=None)
        self.settings = settings
        self.sink = VoiceClientSink()
        self.voice_session = VoiceSession(self, self.sink, timeout=settings.voice_connect_timeout)
        self.controller = PlaybackController(
            catalog or default_catalog(settings.audio_dir), self.sink, self.voice_session
        )
        self.sink.on_idle = self.controller.handle_idle
        self.voice_session.on_release = self.controller.handle_release
        self.intake = IntakeService(self, settings)
        self._voice_attempted = False

    async def setup_hook(self) -> None:
        """Register the cog and the persistent panels."""
        await self.add_cog(CabinCog(self))
        # Panels posted before a restart keep routing to these views
        self.add_view(IFEControlPanel(self.controller))
        self.add_view(VerifyPanel(self.settings))
        logger.info(t("log.views_registered"))

    async def on_ready(self) -> None:
        logger.info(t("log.logged_in", user=self.user))
        # on_ready fires again after gateway resumes; only auto-connect once
        if not self._voice_attempted:
            self._voice_attempted = True
            await self.connect_voice()

    async def connect_voice(self) -> bool:
        """Join the configured stage channel.

        Returns:
            True if the session is connected.
        """
        if not self.settings.voice_configured:
            logger.info(t("log.voice_not_configured"))
            return False

        try:
            await self.voice_session.connect(self.settings.guild_id, self.settings.stage_channel_id)
        except ConnectError as e:
            logger.error(t("log.connect_error", error=e))
            return False
        return True


class CabinCog(commands.Cog):
    """Prefix text commands."""

    def __init__(self, bot: CabinBot):
        self.bot = bot

    async def cog_check(self, ctx: commands.Context) -> bool:
        if ctx.guild is None:
            raise commands.NoPrivateMessage()
        return True

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.MissingPermissions):
            await ctx.reply(t("command.admin_only"))
            return
        if isinstance(error, commands.NoPrivateMessage):
            return
        logger.error(t("log.command_error", command=ctx.command, error=error), exc_info=error)

    @commands.command(name="ping")
    async def ping(self, ctx: commands.Context) -> None:
        """Health check."""
        await ctx.reply(t("command.ping"))

    @commands.command(name="egr")
    async def egr(self, ctx: commands.Context) -> None:
        """Organization information."""
        await ctx.reply(t("command.egr"))

    @commands.command(name="setupife")
    @commands.has_permissions(administrator=True)
    async def setup_ife(self, ctx: commands.Context) -> None:
        """Post the IFE control panel in the control channel."""
        control_channel_id = self.bot.settings.control_channel_id
        if control_channel_id is None:
            await ctx.reply(t("command.control_channel_not_configured"))
            return

        if ctx.channel.id != control_channel_id:
            await ctx.reply(t("command.wrong_control_channel", channel_id=control_channel_id))
            return

        await send_dashboard(ctx.channel, self.bot.controller)

    @commands.command(name="setupverify")
    @commands.has_permissions(administrator=True)
    async def setup_verify(self, ctx: commands.Context) -> None:
        """Post the verification panel in the unified server."""
        settings = self.bot.settings
        if not settings.verification_configured:
            await ctx.reply(t("command.unified_not_configured"))
            return

        if ctx.guild.id != settings.unified_guild_id:
            await ctx.reply(t("command.wrong_unified_guild"))
            return

        await ctx.send(embed=build_verify_embed(), view=VerifyPanel(settings))
        logger.info(t("log.verify_panel_sent", channel=ctx.channel))
