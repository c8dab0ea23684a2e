"""Discord rendering of the IFE control panel."""

import logging

import discord

from .dashboard import SELECT_ID, DashboardView
from .errors import NoActiveTrack, NotConnected, PlaybackError, StreamCommandFailed, UnknownTrack
from .i18n import t
from .playback import PlaybackController

logger = logging.getLogger(__name__)

DASHBOARD_COLOR = 0x4B3F72


def build_dashboard_embed(view: DashboardView) -> discord.Embed:
    """Build the status embed for a dashboard view."""
    embed = discord.Embed(
        title=view.heading,
        description=f"🎵 **{view.title}**\n_{view.description}_",
        color=DASHBOARD_COLOR,
    )
    embed.set_footer(text=view.footer)
    return embed


def playback_error_message(error: PlaybackError) -> str:
    """Map a playback failure to the ephemeral reply shown to the user."""
    if isinstance(error, NotConnected):
        return t("error.not_connected")
    if isinstance(error, NoActiveTrack):
        return t("error.no_active_track")
    if isinstance(error, UnknownTrack):
        return t("error.unknown_track", track_id=error.track_id)
    if isinstance(error, StreamCommandFailed):
        return t("error.stream_command_failed")
    return t("error.unexpected")


class IFEControlPanel(discord.ui.View):
    """Persistent select menu and buttons driving the playback controller."""

    def __init__(self, controller: PlaybackController):
        super().__init__(timeout=None)
        self.controller = controller
        self._build(controller.render_status())

    def _build(self, view: DashboardView) -> None:
        select = discord.ui.Select(
            custom_id=SELECT_ID,
            placeholder=view.placeholder,
            options=[
                discord.SelectOption(
                    label=option.label,
                    description=option.description,
                    value=option.value,
                    default=option.selected,
                )
                for option in view.options
            ],
            row=0,
        )
        select.callback = self.on_select

        toggle = discord.ui.Button(
            custom_id=view.toggle.custom_id,
            label=view.toggle.label,
            emoji=view.toggle.emoji,
            style=discord.ButtonStyle.primary,
            row=1,
        )
        toggle.callback = self.on_toggle

        stop = discord.ui.Button(
            custom_id=view.stop.custom_id,
            label=view.stop.label,
            emoji=view.stop.emoji,
            style=discord.ButtonStyle.danger,
            row=1,
        )
        stop.callback = self.on_stop

        self.select = select
        self.toggle = toggle
        self.stop_button = stop
        for item in (select, toggle, stop):
            self.add_item(item)

    def render(self) -> tuple[discord.Embed, "IFEControlPanel"]:
        """Render the embed and a fresh panel for the current state."""
        panel = IFEControlPanel(self.controller)
        return build_dashboard_embed(self.controller.render_status()), panel

    async def _refresh(self, interaction: discord.Interaction) -> None:
        embed, panel = self.render()
        await interaction.response.edit_message(embed=embed, view=panel)

    async def _reject(self, interaction: discord.Interaction, error: PlaybackError) -> None:
        await interaction.response.send_message(playback_error_message(error), ephemeral=True)

    async def on_select(self, interaction: discord.Interaction) -> None:
        values = (interaction.data or {}).get("values") or []
        if not values:
            await interaction.response.send_message(t("error.unexpected"), ephemeral=True)
            return
        try:
            self.controller.select_track(values[0])
        except PlaybackError as e:
            await self._reject(interaction, e)
            return
        await self._refresh(interaction)

    async def on_toggle(self, interaction: discord.Interaction) -> None:
        try:
            self.controller.toggle_pause()
        except PlaybackError as e:
            await self._reject(interaction, e)
            return
        await self._refresh(interaction)

    async def on_stop(self, interaction: discord.Interaction) -> None:
        try:
            self.controller.stop()
        except PlaybackError as e:
            await self._reject(interaction, e)
            return
        await self._refresh(interaction)

    async def on_error(
        self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item
    ) -> None:
        logger.error(t("log.interaction_error", error=error), exc_info=error)
        if not interaction.response.is_done():
            await interaction.response.send_message(t("error.unexpected"), ephemeral=True)


async def send_dashboard(channel: discord.abc.Messageable, controller: PlaybackController) -> discord.Message:
    """Post a new control panel in ``channel``."""
    panel = IFEControlPanel(controller)
    message = await channel.send(embed=build_dashboard_embed(controller.render_status()), view=panel)
    logger.info(t("log.dashboard_sent", channel=getattr(channel, "name", channel)))
    return message
