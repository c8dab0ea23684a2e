"""Verification panel and role grant for the unified server."""

import logging
from enum import Enum

import discord

from .config import Settings
from .errors import RoleGrantFailed
from .i18n import t

logger = logging.getLogger(__name__)

VERIFY_BUTTON_ID = "unified_verify_button"
VERIFY_COLOR = 0xD81E05


class VerifyOutcome(Enum):
    NOT_CONFIGURED = "not_configured"
    WRONG_GUILD = "wrong_guild"
    ALREADY_VERIFIED = "already_verified"
    VERIFIED = "verified"


OUTCOME_MESSAGES = {
    VerifyOutcome.NOT_CONFIGURED: "verify.not_configured",
    VerifyOutcome.WRONG_GUILD: "verify.wrong_guild",
    VerifyOutcome.ALREADY_VERIFIED: "verify.already_verified",
    VerifyOutcome.VERIFIED: "verify.verified",
}


def build_verify_embed() -> discord.Embed:
    embed = discord.Embed(
        title=t("verify.title"),
        description=t("verify.description"),
        color=VERIFY_COLOR,
    )
    embed.set_footer(text=t("verify.footer"))
    return embed


async def verify_member(member: discord.Member, guild_id: int, settings: Settings) -> VerifyOutcome:
    """Grant the verified role to a member of the unified guild.

    Args:
        member: The member who pressed the button.
        guild_id: The guild the button was pressed in.
        settings: Runtime settings holding the unified guild and role.

    Returns:
        What happened, for the reply.

    Raises:
        RoleGrantFailed: If Discord refused to add the role.
    """
    if not settings.verification_configured:
        return VerifyOutcome.NOT_CONFIGURED
    if guild_id != settings.unified_guild_id:
        return VerifyOutcome.WRONG_GUILD

    role_id = settings.unified_verified_role_id
    if member.get_role(role_id) is not None:
        return VerifyOutcome.ALREADY_VERIFIED

    try:
        await member.add_roles(discord.Object(id=role_id), reason="Unified verification")
    except discord.HTTPException as e:
        logger.error(t("log.role_grant_error", error=e))
        raise RoleGrantFailed(str(e)) from e

    logger.info(t("log.role_granted", member=member))
    return VerifyOutcome.VERIFIED


class VerifyPanel(discord.ui.View):
    """Persistent view with the Verify button and a support link."""

    def __init__(self, settings: Settings):
        super().__init__(timeout=None)
        self.settings = settings

        verify = discord.ui.Button(
            custom_id=VERIFY_BUTTON_ID,
            label=t("verify.button"),
            emoji="✅",
            style=discord.ButtonStyle.success,
        )
        verify.callback = self.on_verify
        self.add_item(verify)
        self.add_item(discord.ui.Button(label=t("verify.support_button"), url=settings.support_url))

    async def on_verify(self, interaction: discord.Interaction) -> None:
        if not self.settings.verification_configured:
            await interaction.response.send_message(t("verify.not_configured"), ephemeral=True)
            return

        if interaction.guild is None:
            await interaction.response.send_message(t("verify.server_only"), ephemeral=True)
            return

        member = interaction.user
        if not isinstance(member, discord.Member):
            member = await interaction.guild.fetch_member(interaction.user.id)

        try:
            outcome = await verify_member(member, interaction.guild.id, self.settings)
        except RoleGrantFailed:
            await interaction.response.send_message(t("verify.grant_failed"), ephemeral=True)
            return

        await interaction.response.send_message(t(OUTCOME_MESSAGES[outcome]), ephemeral=True)

    async def on_error(
        self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item
    ) -> None:
        logger.error(t("log.interaction_error", error=error), exc_info=error)
        if not interaction.response.is_done():
            await interaction.response.send_message(t("error.unexpected"), ephemeral=True)
