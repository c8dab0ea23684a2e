"""Intake service for booking, check-in and flight submissions.

Submissions arrive as JSON-like mappings from the airline website. Each
one is validated, then turned into a direct message or a guild scheduled
event. Failures raise ``IntakeError`` subclasses carrying the HTTP status
an API layer should answer with.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import discord

from .config import Settings
from .errors import (
    BotNotReady,
    DeliveryFailed,
    EventCreationFailed,
    IntakeNotConfigured,
    IntakeValidationError,
)
from .i18n import t

logger = logging.getLogger(__name__)

INTAKE_COLOR = 0xD81E05
DUBAI_TZ = timezone(timedelta(hours=4), "GST")
CHECKIN_LEAD_TIME = timedelta(minutes=20)
AIRPORT_CODE = re.compile(r"\(([A-Z0-9]{3,4})\)")

BOOKING_REQUIRED = ("bookingRef", "primaryDiscord", "primaryDiscordId")
CHECKIN_REQUIRED = ("bookingRef", "roblox", "discordUser", "discordId")
FLIGHT_REQUIRED = ("date", "flightNumber", "from", "to", "depTime")

Payload = Mapping[str, Any]


@dataclass(frozen=True)
class FlightEvent:
    """Fields of the scheduled event created for a flight."""

    name: str
    start_time: datetime
    end_time: datetime
    location: str
    description: str


def _missing(payload: Payload, required: tuple[str, ...]) -> bool:
    return any(not payload.get(key) for key in required)


def _value(payload: Payload, key: str, default_key: str) -> str:
    return str(payload.get(key) or t(default_key))


def _route(payload: Payload) -> str:
    unknown = t("value.unknown")
    return f"{payload.get('from') or unknown} → {payload.get('to') or unknown}"


def dubai_datetime(date: str, time: str) -> datetime:
    """Parse ``YYYY-MM-DD`` and ``HH:MM`` as Dubai local time (UTC+4).

    Raises:
        IntakeValidationError: If either part does not parse.
    """
    try:
        return datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M").replace(tzinfo=DUBAI_TZ)
    except ValueError:
        raise IntakeValidationError(t("error.invalid_flight_time", value=f"{date} {time}")) from None


def airport_code(place: str) -> str:
    """Return the code in parentheses, e.g. ``Dubai (DXB)`` -> ``DXB``."""
    match = AIRPORT_CODE.search(place)
    return match.group(1) if match else place


def _intake_embed(title: str, description: str, footer: str) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=description,
        color=INTAKE_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.set_footer(text=footer)
    return embed


def build_booking_embed(payload: Payload) -> discord.Embed:
    """Build the booking confirmation sent to the primary contact."""
    embed = _intake_embed(t("booking.title"), t("booking.description"), t("booking.footer"))
    embed.add_field(name=t("booking.field_reference"), value=f"`{payload['bookingRef']}`", inline=True)
    embed.add_field(name=t("booking.field_simulator"), value=_value(payload, "simulator", "value.not_specified"), inline=True)
    embed.add_field(name=t("booking.field_cabin"), value=_value(payload, "cabin", "value.not_specified"), inline=True)
    embed.add_field(name=t("booking.field_route"), value=_route(payload), inline=False)
    embed.add_field(
        name=t("booking.field_preferred"),
        value=f"{_value(payload, 'date', 'value.not_specified')} • {_value(payload, 'timeOfDay', 'value.any')}",
        inline=False,
    )
    embed.add_field(name=t("booking.field_passengers"), value=str(payload.get("paxCount") or 1), inline=True)
    embed.add_field(
        name=t("booking.field_contact"),
        value=t(
            "booking.contact_value",
            discord=payload["primaryDiscord"],
            discord_id=payload["primaryDiscordId"],
        ),
        inline=False,
    )
    return embed


def build_checkin_embed(payload: Payload) -> discord.Embed:
    """Build the check-in confirmation sent to the passenger."""
    embed = _intake_embed(
        t("checkin.title"),
        t("checkin.description", booking_ref=payload["bookingRef"]),
        t("checkin.footer"),
    )
    embed.add_field(name=t("booking.field_reference"), value=f"`{payload['bookingRef']}`", inline=True)
    embed.add_field(name=t("booking.field_simulator"), value=_value(payload, "simulator", "value.not_specified"), inline=True)
    embed.add_field(name=t("booking.field_cabin"), value=_value(payload, "cabin", "value.not_specified"), inline=True)
    embed.add_field(name=t("booking.field_route"), value=_route(payload), inline=False)
    embed.add_field(name=t("checkin.field_flight_date"), value=_value(payload, "date", "value.not_specified"), inline=True)
    embed.add_field(name=t("checkin.field_type"), value=_value(payload, "checkinType", "value.standard"), inline=True)
    embed.add_field(
        name=t("checkin.field_passenger"),
        value=t(
            "checkin.passenger_value",
            roblox=payload["roblox"],
            discord_user=payload["discordUser"],
            discord_id=payload["discordId"],
        ),
        inline=False,
    )
    embed.add_field(
        name=t("checkin.field_preferences"),
        value=t(
            "checkin.preferences_value",
            seat=_value(payload, "seatPreference", "value.any_seat"),
            baggage=_value(payload, "baggage", "value.not_specified"),
        ),
        inline=False,
    )
    return embed


def build_flight_event(payload: Payload) -> FlightEvent:
    """Turn a flight submission into scheduled event fields.

    The event opens with check-in, twenty minutes before departure, and
    ends at departure.

    Raises:
        IntakeValidationError: If a required field is missing or the
            date/time does not parse.
    """
    if _missing(payload, FLIGHT_REQUIRED):
        raise IntakeValidationError(t("error.missing_flight_fields"))

    date = payload["date"]
    departure = dubai_datetime(date, payload["depTime"])
    checkin_opens = departure - CHECKIN_LEAD_TIME
    origin = payload["from"]
    destination = payload["to"]

    lines = [
        t("flight.line_flight", value=payload["flightNumber"]),
        t("flight.line_airline", value=payload.get("airline") or t("flight.default_airline")),
        t("flight.line_route", origin=origin, destination=destination),
        "",
        t("flight.line_departure", time=payload["depTime"], date=date),
        t("flight.line_checkin", time=checkin_opens.strftime("%H:%M")),
        t("flight.line_arrival", time=_value(payload, "arrTime", "value.tba")),
        "",
        t("flight.line_aircraft", value=_value(payload, "aircraft", "value.tba")),
        t("flight.line_simulator", value=_value(payload, "simulator", "value.tba")),
        t("flight.line_gate", value=_value(payload, "gate", "value.tba")),
        "",
        t("flight.line_status", value=_value(payload, "status", "value.scheduled")),
    ]
    if payload.get("remarks"):
        lines += ["", t("flight.line_remarks", value=payload["remarks"])]
    lines += ["", t("flight.disclaimer")]

    return FlightEvent(
        name=f"{airport_code(origin)} → {airport_code(destination)}",
        start_time=checkin_opens,
        end_time=departure,
        location=t("flight.location"),
        description="\n".join(lines),
    )


class IntakeService:
    """Delivers intake submissions through the bot's Discord client."""

    def __init__(self, client: discord.Client, settings: Settings):
        self._client = client
        self._settings = settings

    async def _send_dm(self, user_id: Any, content: str, embed: discord.Embed) -> bool:
        try:
            user = await self._client.fetch_user(int(user_id))
            await user.send(content=content, embed=embed)
        except (discord.DiscordException, ValueError) as e:
            logger.error(t("log.dm_failed", user_id=user_id, error=e))
            return False
        return True

    async def send_booking_receipt(self, payload: Payload) -> None:
        """DM a booking confirmation to the primary contact.

        Raises:
            IntakeValidationError: If a required field is missing.
            DeliveryFailed: If the DM could not be sent.
        """
        if _missing(payload, BOOKING_REQUIRED):
            raise IntakeValidationError(t("error.missing_booking_fields"))

        delivered = await self._send_dm(
            payload["primaryDiscordId"], t("booking.content"), build_booking_embed(payload)
        )
        if not delivered:
            raise DeliveryFailed(t("error.booking_dm_failed"))

    async def send_checkin_confirmation(self, payload: Payload) -> None:
        """DM a check-in confirmation to the passenger.

        Raises:
            IntakeValidationError: If a required field is missing.
            DeliveryFailed: If the DM could not be sent.
        """
        if _missing(payload, CHECKIN_REQUIRED):
            raise IntakeValidationError(t("error.missing_checkin_fields"))

        delivered = await self._send_dm(
            payload["discordId"], t("checkin.content"), build_checkin_embed(payload)
        )
        if not delivered:
            raise DeliveryFailed(t("error.checkin_dm_failed"))

    async def create_flight_event(self, payload: Payload) -> int:
        """Create a guild scheduled event for a flight.

        Returns:
            The id of the created event.

        Raises:
            IntakeValidationError: If the submission is incomplete.
            BotNotReady: If the gateway client is not ready.
            IntakeNotConfigured: If the unified guild is not configured.
            EventCreationFailed: If Discord rejected the event.
        """
        flight = build_flight_event(payload)

        if not self._client.is_ready():
            raise BotNotReady(t("error.bot_not_ready"))

        guild_id = self._settings.unified_guild_id
        if guild_id is None:
            raise IntakeNotConfigured(t("error.unified_guild_not_configured"))

        try:
            guild = self._client.get_guild(guild_id) or await self._client.fetch_guild(guild_id)
            event = await guild.create_scheduled_event(
                name=flight.name,
                start_time=flight.start_time,
                end_time=flight.end_time,
                privacy_level=discord.PrivacyLevel.guild_only,
                entity_type=discord.EntityType.external,
                location=flight.location,
                description=flight.description,
            )
        except discord.DiscordException as e:
            logger.error(t("log.event_error", error=e))
            raise EventCreationFailed(t("error.event_creation_failed")) from e

        logger.info(
            t("log.event_created", name=event.name, event_id=event.id, flight_number=payload["flightNumber"])
        )
        return event.id
