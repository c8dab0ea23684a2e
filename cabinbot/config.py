"""Environment configuration for cabinbot."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .i18n import t
from .voice import DEFAULT_CONNECT_TIMEOUT

DEFAULT_SUPPORT_URL = "https://emiratesgrouproblox.link/support"


def _optional_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(t("error.invalid_integer", name=name, value=raw)) from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(t("error.invalid_number", name=name, value=raw)) from None


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (and ``.env``)."""

    discord_token: str | None = None
    guild_id: int | None = None
    stage_channel_id: int | None = None
    control_channel_id: int | None = None
    unified_guild_id: int | None = None
    unified_verified_role_id: int | None = None
    audio_dir: Path = Path("audio")
    voice_connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    support_url: str = DEFAULT_SUPPORT_URL
    log_level: str = "INFO"

    @property
    def voice_configured(self) -> bool:
        return self.guild_id is not None and self.stage_channel_id is not None

    @property
    def verification_configured(self) -> bool:
        return self.unified_guild_id is not None and self.unified_verified_role_id is not None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        env = os.environ if env is None else env
        return cls(
            discord_token=env.get("DISCORD_TOKEN") or None,
            guild_id=_optional_int(env, "GUILD_ID"),
            stage_channel_id=_optional_int(env, "STAGE_CHANNEL_ID"),
            control_channel_id=_optional_int(env, "CONTROL_CHANNEL_ID"),
            unified_guild_id=_optional_int(env, "UNIFIED_GUILD_ID"),
            unified_verified_role_id=_optional_int(env, "UNIFIED_VERIFIED_ROLE_ID"),
            audio_dir=Path(env.get("AUDIO_DIR") or "audio"),
            voice_connect_timeout=_float(env, "VOICE_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
            support_url=env.get("SUPPORT_URL") or DEFAULT_SUPPORT_URL,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
