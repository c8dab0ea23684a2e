"""Main entry point for the cabinbot Discord bot."""

import logging
import sys

from dotenv import load_dotenv

from .bot import CabinBot
from .config import Settings
from .errors import ConfigurationError
from .i18n import t


def main() -> None:
    """Run the bot."""
    load_dotenv()

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not settings.discord_token:
        print(t("error.discord_token_not_set"), file=sys.stderr)
        print(t("error.discord_token_instructions"), file=sys.stderr)
        sys.exit(1)

    bot = CabinBot(settings)
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
