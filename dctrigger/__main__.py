"""
Run the trigger bot: ``python -m dctrigger`` or the ``dctrigger`` script
"""

import asyncio
import logging
import sys

from .bot import main
from .core.logging import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def run() -> None:
    try:
        code = asyncio.run(main())
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Bot stopped manually")
        code = 0
    except Exception as e:
        logger.error(f"Bot crashed: {e}", exc_info=e)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    run()
