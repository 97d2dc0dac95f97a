"""Logging configuration"""

import logging
import os
import sys

try:
    from rich.console import Console
    from rich.logging import RichHandler

    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False

LOGGER_NAME = "dctrigger"

# Third-party loggers that flood INFO with gateway and HTTP chatter
NOISY_LOGGERS = ("discord", "discord.http", "discord.gateway", "aiohttp", "httpx", "httpcore")


def setup_logging(
    level_name: str | None = None, library_level: int = logging.WARNING
) -> logging.Logger:
    """Configure application logging with Rich handler.

    The ``dctrigger`` logger hierarchy follows ``level_name``; third-party
    libraries are held at ``library_level``. Returns the package logger.
    """
    level_name = level_name or os.getenv("LOG_LEVEL", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)

    if RICH_AVAILABLE:
        try:
            # Enable UTF-8 output on Windows
            if sys.platform == "win32":
                import codecs

                sys.stdout = codecs.getwriter("utf-8")(sys.stdout.buffer)
                sys.stderr = codecs.getwriter("utf-8")(sys.stderr.buffer)

            rich_handler = RichHandler(
                console=Console(force_terminal=True, width=120),
                show_time=True,
                show_level=True,
                show_path=False,
                markup=True,
                rich_tracebacks=True,
                tracebacks_show_locals=False,
                tracebacks_width=120,
            )
            rich_handler.setFormatter(
                logging.Formatter(fmt="%(message)s", datefmt="[%Y-%m-%d %H:%M:%S]")
            )

            logging.basicConfig(
                level=level,
                format="%(message)s",
                datefmt="[%Y-%m-%d %H:%M:%S]",
                handlers=[rich_handler],
                force=True,
            )
        except Exception as e:
            _basic(level)
            logging.getLogger(__name__).warning(
                f"Rich logging setup failed: {e}, using standard logging"
            )
    else:
        _basic(level)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(library_level)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)
    return package_logger


def _basic(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
