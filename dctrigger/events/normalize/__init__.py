"""Payload normalization: one extractor per event kind"""

# Importing the extractor modules registers them
from . import guilds, members, messages, scheduled, system  # noqa: F401
from .registry import (
    PASSTHROUGH,
    KindHandler,
    NormalizeContext,
    Record,
    extractor,
    handler_for,
    identify,
    normalize,
    registered_events,
)

__all__ = [
    "PASSTHROUGH",
    "KindHandler",
    "NormalizeContext",
    "Record",
    "extractor",
    "handler_for",
    "identify",
    "normalize",
    "registered_events",
]
