"""Message content matching"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .enrichment import EnrichmentService
from .results import Lookup

logger = logging.getLogger(__name__)


class PatternType(str, Enum):
    EVERY = "every"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EQUALS = "equals"
    REGEX = "regex"
    BOT_MENTION = "bot_mention"
    CONTAINS_IMAGE = "contains_image"

    @property
    def needs_value(self) -> bool:
        return self not in (PatternType.EVERY, PatternType.BOT_MENTION, PatternType.CONTAINS_IMAGE)


@dataclass(frozen=True)
class PatternSpec:
    strategy: PatternType = PatternType.EVERY
    value: str = ""
    case_sensitive: bool = False


def compile_pattern(pattern: str) -> Lookup[re.Pattern[str]]:
    """Compile a user-supplied regex; always case-insensitive"""
    try:
        return Lookup.success(re.compile(pattern, re.IGNORECASE))
    except re.error as e:
        return Lookup.failure(f"invalid regex {pattern!r}: {e}")


def has_image_attachment(message: Any) -> bool:
    for attachment in getattr(message, "attachments", None) or []:
        content_type = getattr(attachment, "content_type", None)
        if isinstance(content_type, str) and content_type.startswith("image/"):
            return True
    return False


class PatternMatcher:
    """Evaluates one :class:`PatternSpec` against messages"""

    def __init__(self, spec: PatternSpec, enrichment: EnrichmentService | None = None):
        self.spec = spec
        self.enrichment = enrichment
        self._regex: re.Pattern[str] | None = None

        if spec.strategy == PatternType.REGEX:
            compiled = compile_pattern(spec.value)
            if compiled.ok:
                self._regex = compiled.value
            else:
                logger.warning(f"{compiled.error}; regex trigger will never match")

    async def matches(self, message: Any, bot_user_id: str | None = None) -> bool:
        strategy = self.spec.strategy

        if strategy == PatternType.EVERY:
            return True
        if strategy == PatternType.CONTAINS_IMAGE:
            return has_image_attachment(message)
        if strategy == PatternType.BOT_MENTION:
            return await self._mentions_bot(message, bot_user_id)

        content = getattr(message, "content", None) or ""
        if not content:
            return False

        if strategy == PatternType.REGEX:
            return self._regex is not None and self._regex.search(content) is not None

        value = self.spec.value
        if not self.spec.case_sensitive:
            content = content.lower()
            value = value.lower()

        if strategy == PatternType.CONTAINS:
            return value in content
        if strategy == PatternType.STARTS_WITH:
            return content.startswith(value)
        if strategy == PatternType.ENDS_WITH:
            return content.endswith(value)
        if strategy == PatternType.EQUALS:
            return content == value
        return False

    async def _mentions_bot(self, message: Any, bot_user_id: str | None) -> bool:
        if bot_user_id is None:
            return False
        if any(str(user.id) == bot_user_id for user in getattr(message, "mentions", None) or []):
            return True

        if getattr(message, "reference", None) is None or self.enrichment is None:
            return False
        referenced = await self.enrichment.fetch_referenced_message(message)
        if not referenced.ok or referenced.value is None:
            logger.debug(f"Reply target unavailable for bot mention check: {referenced.error}")
            return False
        return str(referenced.value.author.id) == bot_user_id
