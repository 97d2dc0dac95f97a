"""Scheduled event subscriber enumeration over the Discord REST API"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .results import Lookup

logger = logging.getLogger(__name__)

PAGE_LIMIT = 100


@dataclass
class SubscriberPage:
    """One page of ``GET .../scheduled-events/{id}/users``"""

    user_ids: list[str] = field(default_factory=list)
    # Last user id on the page; None when the page cannot be continued from
    cursor: str | None = None

    @classmethod
    def parse(cls, body: Any) -> "SubscriberPage | None":
        """Parse a response body; None when it is not a list"""
        if not isinstance(body, list):
            return None
        user_ids = []
        for item in body:
            user = item.get("user") if isinstance(item, dict) else None
            user_id = user.get("id") if isinstance(user, dict) else None
            if user_id is not None:
                user_ids.append(str(user_id))

        last = body[-1] if body else None
        last_user = last.get("user") if isinstance(last, dict) else None
        cursor = last_user.get("id") if isinstance(last_user, dict) else None
        return cls(user_ids=user_ids, cursor=str(cursor) if cursor is not None else None)


class SubscriberEnumerator:
    """Lists every user subscribed to a guild scheduled event.

    Best effort: a failing page stops pagination and the ids collected so far
    are returned in a failed :class:`Lookup` instead of raising.
    """

    DISCORD_API_URL = "https://discord.com/api/v10"

    def __init__(
        self,
        token: str,
        api_url: str | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.api_url = (api_url or self.DISCORD_API_URL).rstrip("/")
        self._headers = {"Authorization": f"Bot {token}"}
        # Shared HTTP client, reused across pages and events
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close the shared HTTP client. Call on shutdown."""
        await self._http.aclose()

    async def fetch_page(
        self, guild_id: str | int, event_id: str | int, before: str | None = None
    ) -> SubscriberPage | None:
        """Fetch one page. Raises httpx errors; returns None for a malformed body."""
        params: dict[str, Any] = {"limit": PAGE_LIMIT, "with_member": "false"}
        if before is not None:
            params["before"] = before

        response = await self._http.get(
            f"{self.api_url}/guilds/{guild_id}/scheduled-events/{event_id}/users",
            params=params,
            headers=self._headers,
        )
        response.raise_for_status()
        return SubscriberPage.parse(response.json())

    async def list_subscribers(
        self, guild_id: str | int, event_id: str | int
    ) -> Lookup[list[str]]:
        collected: list[str] = []
        seen: set[str] = set()
        cursor: str | None = None

        while True:
            try:
                page = await self.fetch_page(guild_id, event_id, before=cursor)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(
                    f"Subscriber pagination for event {event_id} stopped after "
                    f"{len(collected)} users: {type(e).__name__}: {e}"
                )
                return Lookup.failure(f"{type(e).__name__}: {e}", value=collected)

            if page is None:
                logger.warning(f"Malformed subscriber page for event {event_id}")
                return Lookup.failure("malformed page", value=collected)

            for user_id in page.user_ids:
                if user_id not in seen:
                    seen.add(user_id)
                    collected.append(user_id)

            if len(page.user_ids) < PAGE_LIMIT or page.cursor is None or page.cursor == cursor:
                break
            cursor = page.cursor

        return Lookup.success(collected)
