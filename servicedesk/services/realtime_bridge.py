"""Republish Supabase realtime postgres_changes events onto the change feed"""
from typing import Any, Dict, Optional
import logging

from servicedesk.services.change_feed import ChangeFeed

logger = logging.getLogger(__name__)


class SupabaseRealtimeBridge:
    """
    Owns one realtime channel on the tickets table.

    Events are forwarded without payload: subscribers refetch on any change.
    """

    channel_name = "tickets-feed"

    def __init__(self, client, feed: ChangeFeed, table: str, schema: str = "public"):
        self.client = client
        self.feed = feed
        self.table = table
        self.schema = schema
        self._channel: Optional[Any] = None

    @property
    def running(self) -> bool:
        return self._channel is not None

    async def start(self) -> None:
        if self._channel is not None:
            return

        channel = self.client.channel(self.channel_name)
        channel.on_postgres_changes(
            "*",
            schema=self.schema,
            table=self.table,
            callback=self._handle_change
        )
        await channel.subscribe()
        self._channel = channel
        logger.info(f"Realtime bridge subscribed to {self.schema}.{self.table}")

    async def stop(self) -> None:
        channel, self._channel = self._channel, None
        if channel is None:
            return
        await self.client.remove_channel(channel)
        logger.info("Realtime bridge stopped")

    def _handle_change(self, payload: Dict[str, Any]) -> None:
        event = "*"
        if isinstance(payload, dict):
            data = payload.get("data")
            if isinstance(data, dict) and data.get("type"):
                event = data["type"]
            else:
                event = payload.get("eventType") or "*"
        self.feed.publish(str(event))


async def create_realtime_bridge(settings, feed: ChangeFeed) -> SupabaseRealtimeBridge:
    """Open an async Supabase client and start the bridge on it"""
    from supabase import acreate_client

    client = await acreate_client(settings.supabase_url, settings.supabase_service_role_key)
    bridge = SupabaseRealtimeBridge(
        client,
        feed,
        table=settings.tickets_table,
        schema=settings.realtime_schema
    )
    await bridge.start()
    return bridge
