"""Database connection and utilities"""
from fastapi import Depends
from starlette.requests import HTTPConnection
from supabase import create_client, Client
from functools import lru_cache
from servicedesk.config import get_settings
from servicedesk.services.change_feed import ChangeFeed
from servicedesk.services.ticket_store import TicketStore


@lru_cache()
def get_supabase_admin() -> Client:
    """
    Service role client (bypasses RLS - visibility is enforced by the
    ticket store filters, so every query must go through it)
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )


def get_db() -> Client:
    """FastAPI dependency returning the Supabase client used for row access"""
    return get_supabase_admin()


def get_change_feed(connection: HTTPConnection) -> ChangeFeed:
    """The app-wide ticket change feed (HTTP and WebSocket)"""
    return connection.app.state.change_feed


def get_ticket_store(
    db: Client = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed)
) -> TicketStore:
    return TicketStore(db, feed)
