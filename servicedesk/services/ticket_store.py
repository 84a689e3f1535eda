"""Filtered reads and guarded writes against the tickets table"""
from typing import List
import logging

from servicedesk.config import get_settings
from servicedesk.models.ticket import Ticket, TicketPriority, TicketStatus
from servicedesk.services.change_feed import ChangeCallback, ChangeFeed, Subscription

logger = logging.getLogger(__name__)


class TicketStoreError(Exception):
    """A read or write against the tickets table failed"""


class TicketValidationError(TicketStoreError):
    """A required field was empty"""


class TicketNotFoundError(TicketStoreError):
    """No ticket with the given id"""


class TicketStore:
    """
    Ticket collection proxy.

    Every successful write is published on the change feed, so every open
    view (the writer's own included) refetches.
    """

    def __init__(self, db, feed: ChangeFeed):
        self.db = db
        self.feed = feed
        self.table = get_settings().tickets_table

    async def list_all_tickets(self) -> List[Ticket]:
        """All tickets, newest first (agent view)"""
        try:
            result = self.db.table(self.table).select("*").order(
                "created_at", desc=True
            ).execute()
        except Exception as e:
            logger.error(f"List tickets error: {e}")
            raise TicketStoreError("Failed to load tickets") from e

        return [Ticket(**row) for row in (result.data or [])]

    async def list_own_tickets(self, customer_id: str) -> List[Ticket]:
        """A customer's own tickets, newest first (customer view)"""
        try:
            result = self.db.table(self.table).select("*").eq(
                "customer_id", customer_id
            ).order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"List tickets error for customer {customer_id}: {e}")
            raise TicketStoreError("Failed to load tickets") from e

        return [Ticket(**row) for row in (result.data or [])]

    async def create_ticket(
        self,
        title: str,
        description: str,
        priority: TicketPriority,
        customer_id: str
    ) -> Ticket:
        """
        Insert a new open, unassigned ticket

        Args:
            title: Short summary of the issue
            description: Details of the issue
            priority: Priority chosen by the customer
            customer_id: Creating user's UUID

        Returns:
            The stored ticket with its server-generated id and created_at

        Raises:
            TicketValidationError: If a required field is empty
            TicketStoreError: If the insert fails
        """
        for name, value in (("title", title), ("description", description), ("customer_id", customer_id)):
            if not value or not value.strip():
                raise TicketValidationError(f"{name} is required")

        try:
            result = self.db.table(self.table).insert({
                "title": title,
                "description": description,
                "priority": TicketPriority(priority).value,
                "customer_id": customer_id,
                "status": TicketStatus.OPEN.value,
                "agent_id": None
            }).execute()
        except Exception as e:
            logger.error(f"Ticket creation error: {e}")
            raise TicketStoreError("Failed to create ticket") from e

        ticket = Ticket(**result.data[0])
        logger.info(f"Ticket created: {ticket.id} by customer {customer_id}")
        self.feed.publish("INSERT")
        return ticket

    async def update_status(self, ticket_id: str, new_status: TicketStatus, agent_id: str) -> Ticket:
        """
        Set a ticket's status and stamp the acting agent

        agent_id is overwritten on every change. There is no version check:
        two agents updating the same ticket resolve as last write wins.
        """
        try:
            result = self.db.table(self.table).update({
                "status": TicketStatus(new_status).value,
                "agent_id": agent_id
            }).eq("id", ticket_id).execute()
        except Exception as e:
            logger.error(f"Ticket update error for {ticket_id}: {e}")
            raise TicketStoreError("Failed to update ticket") from e

        if not result.data:
            raise TicketNotFoundError("Ticket not found")

        ticket = Ticket(**result.data[0])
        logger.info(f"Ticket {ticket_id} set to {ticket.status.value} by agent {agent_id}")
        self.feed.publish("UPDATE")
        return ticket

    def subscribe(self, on_change: ChangeCallback) -> Subscription:
        """Register a no-payload callback fired on any ticket insert/update/delete"""
        return self.feed.subscribe(on_change)
