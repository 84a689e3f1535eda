"""Per-view dashboard sessions for customers and agents"""
from contextlib import asynccontextmanager
from typing import List, Optional
import asyncio
import logging

from servicedesk.models.dashboard import DashboardSnapshot, DashboardState, Notification
from servicedesk.models.ticket import Ticket, TicketPriority, TicketStats, TicketStatus
from servicedesk.models.user import Role
from servicedesk.services.change_feed import Subscription
from servicedesk.services.ticket_store import TicketStore, TicketStoreError

logger = logging.getLogger(__name__)


def compute_stats(tickets: List[Ticket]) -> TicketStats:
    """Total and per-status counts, recomputed from the full list"""
    stats = TicketStats(total=len(tickets))
    for ticket in tickets:
        key = ticket.status.value
        setattr(stats, key, getattr(stats, key) + 1)
    return stats


def filter_by_status(tickets: List[Ticket], status: Optional[str] = None) -> List[Ticket]:
    """Status tab filter; None or "all" keeps every ticket"""
    if not status or status == "all":
        return list(tickets)
    wanted = TicketStatus(status)
    return [t for t in tickets if t.status == wanted]


class Dashboard:
    """
    One mounted view over the ticket store.

    loading -> ready on the first successful fetch; ready is re-entered on
    every later fetch. A failed fetch keeps the current state and list and
    queues an error notification.
    """

    role: Role

    def __init__(self, store: TicketStore, user_id: str):
        self.store = store
        self.user_id = user_id
        self.state = DashboardState.LOADING
        self.tickets: List[Ticket] = []
        self.notifications: List[Notification] = []
        self._subscription: Optional[Subscription] = None
        self._changed = asyncio.Event()
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def fetch(self) -> List[Ticket]:
        raise NotImplementedError

    async def mount(self) -> None:
        self.state = DashboardState.LOADING
        self._mounted = True
        self._subscription = self.store.subscribe(self._on_change)
        await self.refresh()

    def unmount(self) -> None:
        self._mounted = False
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    @asynccontextmanager
    async def session(self):
        """Mount for the duration of the block, unmount on any exit"""
        try:
            await self.mount()
            yield self
        finally:
            self.unmount()

    async def refresh(self) -> bool:
        """Refetch the ticket list; returns False if the fetch failed or was discarded"""
        try:
            tickets = await self.fetch()
        except TicketStoreError as e:
            if self._mounted:
                self.notify("error", str(e))
            return False

        if not self._mounted:
            logger.debug(f"Discarding fetch for unmounted {self.role.value} dashboard")
            return False

        self.tickets = tickets
        self._loaded(tickets)
        self.state = DashboardState.READY
        return True

    async def wait_for_change(self) -> DashboardSnapshot:
        """Block until a change notification arrives, then refetch"""
        await self._changed.wait()
        self._changed.clear()
        await self.refresh()
        return self.snapshot()

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def drain_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(role=self.role, state=self.state, tickets=self.tickets)

    def _loaded(self, tickets: List[Ticket]) -> None:
        pass

    def _on_change(self) -> None:
        self._changed.set()


class CustomerDashboard(Dashboard):
    """The caller's own tickets, with ticket creation"""

    role = Role.CUSTOMER

    async def fetch(self) -> List[Ticket]:
        return await self.store.list_own_tickets(self.user_id)

    async def create_ticket(
        self,
        title: str,
        description: str,
        priority: TicketPriority = TicketPriority.MEDIUM
    ) -> Optional[Ticket]:
        try:
            ticket = await self.store.create_ticket(title, description, priority, self.user_id)
        except TicketStoreError as e:
            logger.warning(f"Customer {self.user_id} could not create ticket: {e}")
            self.notify("error", "Failed to create ticket")
            return None

        self.notify("success", "Ticket created successfully!")
        await self.refresh()
        return ticket


class AgentDashboard(Dashboard):
    """Every ticket, with status changes and per-status stats"""

    role = Role.AGENT

    def __init__(self, store: TicketStore, user_id: str):
        super().__init__(store, user_id)
        self.stats = TicketStats()

    async def fetch(self) -> List[Ticket]:
        return await self.store.list_all_tickets()

    def tickets_for(self, status: Optional[str] = None) -> List[Ticket]:
        return filter_by_status(self.tickets, status)

    async def change_status(
        self,
        ticket_id: str,
        new_status: TicketStatus,
        agent_id: Optional[str]
    ) -> Optional[Ticket]:
        # No signed-in agent: abort without writing or notifying
        if not agent_id:
            return None

        try:
            ticket = await self.store.update_status(ticket_id, new_status, agent_id)
        except TicketStoreError as e:
            logger.warning(f"Agent {agent_id} could not update ticket {ticket_id}: {e}")
            self.notify("error", "Failed to update ticket")
            return None

        self.notify("success", "Ticket updated successfully")
        await self.refresh()
        return ticket

    def snapshot(self) -> DashboardSnapshot:
        snapshot = super().snapshot()
        snapshot.stats = self.stats
        return snapshot

    def _loaded(self, tickets: List[Ticket]) -> None:
        self.stats = compute_stats(tickets)


def open_dashboard(role: Optional[Role], store: TicketStore, user_id: str) -> Optional[Dashboard]:
    """Dashboard variant for a role, or None when the caller has no role"""
    if role == Role.AGENT:
        return AgentDashboard(store, user_id)
    if role == Role.CUSTOMER:
        return CustomerDashboard(store, user_id)
    return None
