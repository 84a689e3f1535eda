"""Dashboard snapshot models"""
from pydantic import BaseModel
from typing import Optional, List
from enum import Enum

from servicedesk.models.ticket import Ticket, TicketStats
from servicedesk.models.user import Role

NO_ROLE_MESSAGE = "No role assigned. Please contact support."


class DashboardState(str, Enum):
    LOADING = "loading"
    READY = "ready"


class DashboardSnapshot(BaseModel):
    """What a mounted dashboard currently shows"""
    role: Role
    state: DashboardState
    tickets: List[Ticket]
    stats: Optional[TicketStats] = None


class NoRolePlaceholder(BaseModel):
    """Shown instead of either dashboard when the caller has no role"""
    role: None = None
    message: str = NO_ROLE_MESSAGE


class Notification(BaseModel):
    """Transient one-line user notification"""
    level: str
    message: str
