"""Ticket-related Pydantic models"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Ticket(BaseModel):
    """A row of the tickets table"""
    id: str
    title: str
    description: str
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority
    customer_id: str
    agent_id: Optional[str] = None
    created_at: datetime


class TicketCreate(BaseModel):
    """Create a ticket (customer only)"""
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class TicketStatusUpdate(BaseModel):
    """Change a ticket's status (agent only)"""
    status: TicketStatus


class TicketStats(BaseModel):
    """Per-status counts over the currently loaded ticket list"""
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class TicketListResponse(BaseModel):
    tickets: List[Ticket]
