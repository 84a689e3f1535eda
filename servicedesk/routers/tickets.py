"""Ticket endpoints"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, Optional
import logging

from servicedesk.models.ticket import (
    Ticket, TicketCreate, TicketListResponse, TicketStats, TicketStatus, TicketStatusUpdate
)
from servicedesk.models.user import Role
from servicedesk.middleware.auth import get_current_user, get_current_agent, get_current_customer
from servicedesk.database import get_ticket_store
from servicedesk.services.dashboard import compute_stats, filter_by_status
from servicedesk.services.ticket_store import (
    TicketNotFoundError, TicketStore, TicketStoreError, TicketValidationError
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    status: Optional[TicketStatus] = Query(None),
    auth_data: Dict = Depends(get_current_user),
    store: TicketStore = Depends(get_ticket_store)
):
    """List tickets visible to the caller: all for agents, own for customers"""
    role = auth_data.get("role")
    try:
        if role == Role.AGENT:
            tickets = await store.list_all_tickets()
        elif role == Role.CUSTOMER:
            tickets = await store.list_own_tickets(auth_data["user_id"])
        else:
            raise HTTPException(status_code=403, detail="No role assigned")
    except TicketStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return TicketListResponse(tickets=filter_by_status(tickets, status.value if status else None))


@router.post("", response_model=Ticket, status_code=201)
async def create_ticket(
    ticket: TicketCreate,
    auth_data: Dict = Depends(get_current_customer),
    store: TicketStore = Depends(get_ticket_store)
):
    """Create a ticket (CUSTOMER)"""
    try:
        return await store.create_ticket(
            ticket.title,
            ticket.description,
            ticket.priority,
            auth_data["user_id"]
        )
    except TicketValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TicketStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{ticket_id}/status", response_model=Ticket)
async def update_ticket_status(
    ticket_id: str,
    update: TicketStatusUpdate,
    auth_data: Dict = Depends(get_current_agent),
    store: TicketStore = Depends(get_ticket_store)
):
    """Change a ticket's status and take it over (AGENT)"""
    try:
        return await store.update_status(ticket_id, update.status, auth_data["user_id"])
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except TicketStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/stats", response_model=TicketStats)
async def get_ticket_stats(
    auth_data: Dict = Depends(get_current_agent),
    store: TicketStore = Depends(get_ticket_store)
):
    """Total and per-status counts over all tickets (AGENT)"""
    try:
        tickets = await store.list_all_tickets()
    except TicketStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return compute_stats(tickets)
