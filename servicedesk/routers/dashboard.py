"""Dashboard endpoints: one-shot snapshot and the live WebSocket view"""
from fastapi import APIRouter, HTTPException, Depends, Query, WebSocket, WebSocketDisconnect
from typing import Dict, Optional
import anyio
import logging

from servicedesk.models.dashboard import DashboardState, NoRolePlaceholder
from servicedesk.models.ticket import TicketPriority, TicketStatus
from servicedesk.middleware.auth import (
    IdentityProvider, authenticate_token, get_current_user, get_identity_provider
)
from servicedesk.database import get_db, get_ticket_store
from servicedesk.services.dashboard import AgentDashboard, CustomerDashboard, Dashboard, open_dashboard
from servicedesk.services.roles import resolve_role
from servicedesk.services.ticket_store import TicketStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def get_dashboard(
    auth_data: Dict = Depends(get_current_user),
    store: TicketStore = Depends(get_ticket_store)
):
    """Role-specific dashboard snapshot, or the no-role placeholder"""
    dashboard = open_dashboard(auth_data.get("role"), store, auth_data["user_id"])
    if dashboard is None:
        return NoRolePlaceholder()

    async with dashboard.session():
        pass

    if dashboard.state != DashboardState.READY:
        errors = [n.message for n in dashboard.drain_notifications() if n.level == "error"]
        raise HTTPException(status_code=500, detail=errors[0] if errors else "Failed to load tickets")

    return dashboard.snapshot()


async def _send_notifications(websocket: WebSocket, dashboard: Dashboard):
    for notification in dashboard.drain_notifications():
        await websocket.send_json({"type": "notification", **notification.model_dump()})


async def _send_state(websocket: WebSocket, dashboard: Dashboard):
    await websocket.send_json({"type": "snapshot", **dashboard.snapshot().model_dump(mode="json")})
    await _send_notifications(websocket, dashboard)


async def _push_changes(websocket: WebSocket, dashboard: Dashboard, scope: anyio.CancelScope):
    """Refetch and push a fresh snapshot on every change notification"""
    try:
        while True:
            await dashboard.wait_for_change()
            await _send_state(websocket, dashboard)
    except WebSocketDisconnect:
        scope.cancel()


async def _handle_action(dashboard: Dashboard, user_id: str, message: Dict) -> bool:
    """Run one client action; returns True when a fresh snapshot should be pushed"""
    action = message.get("action")

    if action == "create_ticket" and isinstance(dashboard, CustomerDashboard):
        try:
            priority = TicketPriority(message.get("priority") or TicketPriority.MEDIUM.value)
        except ValueError:
            dashboard.notify("error", "Invalid priority")
            return False
        await dashboard.create_ticket(
            message.get("title") or "",
            message.get("description") or "",
            priority
        )

    elif action == "update_status" and isinstance(dashboard, AgentDashboard):
        try:
            status = TicketStatus(message.get("status"))
        except ValueError:
            dashboard.notify("error", "Invalid status")
            return False
        await dashboard.change_status(str(message.get("ticket_id")), status, user_id)

    elif action == "refresh":
        await dashboard.refresh()
        return True

    else:
        dashboard.notify("error", f"Unsupported action: {action}")

    return False


async def _receive_actions(
    websocket: WebSocket,
    dashboard: Dashboard,
    user_id: str,
    scope: anyio.CancelScope
):
    try:
        while True:
            message = await websocket.receive_json()
            push_snapshot = False
            if not isinstance(message, dict):
                dashboard.notify("error", "Malformed message")
            else:
                push_snapshot = await _handle_action(dashboard, user_id, message)

            if push_snapshot:
                await _send_state(websocket, dashboard)
            else:
                await _send_notifications(websocket, dashboard)
    except WebSocketDisconnect:
        scope.cancel()


@router.websocket("/live")
async def live_dashboard(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db),
    store: TicketStore = Depends(get_ticket_store)
):
    """
    Live dashboard for the caller.

    Pushes a snapshot on connect and after every ticket change. Clients send
    {"action": "create_ticket" | "update_status" | "refresh", ...}.
    """
    try:
        auth_data = await authenticate_token(token, provider)
    except HTTPException:
        auth_data = None

    await websocket.accept()

    if not auth_data:
        await websocket.close(code=4401)
        return

    user_id = auth_data["user_id"]
    dashboard = open_dashboard(resolve_role(db, user_id), store, user_id)
    if dashboard is None:
        await websocket.send_json({"type": "placeholder", **NoRolePlaceholder().model_dump()})
        await websocket.close()
        return

    async with dashboard.session():
        await _send_state(websocket, dashboard)

        # Either loop cancels both once the client goes away
        async with anyio.create_task_group() as tg:
            tg.start_soon(_receive_actions, websocket, dashboard, user_id, tg.cancel_scope)
            tg.start_soon(_push_changes, websocket, dashboard, tg.cancel_scope)

    logger.info(f"Live {dashboard.role.value} dashboard closed for user {user_id}")
