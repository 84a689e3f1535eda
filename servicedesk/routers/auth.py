"""Signed-in user endpoints: role lookup, signup registration, sign-out"""
from fastapi import APIRouter, HTTPException, Depends
from typing import Dict, Optional
import logging

from servicedesk.models.user import CurrentUserResponse, RegisterRequest, RegisterResponse
from servicedesk.middleware.auth import (
    IdentityError, IdentityProvider, get_current_user, get_identity_provider, get_optional_user
)
from servicedesk.database import get_db
from servicedesk.services.roles import RoleStoreError, assign_role, create_profile, get_profile

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(auth_data: Dict = Depends(get_current_user)):
    """Current user and their role (null when none is assigned)"""
    return CurrentUserResponse(
        user_id=auth_data["user_id"],
        email=auth_data.get("email"),
        role=auth_data.get("role")
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    request: RegisterRequest,
    auth_data: Dict = Depends(get_current_user),
    db=Depends(get_db)
):
    """
    Assign the role and create the profile right after signup.
    Roles are set once and never changed; a repeat call only fills in
    whichever row an earlier failed attempt left missing.
    """
    user_id = auth_data["user_id"]
    role = auth_data.get("role")
    has_profile = get_profile(db, user_id) is not None

    if role is not None and has_profile:
        raise HTTPException(status_code=409, detail="Role already assigned")

    # Each step only runs if its row is missing, so a failed attempt can be retried
    try:
        if not has_profile:
            create_profile(db, user_id, auth_data.get("email") or "", request.full_name)
        if role is None:
            assign_role(db, user_id, request.role)
            role = request.role
    except RoleStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Registered user {user_id} as {role.value}")
    return RegisterResponse(user_id=user_id, role=role)


@router.post("/signout")
async def sign_out(
    auth_data: Optional[Dict] = Depends(get_optional_user),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    """Revoke the caller's session"""
    if not auth_data:
        return {"success": True, "message": "Signed out successfully"}

    try:
        await provider.sign_out(auth_data["raw_token"])
    except IdentityError as e:
        logger.error(f"Sign-out error for user {auth_data['user_id']}: {e}")
        raise HTTPException(status_code=503, detail="Authentication service unavailable")

    return {"success": True, "message": "Signed out successfully"}
