"""User, role and profile Pydantic models"""
from pydantic import BaseModel
from typing import Optional
from enum import Enum


class Role(str, Enum):
    CUSTOMER = "customer"
    AGENT = "agent"


class RegisterRequest(BaseModel):
    """Role and profile set up once, right after signup"""
    role: Role
    full_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    role: Role


class CurrentUserResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[Role] = None
