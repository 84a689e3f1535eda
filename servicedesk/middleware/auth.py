"""Authentication middleware and dependencies"""
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional, Dict
from servicedesk.config import get_settings
from servicedesk.database import get_db
from servicedesk.models.user import Role
from servicedesk.services.roles import resolve_role
import httpx
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class IdentityError(Exception):
    """The identity service could not be reached"""


class IdentityProvider:
    """Resolves a bearer token to the signed-in user"""

    async def get_user(self, token: str) -> Optional[Dict]:
        raise NotImplementedError

    async def sign_out(self, token: str) -> None:
        raise NotImplementedError


class SupabaseIdentityProvider(IdentityProvider):
    """Verifies tokens against the Supabase Auth API"""

    def __init__(self, supabase_url: str, anon_key: str):
        self.supabase_url = supabase_url
        self.anon_key = anon_key

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "apikey": self.anon_key
        }

    async def get_user(self, token: str) -> Optional[Dict]:
        """
        Look up the user owning a session token

        Returns:
            Dict with user_id and email, or None if the token is not valid
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.supabase_url}/auth/v1/user",
                    headers=self._headers(token)
                )
        except httpx.RequestError as e:
            raise IdentityError(str(e)) from e

        if response.status_code != 200:
            logger.warning(f"Supabase auth failed: {response.status_code} - {response.text}")
            return None

        user_data = response.json()
        return {
            "user_id": user_data.get("id"),
            "email": user_data.get("email"),
            "raw_token": token,
        }

    async def sign_out(self, token: str) -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.supabase_url}/auth/v1/logout",
                    headers=self._headers(token)
                )
        except httpx.RequestError as e:
            raise IdentityError(str(e)) from e

        if response.status_code not in (200, 204):
            logger.warning(f"Supabase sign-out failed: {response.status_code} - {response.text}")


def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    return SupabaseIdentityProvider(settings.supabase_url, settings.supabase_anon_key)


async def authenticate_token(token: Optional[str], provider: IdentityProvider) -> Optional[Dict]:
    """
    Verify a raw token, shared by the HTTP and WebSocket entry points

    Raises:
        HTTPException: If the token is invalid or auth is unavailable
    """
    if not token:
        return None

    try:
        user = await provider.get_user(token)
    except IdentityError:
        raise HTTPException(status_code=401, detail="Authentication service unavailable")

    if not user or not user.get("user_id"):
        raise HTTPException(status_code=401, detail="Invalid authentication token")

    logger.info(f"Auth successful for user: {user.get('user_id')}")
    return user


async def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: IdentityProvider = Depends(get_identity_provider)
) -> Optional[Dict]:
    """
    Verify Supabase JWT token via Supabase Auth API
    """
    if not credentials:
        return None
    return await authenticate_token(credentials.credentials, provider)


async def get_current_user(
    auth_data: Optional[Dict] = Depends(verify_token),
    db=Depends(get_db)
) -> Dict:
    """
    Get current authenticated user with their role (None when unassigned)

    Raises:
        HTTPException: If not authenticated
    """
    if not auth_data:
        raise HTTPException(status_code=401, detail="Not authenticated")

    return {**auth_data, "role": resolve_role(db, auth_data["user_id"])}


async def get_optional_user(
    auth_data: Optional[Dict] = Depends(verify_token)
) -> Optional[Dict]:
    """
    Get current user if authenticated, None otherwise
    """
    return auth_data


async def get_current_agent(auth_data: Dict = Depends(get_current_user)) -> Dict:
    """
    Get current authenticated agent

    Raises:
        HTTPException: If the caller is not an agent
    """
    if auth_data.get("role") != Role.AGENT:
        raise HTTPException(
            status_code=403,
            detail="This endpoint is only accessible to agents"
        )
    return auth_data


async def get_current_customer(auth_data: Dict = Depends(get_current_user)) -> Dict:
    """
    Get current authenticated customer

    Raises:
        HTTPException: If the caller is not a customer
    """
    if auth_data.get("role") != Role.CUSTOMER:
        raise HTTPException(
            status_code=403,
            detail="This endpoint is only accessible to customers"
        )
    return auth_data
