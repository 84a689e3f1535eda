"""Role and profile lookups against the user_roles / profiles tables"""
from typing import Optional
import logging

from servicedesk.config import get_settings
from servicedesk.models.user import Role

logger = logging.getLogger(__name__)


class RoleStoreError(Exception):
    """Writing a role or profile row failed"""


def resolve_role(db, user_id: str) -> Optional[Role]:
    """
    Look up the single role row for a user

    Args:
        db: Supabase client
        user_id: Auth user UUID

    Returns:
        The user's role, or None when no row exists or the lookup fails
    """
    settings = get_settings()
    try:
        result = db.table(settings.roles_table).select("role").eq(
            "user_id", user_id
        ).single().execute()
    except Exception as e:
        logger.warning(f"Role lookup failed for user {user_id}: {e}")
        return None

    if not result.data:
        return None

    try:
        return Role(result.data.get("role"))
    except ValueError:
        logger.warning(f"Unknown role {result.data.get('role')!r} for user {user_id}")
        return None


def assign_role(db, user_id: str, role: Role) -> None:
    """Insert the role row established at signup"""
    settings = get_settings()
    try:
        db.table(settings.roles_table).insert({
            "user_id": user_id,
            "role": role.value
        }).execute()
    except Exception as e:
        logger.error(f"Assign role error for user {user_id}: {e}")
        raise RoleStoreError("Failed to assign role") from e

    logger.info(f"Assigned role {role.value} to user {user_id}")


def create_profile(db, user_id: str, email: str, full_name: Optional[str] = None) -> None:
    """Insert the profile row established at signup"""
    settings = get_settings()
    try:
        db.table(settings.profiles_table).insert({
            "id": user_id,
            "email": email,
            "full_name": full_name
        }).execute()
    except Exception as e:
        logger.error(f"Create profile error for user {user_id}: {e}")
        raise RoleStoreError("Failed to create profile") from e


def get_profile(db, user_id: str) -> Optional[dict]:
    """Profile row for a user, or None when missing or the lookup fails"""
    settings = get_settings()
    try:
        result = db.table(settings.profiles_table).select("*").eq(
            "id", user_id
        ).single().execute()
    except Exception as e:
        logger.warning(f"Profile lookup failed for user {user_id}: {e}")
        return None

    return result.data or None
