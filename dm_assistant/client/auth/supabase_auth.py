import logging
import os
from functools import lru_cache

from supabase import Client, create_client

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_auth_client() -> Client:
    # Created lazily: create_client rejects empty credentials at construction time.
    return create_client(
        os.getenv("SUPABASE_URL", ""),
        os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
    )


def verify_access_token(token: str) -> str | None:
    """Return the auth user id behind a bearer token, or None when it is not valid."""
    if not token:
        return None
    try:
        response = get_auth_client().auth.get_user(token)
    except Exception:
        logger.warning("access token rejected by identity provider")
        return None
    user = getattr(response, "user", None)
    return user.id if user else None


def create_identity(email: str, password: str) -> str:
    response = get_auth_client().auth.admin.create_user(
        {"email": email, "password": password, "email_confirm": True}
    )
    return response.user.id


def delete_identity(user_id: str) -> None:
    get_auth_client().auth.admin.delete_user(user_id)
