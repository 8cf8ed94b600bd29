import asyncio
import logging

from sqlalchemy import select

from dm_assistant.client.auth.supabase_auth import create_identity, delete_identity, verify_access_token
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models.coach import Coach
from dm_assistant.db.models.user_role import UserRole
from dm_assistant.model.coach.coach_request import CreateCoachRequest
from dm_assistant.model.coach.coach_response import CreateCoachResponse

logger = logging.getLogger(__name__)

PLANS = ("basic", "standard", "premium")


class ProvisionError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def bearer_token(authorization: str | None) -> str:
    if not authorization:
        return ""
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def has_role(user_id: str, role: str) -> bool:
    with session_scope() as db:
        found = db.execute(
            select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role).limit(1)
        ).scalar_one_or_none()
    return found is not None


def _insert_coach(user_id: str, req: CreateCoachRequest) -> str:
    with session_scope() as db:
        coach = Coach(
            user_id=user_id,
            name=req.name,
            email=req.email,
            brand_name=req.brand_name or None,
            plan=req.plan if req.plan in PLANS else "basic",
        )
        db.add(coach)
        db.flush()
        return coach.id


def _assign_role(user_id: str, role: str) -> None:
    with session_scope() as db:
        db.add(UserRole(user_id=user_id, role=role))


async def create_coach_service(authorization: str | None, req: CreateCoachRequest) -> CreateCoachResponse:
    """
    Admin-only: create the auth identity, the coach row and the coach role.
    The identity is removed again when the coach row cannot be written.
    """
    token = bearer_token(authorization)
    if not token:
        raise ProvisionError(401, "Unauthorized")

    caller_id = await asyncio.to_thread(verify_access_token, token)
    if not caller_id:
        raise ProvisionError(401, "Unauthorized")

    if not await asyncio.to_thread(has_role, caller_id, "admin"):
        raise ProvisionError(403, "Admin access required")

    if not req.name or not req.email or not req.password:
        raise ProvisionError(400, "Missing required fields")

    try:
        user_id = await asyncio.to_thread(create_identity, req.email, req.password)
    except Exception as exc:
        logger.warning("identity creation failed email=%s", req.email, exc_info=True)
        raise ProvisionError(400, str(exc)) from exc

    try:
        coach_id = await asyncio.to_thread(_insert_coach, user_id, req)
    except Exception as exc:
        logger.exception("coach insert failed, removing identity user_id=%s", user_id)
        try:
            await asyncio.to_thread(delete_identity, user_id)
        except Exception:
            logger.exception("identity cleanup failed user_id=%s", user_id)
        raise ProvisionError(400, str(exc)) from exc

    try:
        await asyncio.to_thread(_assign_role, user_id, "coach")
    except Exception:
        logger.exception("role assignment failed user_id=%s", user_id)

    logger.info("coach provisioned coach_id=%s user_id=%s", coach_id, user_id)
    return CreateCoachResponse(coach_id=coach_id)
