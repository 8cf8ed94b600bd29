import logging
from datetime import datetime, timezone

from dm_assistant.client.db.psql import session_scope, upsert_insert
from dm_assistant.db.models._types import new_id
from dm_assistant.db.models.contact import Contact
from dm_assistant.model.assistant.inbound_message import InboundMessage

logger = logging.getLogger(__name__)


def contact_platform(source_channel: str) -> str:
    return "instagram" if "instagram" in source_channel.lower() else source_channel


def split_name(contact_name: str) -> tuple[str | None, str | None]:
    parts = (contact_name or "").split()
    if not parts:
        return None, None
    return parts[0], " ".join(parts[1:]) or None


def upsert_contact(inbound: InboundMessage) -> bool:
    """
    Insert or refresh the contact keyed by (coach, platform, contact id).
    Best effort: failures are logged and reported as False.
    """
    if not inbound.contact_id or not inbound.user_handle:
        return False

    first_name, last_name = split_name(inbound.contact_name)
    values = {
        "coach_id": inbound.coach_id,
        "platform": contact_platform(inbound.source_channel),
        "contact_id": inbound.contact_id,
        "user_handle": inbound.user_handle,
        "first_name": first_name,
        "last_name": last_name,
        "email": inbound.contact_email,
        "updated_at": datetime.now(timezone.utc),
    }
    try:
        with session_scope() as db:
            stmt = upsert_insert(db, Contact).values(id=new_id(), **values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["coach_id", "platform", "contact_id"],
                set_={
                    "user_handle": stmt.excluded.user_handle,
                    "first_name": stmt.excluded.first_name,
                    "last_name": stmt.excluded.last_name,
                    "email": stmt.excluded.email,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            db.execute(stmt)
    except Exception:
        logger.warning("contact upsert failed contact_id=%s", inbound.contact_id, exc_info=True)
        return False

    logger.info("contact upserted contact_id=%s user_handle=%s", inbound.contact_id, inbound.user_handle)
    return True
