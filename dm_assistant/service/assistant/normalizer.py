"""
Vendor payload normalization.

Chat-automation vendors post the same logical fields under different names and
nesting levels. Each canonical field is resolved from an explicit, ordered list
of candidate paths; the first non-empty string wins. Nested candidates (the
object under ``customData`` or ``data``) are listed before outer ones.
"""
import logging
import re
import time
from typing import Any

import dm_assistant.config.config as configs
from dm_assistant.model.assistant.inbound_message import InboundMessage

logger = logging.getLogger(__name__)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

NESTED = "nested"
OUTER = "outer"
INSTAGRAM = "instagram"

# (scope, key path)
CandidatePath = tuple[str, tuple[str, ...]]

COACH_ID_PATHS: list[CandidatePath] = [
    (NESTED, ("coach_id",)),
    (OUTER, ("coach_id",)),
    (NESTED, ("coachId",)),
    (OUTER, ("coachId",)),
]

CONTACT_NAME_PATHS: list[CandidatePath] = [
    (NESTED, ("contact_name",)),
    (OUTER, ("contact_name",)),
    (NESTED, ("contactName",)),
    (OUTER, ("contactName",)),
]

CONTACT_ID_PATHS: list[CandidatePath] = [
    (NESTED, ("contact_id",)),
    (NESTED, ("contactId",)),
    (OUTER, ("contact_id",)),
    (OUTER, ("contactId",)),
    (INSTAGRAM, ("sender", "id")),
]

USER_HANDLE_PATHS: list[CandidatePath] = [
    (NESTED, ("user_handle",)),
    (NESTED, ("userHandle",)),
    (NESTED, ("instagramHandle",)),
    (OUTER, ("user_handle",)),
    (OUTER, ("userHandle",)),
    (OUTER, ("instagramHandle",)),
]

MESSAGE_PATHS: list[CandidatePath] = [
    (NESTED, ("message",)),
    (OUTER, ("message",)),
    (NESTED, ("last_inbound_message",)),
    (NESTED, ("lastMessage",)),
    (OUTER, ("last_inbound_message",)),
    (OUTER, ("lastMessage",)),
    (NESTED, ("message", "body")),
    (NESTED, ("message", "text")),
    (NESTED, ("message", "content")),
    (OUTER, ("message", "body")),
    (OUTER, ("message", "text")),
    (OUTER, ("message", "content")),
    (INSTAGRAM, ("message", "text")),
]

SOURCE_PATHS: list[CandidatePath] = [
    (NESTED, ("source",)),
    (OUTER, ("source",)),
    (NESTED, ("source_channel",)),
    (OUTER, ("source_channel",)),
    (NESTED, ("platform",)),
    (OUTER, ("platform",)),
]

CONTACT_EMAIL_PATHS: list[CandidatePath] = [
    (NESTED, ("contact_email",)),
    (NESTED, ("contactEmail",)),
    (OUTER, ("contact_email",)),
    (OUTER, ("contactEmail",)),
]


def is_uuid(value: str | None) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def extract_instagram_event(payload: dict) -> dict:
    """
    First messaging event of a native Instagram Graph webhook
    ({"entry": [{"messaging": [{"sender": {...}, "message": {...}}]}]}), or {}.
    """
    entries = payload.get("entry")
    if not isinstance(entries, list):
        return {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        messaging = entry.get("messaging")
        if not isinstance(messaging, list):
            continue
        for event in messaging:
            if not isinstance(event, dict):
                continue
            message = event.get("message")
            if isinstance(message, dict) and message.get("text"):
                return event
    return {}


def _unwrap(payload: dict) -> dict:
    for key in ("customData", "data"):
        nested = payload.get(key)
        if isinstance(nested, dict):
            return nested
    return payload


def _get_path(obj: Any, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def pick_string(scopes: dict[str, dict], paths: list[CandidatePath]) -> str | None:
    for scope, keys in paths:
        value = _get_path(scopes.get(scope), keys)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def normalize_payload(payload: Any) -> InboundMessage:
    """
    Never raises. A missing message is reported as an empty string; the caller
    decides how to reject it.
    """
    if not isinstance(payload, dict):
        logger.warning("webhook body is not a JSON object type=%s", type(payload).__name__)
        payload = {}

    instagram_event = extract_instagram_event(payload)
    scopes = {
        NESTED: _unwrap(payload),
        OUTER: payload,
        INSTAGRAM: instagram_event,
    }

    raw_coach_id = pick_string(scopes, COACH_ID_PATHS)
    if is_uuid(raw_coach_id):
        coach_id = raw_coach_id
    else:
        coach_id = configs.DEFAULT_COACH_ID
        logger.warning("invalid or missing coach_id received=%r using=%s", raw_coach_id, coach_id)

    contact_id = pick_string(scopes, CONTACT_ID_PATHS) or ""
    placeholder = f"Unknown_User_{int(time.time() * 1000)}"
    contact_name = pick_string(scopes, CONTACT_NAME_PATHS) or contact_id or placeholder
    user_handle = pick_string(scopes, USER_HANDLE_PATHS) or contact_name

    default_source = INSTAGRAM if instagram_event else configs.DEFAULT_SOURCE_CHANNEL
    source_channel = pick_string(scopes, SOURCE_PATHS) or default_source

    inbound = InboundMessage(
        coach_id=coach_id,
        user_handle=user_handle,
        contact_name=contact_name,
        contact_id=contact_id,
        message=pick_string(scopes, MESSAGE_PATHS) or "",
        source_channel=source_channel,
        contact_email=pick_string(scopes, CONTACT_EMAIL_PATHS),
    )
    logger.info(
        "normalized webhook coach_id=%s user_handle=%s contact_id=%s source=%s message_length=%s",
        inbound.coach_id,
        inbound.user_handle,
        inbound.contact_id,
        inbound.source_channel,
        len(inbound.message),
    )
    return inbound
