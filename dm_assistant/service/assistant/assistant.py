import asyncio
import logging
import random
from collections.abc import Callable
from typing import Any

from openai import APIStatusError

from dm_assistant.client.llm.chatgpt import chat_completion
from dm_assistant.model.assistant.assistant_response import AssistantResponse
from dm_assistant.model.assistant.inbound_message import InboundMessage
from dm_assistant.service.assistant.cta import apply_cta
from dm_assistant.service.assistant.errors import AssistantError
from dm_assistant.service.assistant.intent import DEFAULT_INTENT, classify_message
from dm_assistant.service.assistant.normalizer import normalize_payload
from dm_assistant.service.assistant.prompt import build_messages, build_system_prompt
from dm_assistant.service.coach.coach import load_coach
from dm_assistant.service.contact.contact import upsert_contact
from dm_assistant.service.context import session_store
from dm_assistant.service.context.conversation_lock import conversation_lock
from dm_assistant.service.knowledge.knowledge_store import load_corpus

logger = logging.getLogger(__name__)

MISSING_MESSAGE_REPLY = "Sorry, I couldn't process your message."
BUSY_REPLY = "Sorry, I'm a bit busy right now. Please try again in a moment."
UPSTREAM_FAILURE_REPLY = "Sorry, something went wrong. Please try again later."
GENERIC_FAILURE_REPLY = "Sorry, something went wrong. Please try again."
EMPTY_COMPLETION_REPLY = "Sorry, I couldn't generate a response. Please try again."

NEUTRAL_INTENTS = ("LOW_EFFORT", "PERSONAL")

LOW_EFFORT_REPLIES = (
    "🙌",
    "Thanks! Let me know if you have any questions.",
    "👊",
)
PERSONAL_REPLIES = (
    "{greeting} What's up?",
    "{greeting} How's it going?",
    "{greeting} Good to hear from you. What's on your mind?",
)


async def ai_service(payload: Any) -> AssistantResponse:
    inbound = normalize_payload(payload)
    if not inbound.message:
        logger.error("missing required field: message")
        raise AssistantError(400, "Missing required field: message is required", MISSING_MESSAGE_REPLY)

    async with conversation_lock(inbound.coach_id, inbound.user_handle):
        try:
            return await _converse(inbound)
        except AssistantError:
            raise
        except Exception as exc:
            logger.exception("conversation pipeline failed coach_id=%s user_handle=%s", inbound.coach_id, inbound.user_handle)
            raise AssistantError(500, str(exc) or "Unknown error occurred", GENERIC_FAILURE_REPLY) from exc


async def _converse(inbound: InboundMessage) -> AssistantResponse:
    existing = await asyncio.to_thread(session_store.peek, inbound.coach_id, inbound.user_handle)

    # Once a conversation has momentum, short answers to qualifying questions
    # must stay in the full pipeline.
    if existing is not None and existing.question_count > 0:
        intent = DEFAULT_INTENT
        logger.info("conversation established question_count=%s, treating as %s", existing.question_count, intent)
        handler = conversation_service
    else:
        intent = await classify_message(inbound.message)
        logger.info("message classified as %s", intent)
        handler = _get_intent_handler(intent)

    try:
        return await handler(inbound, intent)
    except AssistantError:
        raise
    except Exception as exc:
        logger.exception("%s handler failed coach_id=%s user_handle=%s", intent, inbound.coach_id, inbound.user_handle)
        raise AssistantError(500, str(exc) or "Unknown error occurred", GENERIC_FAILURE_REPLY, intent=intent) from exc


def _get_intent_handler(intent: str) -> Callable[[InboundMessage, str], "asyncio.Future[AssistantResponse]"]:
    if intent in NEUTRAL_INTENTS:
        return neutral_service
    return conversation_service


def looks_like_name(contact_name: str | None) -> bool:
    return bool(contact_name) and not contact_name.strip().isdigit() and "Unknown" not in contact_name


def neutral_reply(intent: str, contact_name: str | None, choice: Callable = random.choice) -> str:
    if intent == "LOW_EFFORT":
        return choice(LOW_EFFORT_REPLIES)
    first_name = contact_name.split()[0] if looks_like_name(contact_name) else ""
    greeting = f"Hey {first_name}!" if first_name else "Hey!"
    return choice(PERSONAL_REPLIES).format(greeting=greeting)


async def neutral_service(inbound: InboundMessage, intent: str) -> AssistantResponse:
    """Canned reply for low-value openers: no knowledge lookup, no model call."""
    session = await asyncio.to_thread(session_store.get_or_create, inbound.coach_id, inbound.user_handle)
    try:
        session = await asyncio.to_thread(session_store.increment, session)
        question_count = session.question_count
    except Exception:
        logger.warning("session count update failed session_id=%s", session.id, exc_info=True)
        question_count = session.question_count + 1

    reply = neutral_reply(intent, inbound.contact_name)
    return AssistantResponse(
        reply=reply,
        message=reply,
        question_count=question_count,
        tracking_link=None,
        should_reply=True,
        intent=intent,
    )


def _upstream_error(exc: Exception, question_count: int, intent: str) -> AssistantError:
    status = exc.status_code if isinstance(exc, APIStatusError) else None
    if status == 429:
        return AssistantError(429, "Rate limit exceeded. Please try again later.", BUSY_REPLY, question_count, intent)
    if status == 402:
        return AssistantError(402, "AI service credits exhausted.", UPSTREAM_FAILURE_REPLY, question_count, intent)
    return AssistantError(500, "AI gateway error", GENERIC_FAILURE_REPLY, question_count, intent)


async def conversation_service(inbound: InboundMessage, intent: str) -> AssistantResponse:
    await asyncio.to_thread(upsert_contact, inbound)

    session = await asyncio.to_thread(session_store.get_or_create, inbound.coach_id, inbound.user_handle)
    try:
        session = await asyncio.to_thread(session_store.increment, session)
        question_count = session.question_count
    except Exception:
        logger.warning("session count update failed session_id=%s", session.id, exc_info=True)
        question_count = session.question_count + 1

    coach = await asyncio.to_thread(load_coach, inbound.coach_id)

    try:
        knowledge = await asyncio.to_thread(load_corpus, inbound.coach_id)
    except Exception:
        logger.warning("knowledge lookup failed coach_id=%s", inbound.coach_id, exc_info=True)
        knowledge = ""

    history = session.messages
    system_prompt = build_system_prompt(
        coach,
        knowledge,
        inbound.contact_name,
        question_count,
        intent,
        has_history=bool(history),
    )
    messages = build_messages(system_prompt, history, inbound.message)

    try:
        draft = await asyncio.to_thread(chat_completion, messages)
    except Exception as exc:
        logger.exception("chat completion failed coach_id=%s", inbound.coach_id)
        raise _upstream_error(exc, question_count, intent) from exc

    reply = (draft or "").strip() or EMPTY_COMPLETION_REPLY

    try:
        await asyncio.to_thread(
            session_store.append_history,
            session,
            [{"role": "user", "content": inbound.message}, {"role": "assistant", "content": reply}],
        )
    except Exception:
        logger.warning("history update failed session_id=%s", session.id, exc_info=True)

    reply, tracking_link = await apply_cta(reply, question_count, coach)

    return AssistantResponse(
        reply=reply,
        message=reply,
        question_count=question_count,
        tracking_link=tracking_link,
        should_reply=True,
        intent=intent,
    )
