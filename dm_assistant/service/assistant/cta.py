import asyncio
import logging

from dm_assistant.service.coach.coach import CoachProfile
from dm_assistant.service.tracking.tracking import first_active_offer_link

logger = logging.getLogger(__name__)

CTA_TEMPLATES = (
    "From what you've shared, sounds like this could be a good fit. Here's where you can take the next step: {link}",
    "Based on what you're telling me, I think you'd get a lot out of this. Check it out here: {link}",
    "Honestly, this sounds like exactly what you need. Here's the link if you want to move forward: {link}",
)


def cta_due(question_count: int, threshold: int) -> bool:
    return question_count >= threshold


async def resolve_cta_link(coach: CoachProfile) -> str | None:
    """Checkout URL first, then the tracking link of the first active offer."""
    if coach.main_checkout_url:
        return coach.main_checkout_url
    return await asyncio.to_thread(first_active_offer_link, coach.id)


def inject_cta(reply: str, question_count: int, link: str | None) -> str:
    if not link:
        return reply
    phrase = CTA_TEMPLATES[question_count % len(CTA_TEMPLATES)].format(link=link)
    return f"{reply}\n\n{phrase}"


async def apply_cta(reply: str, question_count: int, coach: CoachProfile) -> tuple[str, str | None]:
    """Return the final reply and the tracking link that was appended, if any."""
    if not cta_due(question_count, coach.cta_threshold):
        return reply, None

    link = await resolve_cta_link(coach)
    if not link:
        logger.info("no CTA link available coach_id=%s, set main_checkout_url or an active offer", coach.id)
        return reply, None

    logger.info("adding CTA at message #%s threshold=%s link=%s", question_count, coach.cta_threshold, link)
    return inject_cta(reply, question_count, link), link
