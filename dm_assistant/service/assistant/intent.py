import asyncio
import logging
import re

import dm_assistant.config.config as configs
from dm_assistant.client.llm.chatgpt import CLASSIFIER_MODEL, chat_completion

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "QUESTION"

# Affirmative replies are engagement, not low effort.
AFFIRMATIVE_RE = re.compile(
    r"^(yes|yea|yeah|yep|yup|sure|ok|okay|definitely|absolutely|please|yes please|yea please|"
    r"tell me|tell me more|show me|show me more|i'?m interested|interested|very interested|"
    r"sounds good|let'?s do it|let'?s go|go ahead|for sure|100%|bet|down|i'?m down|i'?m in)"
    r"[.!]*$",
    re.IGNORECASE,
)

CLASSIFY_PROMPT = """Classify this Instagram DM message into exactly one category. Reply with ONLY the category name, nothing else.

Categories:
- SALES_INTENT: asking about buying, pricing or enrolling, or otherwise showing buying intent
- QUESTION: a genuine question or request for information, OR an affirmative reply that continues the conversation ("yes", "tell me more", "interested")
- PERSONAL: casual or personal chat unrelated to business ("hey bro", "what's up")
- LOW_EFFORT: ONLY emoji-only messages or empty reactions ("🔥", "lol", "😂😂"). Affirmative replies are NOT low effort.

Message: "{message}"

Category:"""


def is_affirmative(message: str) -> bool:
    return AFFIRMATIVE_RE.match((message or "").strip()) is not None


def parse_intent(raw: str) -> str:
    label = (raw or "").strip().upper().strip(" .:\"'`*")
    if label in configs.INTENTS:
        return label
    logger.warning("unrecognized intent label=%r, defaulting to %s", raw, DEFAULT_INTENT)
    return DEFAULT_INTENT


async def classify_message(message: str) -> str:
    """Label a message; any classifier failure degrades to QUESTION."""
    if is_affirmative(message):
        logger.info("message matched affirmative pattern, classifying as %s", DEFAULT_INTENT)
        return DEFAULT_INTENT

    prompt = CLASSIFY_PROMPT.format(message=message)
    try:
        raw = await asyncio.to_thread(
            chat_completion,
            [{"role": "user", "content": prompt}],
            CLASSIFIER_MODEL,
            20,
        )
    except Exception:
        logger.warning("intent classification failed, defaulting to %s", DEFAULT_INTENT, exc_info=True)
        return DEFAULT_INTENT

    return parse_intent(raw)
