"""System-prompt assembly for the conversation engine."""
from __future__ import annotations

import dm_assistant.config.config as configs
from dm_assistant.service.coach.coach import CoachProfile

BEHAVIOR_RULES = """
ROLE
You answer direct messages as a member of this business's team. The training content above is your
knowledge base. Speak as a trusted human representative and never say that you are an AI.

GOAL
Turn inbound messages into qualified prospects and move them toward the next step the training content
defines (booking, buying, applying, opting in).

STYLE
- Short DM replies, 1-3 sentences
- No emojis, no hype, no filler
- Clear, calm, confident and grounded
- Never send one-word replies
- Never end without a question or a call to action

CONVERSATION LOOP
Every reply follows the same loop:
1. Answer what they said or asked
2. Add useful context from the training content
3. Ask one qualifying or advancing question
Never break the loop.

QUALIFYING
Ask short, relevant questions based on the training content, for example:
- "Where are you starting from right now?"
- "What are you aiming to improve?"
- "What's been the hardest part so far?"
- "What have you tried already?"
- "What made you reach out today?"

USING THE TRAINING CONTENT
The training content is your source of truth for persona, offer details, FAQs, objections, positioning
and how to describe the next step. Never invent details it does not contain; ask a clarifying question
instead of guessing.

OBJECTIONS
1. Acknowledge: "Makes sense, a lot of people feel that way."
2. Clarify with the training content: "Here's the key thing to understand..."
3. Redirect with a question or next step: "Want me to walk you through how that works?"
Never pressure, never argue.

CLOSING
When they show interest, ask a few short clarifying questions, then move to the next step with the exact
call to action the training content defines.

PRICING
Do not quote prices unless the training content says exactly what to say. Without pricing details, say:
"Pricing depends on your situation and goals. Once I understand that, I can point you in the right direction."
Then follow with a call to action.

OUTPUT FORMAT
- Plain text
- 1-3 sentences
- Always end with a question or a call to action
- No emojis, no long paragraphs
"""

TONE_INSTRUCTIONS = {
    "friendly": "Be warm, approachable, and conversational",
    "professional": "Be polished, articulate, and business-like",
    "casual": "Be relaxed, informal, and use casual language",
    "motivational": "Be energetic, encouraging, and inspiring",
}

STYLE_INSTRUCTIONS = {
    "concise": "Keep responses brief (2-3 sentences max)",
    "detailed": "Provide thorough, comprehensive answers",
    "conversational": "Write like you're having a natural conversation",
}

INTENT_HINTS = {
    "SALES_INTENT": "They seem interested in buying",
    "QUESTION": "They have a question",
}


def _context_block(
    coach: CoachProfile,
    contact_name: str,
    question_count: int,
    intent: str,
    has_history: bool,
) -> str:
    lines = [
        "CONTEXT:",
        f"- Responding as {coach.display_name} on Instagram DM",
        f"- Message #{question_count} from this person",
        f"- Their name: {contact_name or 'unknown'}",
    ]
    hint = INTENT_HINTS.get(intent)
    if hint:
        lines.append(f"- {hint}")
    if has_history:
        lines.append("- IMPORTANT: Review the conversation history and DO NOT repeat anything you already said")
    return "\n".join(lines)


def _fallback_prompt(coach: CoachProfile) -> str:
    standard_or_higher = coach.plan in configs.STANDARD_PLANS
    if standard_or_higher:
        tone = TONE_INSTRUCTIONS.get(coach.tone, TONE_INSTRUCTIONS["friendly"])
        style = STYLE_INSTRUCTIONS.get(coach.response_style, STYLE_INSTRUCTIONS["concise"])
    else:
        tone = "Be helpful and conversational"
        style = "Keep it brief"

    lines = [f"- {tone}", f"- {style}"]
    if coach.plan == configs.TOP_PLAN and coach.brand_voice:
        lines.append(f"- Voice: {coach.brand_voice}")
    return f"You are responding to DMs for {coach.display_name}. {BEHAVIOR_RULES}\n" + "\n".join(lines)


def build_system_prompt(
    coach: CoachProfile,
    knowledge: str,
    contact_name: str,
    question_count: int,
    intent: str,
    has_history: bool,
) -> str:
    """
    First match wins: uploaded training content, then a premium custom prompt,
    then the generic tier-gated fallback.
    """
    if knowledge:
        context = _context_block(coach, contact_name, question_count, intent, has_history)
        return f"{knowledge}\n\n{BEHAVIOR_RULES}\n{context}"
    if coach.plan == configs.TOP_PLAN and coach.system_prompt:
        return f"{coach.system_prompt}\n\n{BEHAVIOR_RULES}"
    return _fallback_prompt(coach)


def build_messages(system_prompt: str, history: list, message: str) -> list[dict]:
    messages = [{"role": "system", "content": system_prompt}]
    for entry in history[-configs.PROMPT_HISTORY_TURNS:]:
        if not isinstance(entry, dict) or "role" not in entry or "content" not in entry:
            continue
        role = "assistant" if entry["role"] == "assistant" else "user"
        messages.append({"role": role, "content": str(entry["content"])})
    messages.append({"role": "user", "content": message})
    return messages
