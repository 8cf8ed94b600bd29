from dm_assistant.service.assistant.prompt import BEHAVIOR_RULES, build_messages, build_system_prompt
from dm_assistant.service.coach.coach import CoachProfile


def _coach(**overrides) -> CoachProfile:
    values = dict(
        id="6abbc19a-ef88-4359-9dde-169d247f696f",
        name="Jordan Lee",
        brand_name=None,
        plan="basic",
        system_prompt=None,
        tone="professional",
        response_style="detailed",
        brand_voice="Dry humour, short sentences",
        escalation_email=None,
        cta_threshold=3,
        main_checkout_url=None,
    )
    values.update(overrides)
    return CoachProfile(**values)


def test_knowledge_prompt_has_context_block():
    prompt = build_system_prompt(_coach(brand_name="Lift Lab"), "KNOWLEDGE", "Sam", 2, "SALES_INTENT", True)

    assert prompt.startswith("KNOWLEDGE\n\n")
    assert BEHAVIOR_RULES in prompt
    assert "- Responding as Lift Lab on Instagram DM" in prompt
    assert "- Message #2 from this person" in prompt
    assert "- Their name: Sam" in prompt
    assert "- They seem interested in buying" in prompt
    assert "DO NOT repeat" in prompt


def test_knowledge_prompt_without_history():
    prompt = build_system_prompt(_coach(), "KNOWLEDGE", "", 1, "QUESTION", False)

    assert "- Their name: unknown" in prompt
    assert "- They have a question" in prompt
    assert "DO NOT repeat" not in prompt


def test_premium_custom_prompt_used_without_knowledge():
    prompt = build_system_prompt(_coach(plan="premium", system_prompt="CUSTOM"), "", "Sam", 1, "QUESTION", False)

    assert prompt == f"CUSTOM\n\n{BEHAVIOR_RULES}"


def test_custom_prompt_ignored_below_premium():
    prompt = build_system_prompt(_coach(plan="standard", system_prompt="CUSTOM"), "", "Sam", 1, "QUESTION", False)

    assert "CUSTOM" not in prompt
    assert prompt.startswith("You are responding to DMs for Jordan Lee.")


def test_basic_fallback_ignores_tone_and_voice():
    prompt = build_system_prompt(_coach(), "", "Sam", 1, "QUESTION", False)

    assert "- Be helpful and conversational" in prompt
    assert "- Keep it brief" in prompt
    assert "polished" not in prompt
    assert "Voice:" not in prompt


def test_standard_fallback_uses_tone_and_style():
    prompt = build_system_prompt(_coach(plan="standard"), "", "Sam", 1, "QUESTION", False)

    assert "- Be polished, articulate, and business-like" in prompt
    assert "- Provide thorough, comprehensive answers" in prompt
    assert "Voice:" not in prompt


def test_premium_fallback_adds_brand_voice():
    prompt = build_system_prompt(_coach(plan="premium"), "", "Sam", 1, "QUESTION", False)

    assert prompt.endswith("- Voice: Dry humour, short sentences")


def test_build_messages_keeps_last_ten_turns():
    history = [{"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}"} for i in range(14)]

    messages = build_messages("SYSTEM", history, "latest")

    assert messages[0] == {"role": "system", "content": "SYSTEM"}
    assert [m["content"] for m in messages[1:-1]] == [f"m{i}" for i in range(4, 14)]
    assert messages[-1] == {"role": "user", "content": "latest"}


def test_build_messages_skips_malformed_entries():
    messages = build_messages("SYSTEM", [{"role": "assistant"}, "junk", {"role": "bot", "content": "x"}], "hi")

    assert messages[1:] == [{"role": "user", "content": "x"}, {"role": "user", "content": "hi"}]
