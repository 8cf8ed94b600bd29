import pytest

import dm_assistant.service.assistant.intent as intent_module


@pytest.mark.asyncio
async def test_affirmative_skips_model(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("model must not be called")

    monkeypatch.setattr(intent_module, "chat_completion", fail)

    for message in ["yes", "Yeah!", "tell me more", "I'm interested", "let's do it."]:
        assert await intent_module.classify_message(message) == "QUESTION"


@pytest.mark.asyncio
async def test_model_label_is_used(monkeypatch):
    captured = {}

    def fake_chat_completion(messages, model=None, max_tokens=None):
        captured["messages"] = messages
        captured["max_tokens"] = max_tokens
        return " low_effort. "

    monkeypatch.setattr(intent_module, "chat_completion", fake_chat_completion)

    assert await intent_module.classify_message("🔥🔥") == "LOW_EFFORT"
    assert '"🔥🔥"' in captured["messages"][0]["content"]
    assert captured["max_tokens"] == 20


@pytest.mark.asyncio
async def test_unknown_label_defaults_to_question(monkeypatch):
    monkeypatch.setattr(intent_module, "chat_completion", lambda *args, **kwargs: "SPAM")

    assert await intent_module.classify_message("buy followers") == "QUESTION"


@pytest.mark.asyncio
async def test_classifier_failure_defaults_to_question(monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("timeout")

    monkeypatch.setattr(intent_module, "chat_completion", broken)

    assert await intent_module.classify_message("how much?") == "QUESTION"


def test_parse_intent():
    assert intent_module.parse_intent("SALES_INTENT") == "SALES_INTENT"
    assert intent_module.parse_intent("'personal'") == "PERSONAL"
    assert intent_module.parse_intent("") == "QUESTION"


def test_is_affirmative_is_anchored():
    assert intent_module.is_affirmative("sure")
    assert not intent_module.is_affirmative("sure, but how much is it?")
