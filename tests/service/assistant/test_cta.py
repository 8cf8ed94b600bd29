import pytest

from dm_assistant.service.assistant.cta import CTA_TEMPLATES, apply_cta, cta_due, inject_cta
from dm_assistant.service.coach.coach import CoachProfile

LINK = "https://pay.example.com/checkout"


def _coach(**overrides) -> CoachProfile:
    values = dict(
        id="6abbc19a-ef88-4359-9dde-169d247f696f",
        name="Jordan Lee",
        brand_name=None,
        plan="basic",
        system_prompt=None,
        tone="friendly",
        response_style="concise",
        brand_voice=None,
        escalation_email=None,
        cta_threshold=3,
        main_checkout_url=LINK,
    )
    values.update(overrides)
    return CoachProfile(**values)


def test_cta_due():
    assert not cta_due(2, 3)
    assert cta_due(3, 3)
    assert cta_due(10, 3)


def test_inject_cta_rotates_by_count():
    assert inject_cta("Answer.", 3, LINK) == "Answer.\n\n" + CTA_TEMPLATES[0].format(link=LINK)
    assert inject_cta("Answer.", 4, LINK) == "Answer.\n\n" + CTA_TEMPLATES[1].format(link=LINK)
    assert inject_cta("Answer.", 5, LINK) == "Answer.\n\n" + CTA_TEMPLATES[2].format(link=LINK)


def test_inject_cta_without_link():
    assert inject_cta("Answer.", 3, None) == "Answer."


@pytest.mark.asyncio
async def test_apply_cta_below_threshold():
    reply, link = await apply_cta("Answer.", 2, _coach())

    assert reply == "Answer."
    assert link is None


@pytest.mark.asyncio
async def test_apply_cta_prefers_checkout_url():
    reply, link = await apply_cta("Answer.", 3, _coach())

    assert link == LINK
    assert reply.endswith(LINK)


@pytest.mark.asyncio
async def test_apply_cta_falls_back_to_offer(make_coach, make_offer):
    coach_id = make_coach()
    make_offer(coach_id, tracking_slug="reset-90")

    reply, link = await apply_cta("Answer.", 3, _coach(main_checkout_url=None))

    assert link.endswith("/api/v1/track/reset-90")
    assert link in reply


@pytest.mark.asyncio
async def test_apply_cta_ignores_inactive_offer(make_coach, make_offer):
    coach_id = make_coach()
    make_offer(coach_id, is_active=False)

    reply, link = await apply_cta("Answer.", 3, _coach(main_checkout_url=None))

    assert reply == "Answer."
    assert link is None
