from dataclasses import dataclass

from sqlalchemy import select

import dm_assistant.config.config as configs
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models.coach import Coach


class CoachNotFoundError(Exception):
    pass


@dataclass(frozen=True)
class CoachProfile:
    id: str
    name: str
    brand_name: str | None
    plan: str
    system_prompt: str | None
    tone: str
    response_style: str
    brand_voice: str | None
    escalation_email: str | None
    cta_threshold: int
    main_checkout_url: str | None

    @property
    def display_name(self) -> str:
        return self.brand_name or self.name


def load_coach(coach_id: str) -> CoachProfile:
    with session_scope() as db:
        coach = db.execute(select(Coach).where(Coach.id == coach_id)).scalar_one_or_none()
        if coach is None:
            raise CoachNotFoundError(f"Coach not found: {coach_id}")
        return CoachProfile(
            id=coach.id,
            name=coach.name,
            brand_name=coach.brand_name,
            plan=coach.plan or "basic",
            system_prompt=coach.system_prompt,
            tone=coach.tone or "friendly",
            response_style=coach.response_style or "concise",
            brand_voice=coach.brand_voice,
            escalation_email=coach.escalation_email,
            cta_threshold=coach.max_questions_before_cta or configs.DEFAULT_CTA_THRESHOLD,
            main_checkout_url=coach.main_checkout_url,
        )
