from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class Coach(Base):
    __tablename__ = "coaches"

    id = Column(String(36), primary_key=True, default=new_id)
    # Auth identity that owns this tenant
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    brand_name = Column(String, nullable=True)
    # basic | standard | premium
    plan = Column(String, default="basic", nullable=False)
    # Premium-only custom instructions used when no training content exists
    system_prompt = Column(Text, nullable=True)
    # friendly | professional | casual | motivational
    tone = Column(String, nullable=True)
    # concise | detailed | conversational
    response_style = Column(String, nullable=True)
    brand_voice = Column(Text, nullable=True)
    escalation_email = Column(String, nullable=True)
    max_questions_before_cta = Column(Integer, nullable=True)
    main_checkout_url = Column(String, nullable=True)
    default_commission_rate = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
