from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from dm_assistant.db.models._types import JSONType, new_id
from dm_assistant.db.session import Base


class DMSession(Base):
    __tablename__ = "dm_sessions"
    __table_args__ = (UniqueConstraint("coach_id", "user_handle", name="uq_dm_sessions_handle"),)

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), nullable=False, index=True)
    user_handle = Column(String, nullable=False)
    # Inbound messages that reached the engine, neutral replies included
    question_count = Column(Integer, default=0, nullable=False)
    last_question_at = Column(DateTime(timezone=True), nullable=True)
    # Rolling [{role, content}] history, most recent last
    messages = Column(JSONType, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
