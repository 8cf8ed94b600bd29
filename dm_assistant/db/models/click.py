from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class Click(Base):
    __tablename__ = "clicks"

    id = Column(String(36), primary_key=True, default=new_id)
    offer_id = Column(String(36), nullable=False, index=True)
    coach_id = Column(String(36), nullable=False)
    session_id = Column(String(36), nullable=False)
    source_channel = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    # sha256 of the caller address, never the raw ip
    ip_hash = Column(String(64), nullable=True)
    contact_email = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
