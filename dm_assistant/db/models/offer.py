from sqlalchemy import Boolean, Column, DateTime, Numeric, String
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class Offer(Base):
    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), nullable=False, index=True)
    name = Column(String, nullable=False)
    tracking_slug = Column(String, unique=True, nullable=False)
    target_url = Column(String, nullable=True)
    base_price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    commission_rate = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
