from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(36), primary_key=True, default=new_id)
    offer_id = Column(String(36), nullable=True)
    coach_id = Column(String(36), nullable=False, index=True)
    # Attributed click within the lookback window, if any
    click_id = Column(String(36), nullable=True)
    external_sale_id = Column(String, nullable=False)
    contact_email = Column(String, nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), default="USD", nullable=True)
    commission_rate_used = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    commission_due = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    # webhook | manual
    source = Column(String, nullable=True)
    purchased_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
