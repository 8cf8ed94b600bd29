from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class Contact(Base):
    __tablename__ = "contacts"
    __table_args__ = (UniqueConstraint("coach_id", "platform", "contact_id", name="uq_contacts_identity"),)

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), nullable=False, index=True)
    # instagram | manychat | ... (normalized source channel)
    platform = Column(String, nullable=False)
    # Vendor-side contact identifier
    contact_id = Column(String, nullable=False)
    user_handle = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
