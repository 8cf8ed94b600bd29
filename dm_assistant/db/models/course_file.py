from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class CourseFile(Base):
    __tablename__ = "course_files"

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), nullable=False, index=True)
    filename = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    # Set once ingestion stored its chunks
    processed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
