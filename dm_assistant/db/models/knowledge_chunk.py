from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from dm_assistant.db.models._types import new_id
from dm_assistant.db.session import Base


class KnowledgeChunk(Base):
    __tablename__ = "embeddings"

    id = Column(String(36), primary_key=True, default=new_id)
    coach_id = Column(String(36), nullable=False, index=True)
    # Originating course file, when the ingestion request carried one
    file_id = Column(String(36), nullable=True, index=True)
    # Position inside its ingestion run; breaks created_at ties
    chunk_index = Column(Integer, default=0, nullable=False)
    content_chunk = Column(Text, nullable=False)
    # Placeholder, no vectors are computed
    embedding_vector = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
