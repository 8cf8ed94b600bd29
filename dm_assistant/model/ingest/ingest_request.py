from pydantic import BaseModel
from typing import Optional


class IngestRequest(BaseModel):
    # All optional so missing fields surface as an ingestion failure, not a 422
    file_id: Optional[str] = None
    coach_id: Optional[str] = None
    file_url: Optional[str] = None
    filename: Optional[str] = None
