from pydantic import BaseModel


class IngestResponse(BaseModel):
    success: bool = True
    chunks_created: int
    total_chars: int
    message: str


class IngestErrorResponse(BaseModel):
    success: bool = False
    error: str
