from pydantic import BaseModel
from typing import Optional


class AssistantResponse(BaseModel):
    reply: str
    # Alias of reply; some vendors read "message"
    message: str
    question_count: int
    tracking_link: Optional[str] = None
    should_reply: bool = True
    intent: Optional[str] = None


class AssistantErrorResponse(AssistantResponse):
    error: str
    should_reply: bool = False
