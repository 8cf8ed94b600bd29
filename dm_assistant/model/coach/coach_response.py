from pydantic import BaseModel


class CreateCoachResponse(BaseModel):
    success: bool = True
    coach_id: str
