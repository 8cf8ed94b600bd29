from pydantic import BaseModel
from typing import Optional


class CreateCoachRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    brand_name: Optional[str] = None
    plan: Optional[str] = None
