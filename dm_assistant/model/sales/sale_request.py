from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SaleRequest(BaseModel):
    offer_slug: str
    contact_email: str
    amount: float
    currency: str = "USD"
    external_sale_id: str
    purchased_at: Optional[datetime] = None
