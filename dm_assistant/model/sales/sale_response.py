from pydantic import BaseModel


class SaleResponse(BaseModel):
    success: bool = True
    sale_id: str
    commission_due: float
