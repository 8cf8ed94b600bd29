from pydantic import BaseModel


class InboundMessage(BaseModel):
    """Canonical form of a vendor webhook after normalization."""

    coach_id: str
    user_handle: str
    contact_name: str
    contact_id: str = ""
    message: str = ""
    source_channel: str
    contact_email: str | None = None
