import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

import dm_assistant.config.config as configs
from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models.click import Click
from dm_assistant.db.models.coach import Coach
from dm_assistant.db.models.offer import Offer
from dm_assistant.db.models.sale import Sale
from dm_assistant.model.sales.sale_request import SaleRequest
from dm_assistant.model.sales.sale_response import SaleResponse

logger = logging.getLogger(__name__)

ATTRIBUTION_WINDOW = timedelta(days=7)
DEFAULT_COMMISSION_RATE = 10.0


class OfferNotFoundError(Exception):
    pass


@dataclass(frozen=True)
class ClickInfo:
    user_agent: str
    forwarded_for: str | None
    real_ip: str | None
    peer_ip: str | None


def tracking_url(slug: str) -> str:
    return f"{configs.PUBLIC_BASE_URL}/api/v1/track/{slug}"


def first_active_offer_link(coach_id: str) -> str | None:
    with session_scope() as db:
        slug = db.execute(
            select(Offer.tracking_slug)
            .where(Offer.coach_id == coach_id, Offer.is_active.is_(True))
            .order_by(Offer.created_at)
            .limit(1)
        ).scalar_one_or_none()
    return tracking_url(slug) if slug else None


def hash_ip(ip: str) -> str:
    return hashlib.sha256(ip.encode()).hexdigest()


def _client_ip(info: ClickInfo) -> str:
    if info.forwarded_for:
        first = info.forwarded_for.split(",")[0].strip()
        if first:
            return first
    return info.real_ip or info.peer_ip or ""


def record_click(slug: str, info: ClickInfo) -> str:
    """Store a click for the offer behind ``slug`` and return its target URL."""
    with session_scope() as db:
        offer = db.execute(select(Offer).where(Offer.tracking_slug == slug)).scalar_one_or_none()
        if offer is None or not offer.target_url:
            raise OfferNotFoundError(slug)

        ip = _client_ip(info)
        db.add(
            Click(
                offer_id=offer.id,
                coach_id=offer.coach_id,
                session_id=str(uuid.uuid4()),
                source_channel="link",
                user_agent=info.user_agent,
                ip_hash=hash_ip(ip) if ip else None,
            )
        )
        logger.info("click recorded slug=%s redirect=%s", slug, offer.target_url)
        return offer.target_url


def record_sale(req: SaleRequest) -> SaleResponse:
    """
    Attribute a sale to the most recent click for the same offer and email
    inside the lookback window, then store it with its commission.
    """
    with session_scope() as db:
        offer = db.execute(select(Offer).where(Offer.tracking_slug == req.offer_slug)).scalar_one_or_none()
        if offer is None:
            raise OfferNotFoundError(req.offer_slug)

        cutoff = datetime.now(timezone.utc) - ATTRIBUTION_WINDOW
        click_id = db.execute(
            select(Click.id)
            .where(
                Click.offer_id == offer.id,
                Click.contact_email == req.contact_email,
                Click.created_at >= cutoff,
            )
            .order_by(Click.created_at.desc())
            .limit(1)
        ).scalar_one_or_none()

        rate = offer.commission_rate
        if not rate:
            rate = db.execute(
                select(Coach.default_commission_rate).where(Coach.id == offer.coach_id)
            ).scalar_one_or_none()
        rate = float(rate or DEFAULT_COMMISSION_RATE)
        commission_due = round(req.amount * rate / 100, 2)

        sale = Sale(
            offer_id=offer.id,
            coach_id=offer.coach_id,
            click_id=click_id,
            external_sale_id=req.external_sale_id,
            contact_email=req.contact_email,
            amount=req.amount,
            currency=req.currency,
            commission_rate_used=rate,
            commission_due=commission_due,
            source="webhook",
            purchased_at=req.purchased_at or datetime.now(timezone.utc),
        )
        db.add(sale)
        db.flush()
        logger.info("sale recorded id=%s offer=%s click=%s", sale.id, offer.id, click_id)
        return SaleResponse(sale_id=sale.id, commission_due=commission_due)
