from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from dm_assistant.client.db.psql import session_scope
from dm_assistant.db.models import Click, Sale
from dm_assistant.service.tracking.tracking import ClickInfo, _client_ip, hash_ip

SALE = {
    "offer_slug": "starter",
    "contact_email": "sam@example.com",
    "amount": 497,
    "external_sale_id": "ch_123",
}


def _click(offer_id: str, coach_id: str, email: str, age: timedelta) -> str:
    with session_scope() as db:
        click = Click(
            offer_id=offer_id,
            coach_id=coach_id,
            session_id="s-1",
            contact_email=email,
            created_at=datetime.now(timezone.utc) - age,
        )
        db.add(click)
        db.flush()
        return click.id


def test_track_redirects_and_records_click(client, make_coach, make_offer):
    coach_id = make_coach()
    offer_id = make_offer(coach_id)

    response = client.get(
        "/api/v1/track/starter",
        headers={"user-agent": "Instagram 300.0", "x-forwarded-for": "203.0.113.7, 10.0.0.1"},
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "https://shop.example.com/starter"

    with session_scope() as db:
        click = db.execute(select(Click)).scalar_one()
        assert click.offer_id == offer_id
        assert click.coach_id == coach_id
        assert click.user_agent == "Instagram 300.0"
        assert click.ip_hash == hash_ip("203.0.113.7")
        assert click.session_id


def test_track_unknown_slug(client):
    response = client.get("/api/v1/track/missing", follow_redirects=False)

    assert response.status_code == 404
    assert response.text == "Offer not found"


def test_track_offer_without_target(client, make_coach, make_offer):
    make_offer(make_coach(), target_url=None)

    response = client.get("/api/v1/track/starter", follow_redirects=False)

    assert response.status_code == 404


def test_client_ip_preference():
    assert _client_ip(ClickInfo("ua", "1.1.1.1, 2.2.2.2", "3.3.3.3", "4.4.4.4")) == "1.1.1.1"
    assert _client_ip(ClickInfo("ua", None, "3.3.3.3", "4.4.4.4")) == "3.3.3.3"
    assert _client_ip(ClickInfo("ua", None, None, "4.4.4.4")) == "4.4.4.4"
    assert _client_ip(ClickInfo("ua", None, None, None)) == ""


def test_sale_attributed_to_recent_click(client, make_coach, make_offer):
    coach_id = make_coach()
    offer_id = make_offer(coach_id, commission_rate=20)
    _click(offer_id, coach_id, "sam@example.com", timedelta(days=3))
    recent = _click(offer_id, coach_id, "sam@example.com", timedelta(hours=2))
    _click(offer_id, coach_id, "other@example.com", timedelta(hours=1))

    response = client.post("/api/v1/sales-webhook", json=SALE)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["commission_due"] == pytest.approx(99.4)

    with session_scope() as db:
        sale = db.get(Sale, body["sale_id"])
        assert sale.click_id == recent
        assert sale.commission_rate_used == pytest.approx(20)
        assert sale.currency == "USD"
        assert sale.source == "webhook"


def test_sale_outside_window_is_unattributed(client, make_coach, make_offer):
    coach_id = make_coach()
    offer_id = make_offer(coach_id)
    _click(offer_id, coach_id, "sam@example.com", timedelta(days=8))

    body = client.post("/api/v1/sales-webhook", json=SALE).json()

    with session_scope() as db:
        assert db.get(Sale, body["sale_id"]).click_id is None


def test_commission_falls_back_to_coach_rate(client, make_coach, make_offer):
    make_offer(make_coach(default_commission_rate=15))

    body = client.post("/api/v1/sales-webhook", json={**SALE, "amount": 200}).json()

    assert body["commission_due"] == pytest.approx(30.0)


def test_commission_default_rate(client, make_coach, make_offer):
    make_offer(make_coach())

    body = client.post("/api/v1/sales-webhook", json={**SALE, "amount": 200}).json()

    assert body["commission_due"] == pytest.approx(20.0)


def test_sale_for_unknown_offer(client):
    response = client.post("/api/v1/sales-webhook", json={**SALE, "offer_slug": "missing"})

    assert response.status_code == 404
    assert response.json() == {"error": "Offer not found"}
