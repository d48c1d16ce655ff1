import datetime as dt

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from django.utils import timezone
from inventory import services
from inventory.models import StockReservation
from inventory.tests.factories import StockReservationFactory
from rest_framework.test import APIClient

BASE = "/api/v1/stock"


@pytest.fixture
def client():
    return APIClient()


def _reserve(client, product_id, quantity, session_id="cart-A", **extra):
    payload = {"product_id": product_id, "quantity": quantity, "session_id": session_id, **extra}
    return client.post(f"{BASE}/reserve/", payload, format="json")


@pytest.mark.django_db
def test_reserve_returns_reservation_and_remaining_stock(client):
    product = ProductFactory(stock=10)

    resp = _reserve(client, product.id, 4)

    assert resp.status_code == 201
    body = resp.json()["reservation"]
    assert body["product_id"] == product.id
    assert body["session_id"] == "cart-A"
    assert body["quantity"] == 4
    assert body["status"] == "reserved"
    assert body["available_stock"] == 6
    assert body["expires_at"]

    avail = client.get(f"{BASE}/available/{product.id}/")
    assert avail.status_code == 200
    assert avail.json() == {"product_id": product.id, "available_stock": 6}


@pytest.mark.django_db
def test_reserve_insufficient_stock_reports_numbers(client):
    product = ProductFactory(stock=2)

    resp = _reserve(client, product.id, 3)

    assert resp.status_code == 400
    body = resp.json()
    assert body["available_stock"] == 2
    assert body["requested_quantity"] == 3
    assert "Insufficient stock" in body["detail"]
    assert not StockReservation.objects.exists()


@pytest.mark.django_db
def test_reserve_validation_and_lookup_errors(client):
    product = ProductFactory(stock=5)
    inactive = ProductFactory(stock=5, is_active=False)

    assert _reserve(client, product.id, 0).status_code == 400
    assert client.post(f"{BASE}/reserve/", {"product_id": product.id}, format="json").status_code == 400
    assert _reserve(client, product.id, 1, ttl_minutes=0).status_code == 400
    assert _reserve(client, product.id, 1, ttl_minutes=100000).status_code == 400
    assert _reserve(client, inactive.id, 1).status_code == 400

    missing = _reserve(client, 999999, 1)
    assert missing.status_code == 404
    assert "not found" in missing.json()["detail"]


@pytest.mark.django_db
def test_reserve_accepts_custom_ttl(client):
    product = ProductFactory(stock=5)

    resp = _reserve(client, product.id, 1, ttl_minutes=5)

    assert resp.status_code == 201
    res = StockReservation.objects.get(id=resp.json()["reservation"]["id"])
    assert res.expires_at <= timezone.now() + dt.timedelta(minutes=5)


@pytest.mark.django_db
def test_release_and_confirm_flow(client):
    p1 = ProductFactory(stock=10)
    p2 = ProductFactory(stock=10)
    _reserve(client, p1.id, 2)
    _reserve(client, p2.id, 3)

    released = client.post(f"{BASE}/release/", {"session_id": "cart-A", "product_id": p2.id}, format="json")
    assert released.status_code == 200
    assert released.json() == {"released_count": 1}
    again = client.post(f"{BASE}/release/", {"session_id": "cart-A", "product_id": p2.id}, format="json")
    assert again.json() == {"released_count": 0}

    confirmed = client.post(f"{BASE}/confirm/", {"session_id": "cart-A"}, format="json")
    assert confirmed.status_code == 200
    assert confirmed.json() == {"confirmed_count": 1}

    p1.refresh_from_db()
    p2.refresh_from_db()
    assert p1.stock == 8
    assert p2.stock == 10


@pytest.mark.django_db
def test_release_and_confirm_require_session(client):
    assert client.post(f"{BASE}/release/", {}, format="json").status_code == 400
    assert client.post(f"{BASE}/confirm/", {}, format="json").status_code == 400


@pytest.mark.django_db
def test_update_reservation_quantity(client):
    product = ProductFactory(stock=10)
    _reserve(client, product.id, 4)

    resp = client.put(
        f"{BASE}/reservation/", {"session_id": "cart-A", "product_id": product.id, "quantity": 10}, format="json"
    )
    assert resp.status_code == 200
    assert resp.json()["reservation"]["quantity"] == 10
    assert resp.json()["reservation"]["available_stock"] == 0

    over = client.put(
        f"{BASE}/reservation/", {"session_id": "cart-A", "product_id": product.id, "quantity": 11}, format="json"
    )
    assert over.status_code == 400
    assert over.json()["available_stock"] == 0
    assert over.json()["requested_quantity"] == 1


@pytest.mark.django_db
def test_update_to_zero_releases(client):
    product = ProductFactory(stock=10)
    _reserve(client, product.id, 4)

    resp = client.put(
        f"{BASE}/reservation/", {"session_id": "cart-A", "product_id": product.id, "quantity": 0}, format="json"
    )

    assert resp.status_code == 200
    assert resp.json() == {"released_count": 1}
    assert StockReservation.objects.get(session_id="cart-A").status == StockReservation.STATUS_RELEASED


@pytest.mark.django_db
def test_update_without_reservation_is_404(client):
    product = ProductFactory(stock=10)

    resp = client.put(
        f"{BASE}/reservation/", {"session_id": "cart-A", "product_id": product.id, "quantity": 2}, format="json"
    )

    assert resp.status_code == 404
    assert "No active reservation" in resp.json()["detail"]


@pytest.mark.django_db
def test_available_unknown_product_is_404(client):
    assert client.get(f"{BASE}/available/999999/").status_code == 404


@pytest.mark.django_db
def test_check_endpoint(client):
    product = ProductFactory(stock=3)
    _reserve(client, product.id, 1)

    default = client.get(f"{BASE}/check/{product.id}/")
    assert default.status_code == 200
    assert default.json() == {
        "product_id": product.id,
        "available_stock": 2,
        "requested_quantity": 1,
        "is_available": True,
    }

    too_many = client.get(f"{BASE}/check/{product.id}/", {"quantity": 3})
    assert too_many.json()["is_available"] is False

    assert client.get(f"{BASE}/check/{product.id}/", {"quantity": 0}).status_code == 400
    assert client.get(f"{BASE}/check/999999/").status_code == 404
    Product.objects.filter(id=product.id).update(is_active=False)
    assert client.get(f"{BASE}/check/{product.id}/").status_code == 400


@pytest.mark.django_db
def test_unexpected_error_is_500(client, monkeypatch):
    product = ProductFactory(stock=5)

    def boom(**kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(services, "reserve_stock", boom)

    resp = _reserve(client, product.id, 1)

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error."}


@pytest.mark.django_db
def test_reservation_list_filters(client):
    product = ProductFactory(stock=10)
    other = ProductFactory(stock=10)
    StockReservationFactory(product=product, session_id="cart-A")
    StockReservationFactory(product=other, session_id="cart-A", status=StockReservation.STATUS_CONFIRMED)
    StockReservationFactory(product=product, session_id="cart-B", status=StockReservation.STATUS_RELEASED)

    resp = client.get(f"{BASE}/reservations/")
    assert resp.status_code == 200
    assert resp.json()["count"] == 3

    by_session = client.get(f"{BASE}/reservations/", {"session_id": "cart-A"}).json()
    assert by_session["count"] == 2

    by_product = client.get(f"{BASE}/reservations/", {"product_id": product.id}).json()
    assert {r["session_id"] for r in by_product["results"]} == {"cart-A", "cart-B"}

    by_status = client.get(f"{BASE}/reservations/", {"status": "released"}).json()
    assert by_status["count"] == 1
    assert by_status["results"][0]["status"] == "released"


@pytest.mark.django_db
def test_reservation_list_expires_before(client):
    soon = timezone.now() + dt.timedelta(minutes=1)
    StockReservationFactory(expires_at=soon)
    StockReservationFactory(expires_at=timezone.now() + dt.timedelta(hours=2))

    cutoff = (timezone.now() + dt.timedelta(minutes=10)).isoformat()
    resp = client.get(f"{BASE}/reservations/", {"expires_before": cutoff})

    assert resp.json()["count"] == 1


@pytest.mark.django_db
def test_session_reservations_lists_only_active(client):
    product = ProductFactory(stock=10)
    _reserve(client, product.id, 2)
    StockReservationFactory(product=product, session_id="cart-A", status=StockReservation.STATUS_RELEASED)
    StockReservationFactory(
        product=product, session_id="cart-A", expires_at=timezone.now() - dt.timedelta(minutes=1)
    )

    resp = client.get(f"{BASE}/sessions/cart-A/")

    assert resp.status_code == 200
    body = resp.json()
    assert body["session_id"] == "cart-A"
    assert len(body["reservations"]) == 1
    assert body["reservations"][0]["quantity"] == 2
    assert body["reservations"][0]["product_id"] == product.id


@pytest.mark.django_db
def test_check_with_session_reserves_atomically(client):
    product = ProductFactory(stock=3)

    resp = client.get(f"{BASE}/check/{product.id}/", {"quantity": 2, "session_id": "cart-A"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_available"] is True
    assert body["available_stock"] == 1
    assert body["reservation"]["quantity"] == 2
    assert body["reservation"]["session_id"] == "cart-A"
    res = StockReservation.objects.get(session_id="cart-A")
    assert res.status == StockReservation.STATUS_RESERVED

    over = client.get(f"{BASE}/check/{product.id}/", {"quantity": 2, "session_id": "cart-B"})
    assert over.status_code == 400
    assert over.json()["available_stock"] == 1
    assert not StockReservation.objects.filter(session_id="cart-B").exists()
