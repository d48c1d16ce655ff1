import pytest
from catalog.tests.factories import ProductFactory
from django.core.cache import cache
from django.test import override_settings
from rest_framework.test import APIClient


def _rest_framework(**rates):
    return {
        "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
        "DEFAULT_AUTHENTICATION_CLASSES": ["rest_framework.authentication.SessionAuthentication"],
        "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
        "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
        "PAGE_SIZE": 20,
        "DEFAULT_THROTTLE_CLASSES": [
            "rest_framework.throttling.ScopedRateThrottle",
            "rest_framework.throttling.UserRateThrottle",
            "rest_framework.throttling.AnonRateThrottle",
        ],
        "DEFAULT_THROTTLE_RATES": {"user": "100/min", "anon": "100/min", **rates},
    }


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


def _reserve(client, product_id, session_id):
    return client.post(
        "/api/v1/stock/reserve/",
        {"product_id": product_id, "quantity": 1, "session_id": session_id},
        format="json",
    )


@pytest.mark.django_db
@override_settings(REST_FRAMEWORK=_rest_framework(stock="100/min", stock_write="1/min"))
def test_stock_write_scope_cannot_be_dodged_by_changing_session_id():
    product = ProductFactory(stock=10)
    client = APIClient()

    assert _reserve(client, product.id, "cart-1").status_code == 201
    # Same client, fresh cart ids: still the same write budget
    codes = [_reserve(client, product.id, f"cart-{i}").status_code for i in range(2, 6)]
    assert codes == [429] * 4


@pytest.mark.django_db
@override_settings(REST_FRAMEWORK=_rest_framework(stock="1/min", stock_write="100/min"))
def test_read_and_write_scopes_are_counted_separately():
    product = ProductFactory(stock=10)
    client = APIClient()

    assert client.get(f"/api/v1/stock/available/{product.id}/").status_code == 200
    assert client.get(f"/api/v1/stock/available/{product.id}/").status_code == 429
    # Exhausted reads leave the write scope untouched
    assert _reserve(client, product.id, "cart-1").status_code == 201


# EOF
