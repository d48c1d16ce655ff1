"""Selectors for stock reservations.

Read-only and lock-free; figures may be stale under concurrent writers and
are meant for display. Mutations that need a consistent view lock the
product row themselves (see ``services``).
"""

from dataclasses import dataclass

from catalog.models import Product
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from .exceptions import ProductNotFound, ProductUnavailable
from .models import StockReservation


@dataclass(frozen=True)
class StockCheck:
    product_id: int
    available_stock: int
    requested_quantity: int
    is_available: bool


def reserved_quantity(*, product_id: int, now=None) -> int:
    """Sum of quantities held by active reservations; stale rows never count."""
    total = (
        StockReservation.objects.active(now=now)
        .filter(product_id=product_id)
        .aggregate(total=Coalesce(Sum("quantity"), 0))["total"]
    )
    return int(total)


def get_available_stock(*, product_id: int) -> int:
    stock = Product.objects.filter(id=product_id).values_list("stock", flat=True).first()
    if stock is None:
        raise ProductNotFound(product_id)
    return max(0, int(stock) - reserved_quantity(product_id=product_id))


def check_stock(*, product_id: int, quantity: int) -> StockCheck:
    """Report whether ``quantity`` could currently be reserved, without reserving it."""
    row = Product.objects.filter(id=product_id).values("stock", "is_active").first()
    if row is None:
        raise ProductNotFound(product_id)
    if not row["is_active"]:
        raise ProductUnavailable(product_id)
    available = max(0, int(row["stock"]) - reserved_quantity(product_id=product_id))
    return StockCheck(
        product_id=product_id,
        available_stock=available,
        requested_quantity=quantity,
        is_available=available >= quantity,
    )


def list_active_reservations_for_session(*, session_id: str):
    return list(
        StockReservation.objects.active(now=timezone.now())
        .filter(session_id=session_id)
        .order_by("-created_at")
        .values("id", "product_id", "quantity", "expires_at")
    )


# EOF
