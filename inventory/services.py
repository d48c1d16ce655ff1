"""Inventory services: transactional stock reservations.

Capacity-claiming operations (reserve, update) lock the product row with
``select_for_update`` before aggregating reserved quantities, which
serializes attempts per product. Release and expiry only free capacity and
take no product lock. Confirmation locks the touched products in id order
before the reservation rows so every path acquires product locks first.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from catalog.models import Product
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .exceptions import InsufficientStock, ProductNotFound, ProductUnavailable, ReservationValidationError
from .models import StockReservation
from .selectors import reserved_quantity
from .signals import reservation_confirmed

logger = logging.getLogger("backoffice.inventory")


@dataclass
class ReservationResult:
    reservation: StockReservation
    available_stock: int


def _lock_product(product_id: int) -> Product:
    try:
        return Product.objects.select_for_update().only("id", "stock", "is_active").get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFound(product_id)


def _insufficient(product_id: int, available: int, requested: int, session_id: str) -> InsufficientStock:
    logger.info(
        "stock.insufficient",
        extra={
            "event": "stock.insufficient",
            "product_id": product_id,
            "session_id": session_id,
            "available": available,
            "requested": requested,
        },
    )
    return InsufficientStock(product_id=product_id, available=available, requested=requested)


@transaction.atomic
def reserve_stock(*, product_id: int, quantity: int, session_id: str, ttl_minutes: int | None = None):
    """Claim ``quantity`` units of a product for a cart session.

    Returns the new reservation with the stock left available after it.
    Raises ``ProductNotFound``, ``ProductUnavailable`` or ``InsufficientStock``;
    the transaction is rolled back in every case.
    """

    if quantity <= 0:
        raise ReservationValidationError("Reservation quantity must be positive")
    if ttl_minutes is None:
        ttl_minutes = getattr(settings, "STOCK_RESERVATION_TTL_MINUTES", 30)
    if ttl_minutes <= 0:
        raise ReservationValidationError("Reservation TTL must be positive")

    product = _lock_product(product_id)
    if not product.is_active:
        raise ProductUnavailable(product_id)

    now = timezone.now()
    available = int(product.stock) - reserved_quantity(product_id=product.id, now=now)
    if available < quantity:
        raise _insufficient(product.id, max(0, available), quantity, session_id)

    reservation = StockReservation.objects.create(
        product=product,
        session_id=session_id,
        quantity=quantity,
        status=StockReservation.STATUS_RESERVED,
        expires_at=now + timedelta(minutes=int(ttl_minutes)),
    )
    logger.info(
        "reservation.created",
        extra={
            "event": "reservation.created",
            "reservation_id": reservation.id,
            "product_id": product.id,
            "session_id": session_id,
            "quantity": quantity,
            "ttl_minutes": int(ttl_minutes),
        },
    )
    return ReservationResult(reservation=reservation, available_stock=available - quantity)


def release_stock_reservation(*, session_id: str, product_id: int | None = None) -> int:
    """Release the session's held reservations, optionally for one product.

    Idempotent: a repeated call finds nothing left to release and returns 0.
    """

    qs = StockReservation.objects.filter(session_id=session_id)
    if product_id is not None:
        qs = qs.filter(product_id=product_id)
    count = qs.transition(StockReservation.STATUS_RELEASED)
    logger.info(
        "reservation.released",
        extra={
            "event": "reservation.released",
            "session_id": session_id,
            "product_id": product_id,
            "released_count": count,
        },
    )
    return count


@transaction.atomic
def confirm_stock_reservations(*, session_id: str) -> int:
    """Convert the session's held reservations at checkout.

    Emits ``reservation_confirmed`` per row inside this transaction; the
    physical stock owner decrements ``products.stock`` from that event.
    Reservations that already outlived their TTL are expired, not confirmed.
    """

    now = timezone.now()
    session_rows = StockReservation.objects.filter(session_id=session_id)
    session_rows.stale(now=now).transition(StockReservation.STATUS_EXPIRED, now=now)

    pending = session_rows.active(now=now)
    product_ids = sorted(set(pending.values_list("product_id", flat=True)))
    # Product locks first, in id order, then reservation rows.
    list(Product.objects.select_for_update().filter(id__in=product_ids).order_by("id").values_list("id", flat=True))
    # Rows for products not locked above wait for the next confirmation.
    rows = list(pending.filter(product_id__in=product_ids).select_for_update().order_by("id"))

    for row in rows:
        row.transition_to(StockReservation.STATUS_CONFIRMED)
        row.save(update_fields=["status", "updated_at"])
        reservation_confirmed.send(
            sender=StockReservation,
            reservation_id=row.id,
            product_id=row.product_id,
            session_id=session_id,
            quantity=row.quantity,
        )

    logger.info(
        "reservation.confirmed",
        extra={"event": "reservation.confirmed", "session_id": session_id, "confirmed_count": len(rows)},
    )
    return len(rows)


def expire_old_reservations() -> int:
    """Sweep held reservations past their TTL into ``expired``.

    Availability already ignores them; this makes the status durable.
    """

    now = timezone.now()
    count = StockReservation.objects.stale(now=now).transition(StockReservation.STATUS_EXPIRED, now=now)
    if count:
        logger.info("reservation.expired", extra={"event": "reservation.expired", "expired_count": count})
    return count


@transaction.atomic
def update_reservation_quantity(*, session_id: str, product_id: int, new_quantity: int):
    """Resize the session's held reservation for a product in place.

    Returns ``None`` when the session holds no active reservation for the
    product; callers reserve instead. A zero quantity is a release, not an
    update, and is rejected here.
    """

    if new_quantity <= 0:
        raise ReservationValidationError("Reservation quantity must be positive; release instead")

    product = _lock_product(product_id)
    now = timezone.now()
    reservation = (
        StockReservation.objects.active(now=now)
        .select_for_update()
        .filter(session_id=session_id, product_id=product.id)
        .order_by("-created_at", "-id")
        .first()
    )
    if reservation is None:
        return None

    diff = int(new_quantity) - int(reservation.quantity)
    available = int(product.stock) - reserved_quantity(product_id=product.id, now=now)
    if diff > 0:
        if not product.is_active:
            raise ProductUnavailable(product.id)
        if available < diff:
            raise _insufficient(product.id, max(0, available), diff, session_id)

    previous = reservation.quantity
    reservation.change_quantity(new_quantity)
    reservation.save(update_fields=["quantity", "updated_at"])
    logger.info(
        "reservation.updated",
        extra={
            "event": "reservation.updated",
            "reservation_id": reservation.id,
            "product_id": product.id,
            "session_id": session_id,
            "quantity_from": previous,
            "quantity_to": new_quantity,
        },
    )
    return ReservationResult(reservation=reservation, available_stock=max(0, available - diff))


# EOF
