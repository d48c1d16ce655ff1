"""Catalog services: transactional physical stock movements."""

import logging

from django.db import transaction

from .models import Product, StockMovement

logger = logging.getLogger("backoffice.catalog")


class StockMovementError(Exception):
    pass


@transaction.atomic
def apply_stock_movement(
    *, product_id: int, movement_type: str, quantity: int, reason: str = "", reference: str = ""
) -> StockMovement | None:
    """Apply a signed movement to a product's physical stock.

    quantity: positive for inbound/additions, negative for outbound/deductions.
    movement_type: label for admin/documentation; logic is driven by sign.
    """
    if quantity == 0:
        return None
    try:
        product = Product.objects.select_for_update().get(id=product_id)
    except Product.DoesNotExist:
        raise StockMovementError(f"Product {product_id} not found")

    if quantity < 0 and abs(quantity) > int(product.stock):
        raise StockMovementError("Insufficient physical stock")
    product.stock = int(product.stock) + int(quantity)
    product.save(update_fields=["stock", "updated_at"])

    movement = StockMovement.objects.create(
        product=product,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
    logger.info(
        "stock.movement_applied",
        extra={
            "event": "stock.movement_applied",
            "product_id": product.id,
            "movement_type": movement_type,
            "quantity": quantity,
            "stock": product.stock,
            "reference": reference,
        },
    )
    return movement


def restock(*, product_id: int, quantity: int, reference: str = "") -> StockMovement | None:
    if quantity <= 0:
        raise StockMovementError("Restock quantity must be positive")
    return apply_stock_movement(
        product_id=product_id,
        movement_type=StockMovement.TYPE_INBOUND,
        quantity=quantity,
        reason="restock",
        reference=reference,
    )


# EOF
