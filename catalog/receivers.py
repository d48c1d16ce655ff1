"""Signal receivers that keep physical stock in step with confirmed reservations."""

from django.dispatch import receiver
from inventory.signals import reservation_confirmed

from .models import StockMovement
from .services import apply_stock_movement


@receiver(reservation_confirmed, dispatch_uid="catalog.decrement_stock_on_confirmation")
def decrement_stock_on_confirmation(sender, *, reservation_id: int, product_id: int, quantity: int, **kwargs):
    # Runs inside the confirming transaction; a failure here rolls the confirmation back.
    apply_stock_movement(
        product_id=product_id,
        movement_type=StockMovement.TYPE_OUTBOUND,
        quantity=-int(quantity),
        reason="reservation confirmed",
        reference=f"reservation:{reservation_id}",
    )
