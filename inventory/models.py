"""Inventory models: time-bounded stock reservations held by cart sessions.

Reservations never touch ``products.stock``; they claim capacity virtually
while ``reserved`` and unexpired. Rows are never deleted and form the audit
trail of every reservation attempt.
"""

from common.choices import ReservationStatus
from django.db import models
from django.utils import timezone

from .exceptions import InvalidTransition, ReservationError

# Every status has an entry; terminal statuses allow nothing.
RESERVATION_TRANSITIONS = {
    ReservationStatus.RESERVED: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.EXPIRED, ReservationStatus.RELEASED}
    ),
    ReservationStatus.CONFIRMED: frozenset(),
    ReservationStatus.EXPIRED: frozenset(),
    ReservationStatus.RELEASED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return ReservationStatus(target) in RESERVATION_TRANSITIONS[ReservationStatus(current)]


def sources_for(target: str) -> list[str]:
    """Statuses from which ``target`` may be entered."""
    target = ReservationStatus(target)
    return [str(source) for source, allowed in RESERVATION_TRANSITIONS.items() if target in allowed]


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class StockReservationQuerySet(models.QuerySet):
    def active(self, *, now=None):
        """Reservations currently holding capacity."""
        now = now or timezone.now()
        return self.filter(status=ReservationStatus.RESERVED, expires_at__gt=now)

    def stale(self, *, now=None):
        """Reservations still marked reserved whose TTL has passed."""
        now = now or timezone.now()
        return self.filter(status=ReservationStatus.RESERVED, expires_at__lt=now)

    def transition(self, target: str, *, now=None) -> int:
        """Bulk-move matching rows into ``target``; rows that may not enter it are skipped."""
        now = now or timezone.now()
        return self.filter(status__in=sources_for(target)).update(status=target, updated_at=now)


class StockReservation(TimeStampedModel):
    STATUS_RESERVED = ReservationStatus.RESERVED
    STATUS_CONFIRMED = ReservationStatus.CONFIRMED
    STATUS_EXPIRED = ReservationStatus.EXPIRED
    STATUS_RELEASED = ReservationStatus.RELEASED
    STATUS_CHOICES = ReservationStatus.choices

    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="reservations")
    session_id = models.CharField(max_length=128)
    quantity = models.IntegerField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_RESERVED)
    expires_at = models.DateTimeField()

    objects = StockReservationQuerySet.as_manager()

    class Meta:
        db_table = "stock_reservations"
        ordering = ["-created_at", "id"]
        constraints = [
            models.CheckConstraint(name="reservation_positive_qty", condition=models.Q(quantity__gt=0)),
        ]
        indexes = [
            models.Index(fields=["session_id"], name="stock_res_session_idx"),
            models.Index(fields=["status"], name="stock_res_status_idx"),
            models.Index(fields=["expires_at"], name="stock_res_expires_idx"),
            models.Index(fields=["product", "status"], name="stock_res_product_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Reservation<{self.product_id}> qty={self.quantity} status={self.status}"

    def is_active(self, *, now=None) -> bool:
        now = now or timezone.now()
        return self.status == self.STATUS_RESERVED and self.expires_at > now

    def transition_to(self, target: str) -> None:
        if not can_transition(self.status, target):
            raise InvalidTransition(self.status, target)
        self.status = target

    def change_quantity(self, quantity: int) -> None:
        # Terminal rows are history; only a held reservation may be resized.
        if self.status != self.STATUS_RESERVED:
            raise ReservationError(f"Reservation {self.pk} is {self.status} and cannot be resized")
        self.quantity = quantity


# EOF
