"""Shared enumerations and choices used across apps."""

from django.db import models


class MovementType(models.TextChoices):
    INBOUND = "in", "Inbound"
    OUTBOUND = "out", "Outbound"
    ADJUST = "adjust", "Adjust"


class ReservationStatus(models.TextChoices):
    """Lifecycle of a stock reservation.

    Only ``RESERVED`` holds capacity; the other three are terminal.
    """

    RESERVED = "reserved", "Reserved"
    CONFIRMED = "confirmed", "Confirmed"
    EXPIRED = "expired", "Expired"
    RELEASED = "released", "Released"
