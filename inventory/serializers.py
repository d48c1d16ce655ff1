"""Serializers for stock reservation endpoints.

Write serializers only check shape (presence, types, sign); every stock
decision is made by the services.
"""

from django.conf import settings
from rest_framework import serializers

from .models import StockReservation


class ReserveStockSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    session_id = serializers.CharField(max_length=128)
    ttl_minutes = serializers.IntegerField(min_value=1, required=False)

    def validate_ttl_minutes(self, value):
        ceiling = getattr(settings, "STOCK_RESERVATION_MAX_TTL_MINUTES", 1440)
        if value > ceiling:
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {ceiling}.")
        return value


class ReleaseStockSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128)
    product_id = serializers.IntegerField(min_value=1, required=False)


class ConfirmStockSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128)


class UpdateReservationSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128)
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=0)


class StockCheckQuerySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    session_id = serializers.CharField(max_length=128, required=False)


class ReservationResultSerializer(serializers.Serializer):
    """Reservation as returned by mutations, with the stock left available."""

    id = serializers.IntegerField(source="reservation.id")
    product_id = serializers.IntegerField(source="reservation.product_id")
    session_id = serializers.CharField(source="reservation.session_id")
    quantity = serializers.IntegerField(source="reservation.quantity")
    status = serializers.CharField(source="reservation.status")
    expires_at = serializers.DateTimeField(source="reservation.expires_at")
    available_stock = serializers.IntegerField()


class StockReservationSerializer(serializers.ModelSerializer):
    """Read-only representation of stock reservations."""

    product_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = StockReservation
        fields = [
            "id",
            "product_id",
            "session_id",
            "quantity",
            "status",
            "expires_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# EOF
