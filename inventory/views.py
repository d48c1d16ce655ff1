"""Stock reservation endpoints.

Thin adapters over ``inventory.services`` and ``inventory.selectors``:
validate request shape, delegate, and translate domain errors to status
codes. No view holds state or makes stock decisions.
"""

import logging

from django.utils.dateparse import parse_datetime
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle
from rest_framework.views import APIView

from . import selectors, services
from .exceptions import (
    InsufficientStock,
    NotFound,
    ProductUnavailable,
    ReservationNotFound,
    ReservationValidationError,
)
from .models import StockReservation
from .serializers import (
    ConfirmStockSerializer,
    ReleaseStockSerializer,
    ReservationResultSerializer,
    ReserveStockSerializer,
    StockCheckQuerySerializer,
    StockReservationSerializer,
    UpdateReservationSerializer,
)
from .throttling import StockScopedRateThrottle

logger = logging.getLogger("backoffice.inventory")

ErrorResponse = inline_serializer(name="StockError", fields={"detail": rf_serializers.CharField()})
InsufficientStockResponse = inline_serializer(
    name="InsufficientStockError",
    fields={
        "detail": rf_serializers.CharField(),
        "available_stock": rf_serializers.IntegerField(),
        "requested_quantity": rf_serializers.IntegerField(),
    },
)


class StockAPIView(APIView):
    """Base view mapping reservation errors to HTTP responses."""

    throttle_scope = "stock"
    throttle_classes = [StockScopedRateThrottle, UserRateThrottle, AnonRateThrottle]

    def handle_exception(self, exc):
        if isinstance(exc, InsufficientStock):
            return Response(
                {
                    "detail": str(exc),
                    "available_stock": exc.available,
                    "requested_quantity": exc.requested,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        if isinstance(exc, (ProductUnavailable, ReservationValidationError)):
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, NotFound):
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        if isinstance(exc, APIException):
            return super().handle_exception(exc)
        # Anything DRF cannot translate is a server fault: log it and answer 500.
        try:
            return super().handle_exception(exc)
        except Exception:
            logger.exception(
                "stock.request_failed",
                extra={"event": "stock.request_failed", "path": self.request.path, "method": self.request.method},
            )
            return Response({"detail": "Internal server error."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ReserveStockView(StockAPIView):
    throttle_scope = "stock_write"

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Reserve stock",
        description="Atomically claims stock for a cart session. Fails when the product lacks available stock.",
        request=ReserveStockSerializer,
        responses={
            201: inline_serializer(name="ReservationCreated", fields={"reservation": ReservationResultSerializer()}),
            400: InsufficientStockResponse,
            404: ErrorResponse,
        },
        examples=[
            OpenApiExample(
                "Reserved",
                value={
                    "reservation": {
                        "id": 1,
                        "product_id": 10,
                        "session_id": "cart-abc",
                        "quantity": 4,
                        "status": "reserved",
                        "expires_at": "2025-01-01T12:30:00Z",
                        "available_stock": 6,
                    }
                },
                response_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = ReserveStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = services.reserve_stock(**serializer.validated_data)
        return Response(
            {"reservation": ReservationResultSerializer(result).data},
            status=status.HTTP_201_CREATED,
        )


class ReleaseStockView(StockAPIView):
    throttle_scope = "stock_write"

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Release reservations",
        description="Releases a session's held reservations, optionally for a single product. Idempotent.",
        request=ReleaseStockSerializer,
        responses={200: inline_serializer(name="Released", fields={"released_count": rf_serializers.IntegerField()})},
        examples=[OpenApiExample("Released", value={"released_count": 1}, response_only=True)],
    )
    def post(self, request):
        serializer = ReleaseStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = services.release_stock_reservation(**serializer.validated_data)
        return Response({"released_count": count}, status=status.HTTP_200_OK)


class ConfirmStockView(StockAPIView):
    throttle_scope = "stock_write"

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Confirm reservations",
        description="Converts a session's held reservations at checkout.",
        request=ConfirmStockSerializer,
        responses={200: inline_serializer(name="Confirmed", fields={"confirmed_count": rf_serializers.IntegerField()})},
        examples=[OpenApiExample("Confirmed", value={"confirmed_count": 2}, response_only=True)],
    )
    def post(self, request):
        serializer = ConfirmStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = services.confirm_stock_reservations(**serializer.validated_data)
        return Response({"confirmed_count": count}, status=status.HTTP_200_OK)


class AvailableStockView(StockAPIView):
    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Available stock",
        description="Physical stock minus active reservations. For display; may be stale under concurrent writes.",
        responses={
            200: inline_serializer(
                name="AvailableStock",
                fields={"product_id": rf_serializers.IntegerField(), "available_stock": rf_serializers.IntegerField()},
            ),
            404: ErrorResponse,
        },
    )
    def get(self, request, product_id: int):
        available = selectors.get_available_stock(product_id=product_id)
        return Response({"product_id": product_id, "available_stock": available}, status=status.HTTP_200_OK)


class UpdateReservationView(StockAPIView):
    throttle_scope = "stock_write"

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Update reservation quantity",
        description="Resizes a session's held reservation. A quantity of 0 releases it instead.",
        request=UpdateReservationSerializer,
        responses={
            200: inline_serializer(name="ReservationUpdated", fields={"reservation": ReservationResultSerializer()}),
            400: InsufficientStockResponse,
            404: ErrorResponse,
        },
    )
    def put(self, request):
        serializer = UpdateReservationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session_id = serializer.validated_data["session_id"]
        product_id = serializer.validated_data["product_id"]
        quantity = serializer.validated_data["quantity"]

        if quantity == 0:
            count = services.release_stock_reservation(session_id=session_id, product_id=product_id)
            return Response({"released_count": count}, status=status.HTTP_200_OK)

        result = services.update_reservation_quantity(
            session_id=session_id, product_id=product_id, new_quantity=quantity
        )
        if result is None:
            raise ReservationNotFound(session_id, product_id)
        return Response({"reservation": ReservationResultSerializer(result).data}, status=status.HTTP_200_OK)


class StockCheckView(StockAPIView):
    def initial(self, request, *args, **kwargs):
        # A check carrying a cart session reserves, so it spends the write budget.
        if request.query_params.get("session_id"):
            self.throttle_scope = "stock_write"
        super().initial(request, *args, **kwargs)

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Check stock",
        description=(
            "Reports whether a quantity could be reserved right now. With session_id, "
            "the quantity is reserved atomically for that cart and the reservation is returned."
        ),
        parameters=[
            OpenApiParameter("quantity", OpenApiTypes.INT, location="query", description="Defaults to 1"),
            OpenApiParameter("session_id", OpenApiTypes.STR, location="query", description="Reserve for this cart"),
        ],
        responses={
            200: inline_serializer(
                name="StockCheck",
                fields={
                    "product_id": rf_serializers.IntegerField(),
                    "available_stock": rf_serializers.IntegerField(),
                    "requested_quantity": rf_serializers.IntegerField(),
                    "is_available": rf_serializers.BooleanField(),
                    "reservation": ReservationResultSerializer(required=False),
                },
            ),
            400: InsufficientStockResponse,
            404: ErrorResponse,
        },
    )
    def get(self, request, product_id: int):
        query = StockCheckQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        quantity = query.validated_data["quantity"]
        session_id = query.validated_data.get("session_id")

        if session_id:
            result = services.reserve_stock(product_id=product_id, quantity=quantity, session_id=session_id)
            return Response(
                {
                    "product_id": product_id,
                    "available_stock": result.available_stock,
                    "requested_quantity": quantity,
                    "is_available": True,
                    "reservation": ReservationResultSerializer(result).data,
                },
                status=status.HTTP_200_OK,
            )

        check = selectors.check_stock(product_id=product_id, quantity=quantity)
        return Response(
            {
                "product_id": check.product_id,
                "available_stock": check.available_stock,
                "requested_quantity": check.requested_quantity,
                "is_available": check.is_available,
            },
            status=status.HTTP_200_OK,
        )


class SessionReservationsView(StockAPIView):
    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Session reservations",
        description="Active reservations currently held by a cart session.",
    )
    def get(self, request, session_id: str):
        return Response(
            {
                "session_id": session_id,
                "reservations": selectors.list_active_reservations_for_session(session_id=session_id),
            },
            status=status.HTTP_200_OK,
        )


class ReservationFilterSet(filters.FilterSet):
    product_id = filters.NumberFilter(field_name="product_id")
    expires_before = filters.CharFilter(method="filter_expires_before")

    class Meta:
        model = StockReservation
        fields = ["session_id", "product_id", "status"]

    def filter_expires_before(self, queryset, name, value):
        dt = parse_datetime(value)
        if dt:
            return queryset.filter(expires_at__lte=dt)
        return queryset


class ReservationListView(generics.ListAPIView):
    throttle_scope = "stock"
    throttle_classes = [StockScopedRateThrottle, UserRateThrottle, AnonRateThrottle]
    serializer_class = StockReservationSerializer
    filterset_class = ReservationFilterSet
    filter_backends = [filters.DjangoFilterBackend]
    queryset = StockReservation.objects.order_by("-created_at", "id")

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="List stock reservations",
        description=(
            "Audit list of reservations. Filters: session_id, product_id, "
            "status (reserved/confirmed/expired/released), expires_before (ISO)."
        ),
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class StockHealthView(APIView):
    throttle_classes = []

    @extend_schema(
        tags=["Stock Endpoints"],
        summary="Stock health",
        description="Simple healthcheck endpoint for the stock reservation app",
        examples=[OpenApiExample("Health OK", value={"status": "ok", "app": "inventory"})],
    )
    def get(self, request):
        return Response({"status": "ok", "app": "inventory"})


# EOF
