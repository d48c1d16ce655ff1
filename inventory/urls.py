"""Stock reservation URL routes (v1)."""

from django.urls import path

from .views import (
    AvailableStockView,
    ConfirmStockView,
    ReleaseStockView,
    ReservationListView,
    ReserveStockView,
    SessionReservationsView,
    StockCheckView,
    StockHealthView,
    UpdateReservationView,
)

app_name = "inventory"

urlpatterns = [
    path("health/", StockHealthView.as_view(), name="stock-health"),
    path("reserve/", ReserveStockView.as_view(), name="stock-reserve"),
    path("release/", ReleaseStockView.as_view(), name="stock-release"),
    path("confirm/", ConfirmStockView.as_view(), name="stock-confirm"),
    path("reservation/", UpdateReservationView.as_view(), name="stock-update-reservation"),
    path("available/<int:product_id>/", AvailableStockView.as_view(), name="stock-available"),
    path("check/<int:product_id>/", StockCheckView.as_view(), name="stock-check"),
    # Read-only endpoints
    path("reservations/", ReservationListView.as_view(), name="reservation-list"),
    path("sessions/<str:session_id>/", SessionReservationsView.as_view(), name="session-reservations"),
]

# EOF
