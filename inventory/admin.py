"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import StockReservation


@admin.register(StockReservation)
class StockReservationAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "session_id", "quantity", "status", "expires_at", "created_at")
    list_filter = ("status",)
    search_fields = ("product__sku", "session_id")
    # Reservations are audit history; status moves only through the services.
    readonly_fields = ("product", "session_id", "quantity", "status", "expires_at", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        return False


# EOF
