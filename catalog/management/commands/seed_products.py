"""Seed a few products with stock for local development.

Re-running is idempotent; existing products are reused by SKU and their
stock is left untouched.
"""

from catalog.models import Product
from catalog.services import restock
from django.core.management.base import BaseCommand
from django.db import transaction


class Command(BaseCommand):
    help = "Seed development products with initial stock"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding products...")

        products = [
            {"sku": "SPK-MON-001", "title": "Studio Monitor Speakers", "stock": 12},
            {"sku": "CBL-HDMI-2M", "title": "HDMI 2.1 Cable 2m", "stock": 150},
            {"sku": "CAM-4K-001", "title": "4K Camcorder", "stock": 3},
            {"sku": "LTD-VINYL-01", "title": "Limited Edition Vinyl", "stock": 1},
        ]

        created = 0
        for row in products:
            product, was_created = Product.objects.get_or_create(
                sku=row["sku"], defaults={"title": row["title"], "stock": 0, "is_active": True}
            )
            if was_created:
                restock(product_id=product.id, quantity=row["stock"], reference="seed")
                created += 1

        self.stdout.write(self.style.SUCCESS(f"Seeded {created} products ({len(products) - created} already present)."))
