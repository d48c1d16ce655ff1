import datetime as dt

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory
from inventory.models import StockReservation


class StockReservationFactory(DjangoModelFactory):
    class Meta:
        model = StockReservation

    product = factory.SubFactory("catalog.tests.factories.ProductFactory")
    session_id = factory.Sequence(lambda n: f"session-{n}")
    quantity = 1
    status = StockReservation.STATUS_RESERVED
    expires_at = factory.LazyFunction(lambda: timezone.now() + dt.timedelta(minutes=30))
