from io import StringIO

import pytest
from catalog.models import Product, StockMovement
from catalog.services import StockMovementError, apply_stock_movement, restock
from catalog.tests.factories import ProductFactory
from django.core.management import call_command


@pytest.mark.django_db
def test_inbound_and_outbound_movements_adjust_stock():
    p = ProductFactory(stock=5)

    restock(product_id=p.id, quantity=3, reference="po-1")
    apply_stock_movement(
        product_id=p.id, movement_type=StockMovement.TYPE_OUTBOUND, quantity=-6, reason="damaged", reference="rma-9"
    )

    p.refresh_from_db()
    assert p.stock == 2
    movements = list(p.movements.order_by("id").values_list("movement_type", "quantity", "reference"))
    assert movements == [("in", 3, "po-1"), ("out", -6, "rma-9")]


@pytest.mark.django_db
def test_zero_movement_is_a_noop():
    p = ProductFactory(stock=5)
    assert apply_stock_movement(product_id=p.id, movement_type=StockMovement.TYPE_ADJUST, quantity=0) is None
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_outbound_cannot_overdraw():
    p = ProductFactory(stock=2)
    with pytest.raises(StockMovementError):
        apply_stock_movement(product_id=p.id, movement_type=StockMovement.TYPE_OUTBOUND, quantity=-3)
    p.refresh_from_db()
    assert p.stock == 2
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_movement_on_unknown_product_fails():
    with pytest.raises(StockMovementError):
        apply_stock_movement(product_id=999999, movement_type=StockMovement.TYPE_INBOUND, quantity=1)


@pytest.mark.django_db
@pytest.mark.parametrize("qty", [0, -1])
def test_restock_requires_positive_quantity(qty):
    p = ProductFactory(stock=1)
    with pytest.raises(StockMovementError):
        restock(product_id=p.id, quantity=qty)


@pytest.mark.django_db
def test_seed_products_is_idempotent():
    out = StringIO()
    call_command("seed_products", stdout=out)
    assert "Seeded 4 products" in out.getvalue()

    vinyl = Product.objects.get(sku="LTD-VINYL-01")
    assert vinyl.stock == 1
    assert vinyl.movements.get().reference == "seed"

    out = StringIO()
    call_command("seed_products", stdout=out)
    assert "Seeded 0 products (4 already present)" in out.getvalue()
    assert Product.objects.count() == 4
    assert StockMovement.objects.count() == 4
