import threading
from typing import List

import pytest
from catalog.tests.factories import ProductFactory
from django.db import close_old_connections, connection
from inventory.exceptions import InsufficientStock
from inventory.models import StockReservation
from inventory.selectors import get_available_stock
from inventory.services import reserve_stock, update_reservation_quantity


def _reserve_worker(
    barrier: threading.Barrier,
    product_id: int,
    session_id: str,
    qty: int,
    successes: List[str],
    errors: List[Exception],
):
    # Each thread gets its own DB connection
    close_old_connections()
    barrier.wait()
    try:
        reserve_stock(product_id=product_id, quantity=qty, session_id=session_id)
        successes.append(session_id)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        connection.close()


def _update_worker(
    barrier: threading.Barrier,
    product_id: int,
    session_id: str,
    qty: int,
    successes: List[int],
    errors: List[Exception],
):
    close_old_connections()
    barrier.wait()
    try:
        update_reservation_quantity(session_id=session_id, product_id=product_id, new_quantity=qty)
        successes.append(qty)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        connection.close()


def _run(threads):
    for t in threads:
        t.start()
    for t in threads:
        t.join()


@pytest.mark.django_db(transaction=True)
def test_threaded_two_sessions_compete_for_last_unit():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=1)

    barrier = threading.Barrier(2)
    successes: List[str] = []
    errors: List[Exception] = []
    _run(
        [
            threading.Thread(target=_reserve_worker, args=(barrier, product.id, "A", 1, successes, errors)),
            threading.Thread(target=_reserve_worker, args=(barrier, product.id, "B", 1, successes, errors)),
        ]
    )

    assert len(successes) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], InsufficientStock)
    assert errors[0].available == 0
    assert StockReservation.objects.filter(product_id=product.id, status=StockReservation.STATUS_RESERVED).count() == 1
    assert get_available_stock(product_id=product.id) == 0


@pytest.mark.django_db(transaction=True)
def test_threaded_reservations_never_oversell():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=5)
    workers = 8

    barrier = threading.Barrier(workers)
    successes: List[str] = []
    errors: List[Exception] = []
    _run(
        [
            threading.Thread(target=_reserve_worker, args=(barrier, product.id, f"s{i}", 1, successes, errors))
            for i in range(workers)
        ]
    )

    # Exactly the physical stock is claimed; the rest are refused
    assert len(successes) == 5
    assert len(errors) == workers - 5
    assert all(isinstance(e, InsufficientStock) for e in errors)
    active = StockReservation.objects.active().filter(product_id=product.id)
    assert sum(r.quantity for r in active) == 5
    assert get_available_stock(product_id=product.id) == 0


@pytest.mark.django_db(transaction=True)
def test_threaded_resize_and_new_reservation_stay_within_stock():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=4)
    reserve_stock(product_id=product.id, quantity=1, session_id="A")

    barrier = threading.Barrier(2)
    updated: List[int] = []
    reserved: List[str] = []
    errors: List[Exception] = []
    _run(
        [
            threading.Thread(target=_update_worker, args=(barrier, product.id, "A", 3, updated, errors)),
            threading.Thread(target=_reserve_worker, args=(barrier, product.id, "B", 2, reserved, errors)),
        ]
    )

    # Growing A to 3 and B taking 2 cannot both fit into 4 units
    assert len(updated) + len(reserved) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], InsufficientStock)
    active = StockReservation.objects.active().filter(product_id=product.id)
    assert sum(r.quantity for r in active) <= 4
