"""Domain events emitted by the reservation core.

``reservation_confirmed`` is sent once per reservation converted at checkout,
inside the confirming transaction, with keyword arguments ``reservation_id``,
``product_id``, ``session_id`` and ``quantity``. The physical stock owner
subscribes to it; the reservation core never writes ``products.stock``.
"""

from django.dispatch import Signal

reservation_confirmed = Signal()
