"""Error taxonomy for stock reservations."""


class ReservationError(Exception):
    """Base class for reservation domain errors."""


class ReservationValidationError(ReservationError):
    """Malformed input rejected before any transaction is opened."""


class NotFound(ReservationError):
    pass


class ProductNotFound(NotFound):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ReservationNotFound(NotFound):
    def __init__(self, session_id: str, product_id: int):
        self.session_id = session_id
        self.product_id = product_id
        super().__init__(f"No active reservation for product {product_id} in session {session_id}")


class ProductUnavailable(ReservationError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is no longer available")


class InsufficientStock(ReservationError):
    """Requested quantity exceeds what is currently available.

    ``available`` is the amount the caller can still claim, floored at zero.
    """

    def __init__(self, *, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock. Available: {available}, requested: {requested}")


class InvalidTransition(ReservationError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid reservation transition from {current} to {target}")
