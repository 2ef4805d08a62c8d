class BrewHavenException(Exception):
    pass


class ValidationError(BrewHavenException):
    pass


class NotFound(BrewHavenException):
    pass


class UnauthorizedError(BrewHavenException):
    pass


class StorageError(BrewHavenException):
    pass


class InvalidStatusTransition(BrewHavenException):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from {current} to {requested}")


class InsufficientInventory(BrewHavenException):
    def __init__(self, product_id: int, requested: int = None, available: int = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        msg = f"Not enough stock for product {product_id}"
        if available is not None:
            msg += f". Available={available}"
        super().__init__(msg)


class ChatProviderError(BrewHavenException):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)
