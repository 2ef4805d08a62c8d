from enum import Enum

from brewhaven.errors import InvalidStatusTransition, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Delivery pipeline in order; cancelled sits outside it.
PIPELINE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

TERMINAL = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown order status: {value}")


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL


def allowed_transitions(current) -> list:
    cur = parse_status(current)
    if cur in TERMINAL:
        return []
    forward = PIPELINE[PIPELINE.index(cur) + 1 :]
    return forward + [OrderStatus.CANCELLED]


def check_transition(current, requested) -> OrderStatus:
    """
    Validate a status change and return the new status.

    Forward moves along the pipeline may skip steps; cancellation is allowed
    from any non-terminal status. Everything else raises InvalidStatusTransition.
    """
    cur = parse_status(current)
    new = parse_status(requested)
    if new not in allowed_transitions(cur):
        raise InvalidStatusTransition(cur.value, new.value)
    return new
