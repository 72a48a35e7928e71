"""
Order status state machine.

    PENDING -> PROCESSING -> SHIPPED -> DELIVERED
    PENDING | PROCESSING -> CANCELLED

SHIPPED, DELIVERED and CANCELLED cannot be cancelled, DELIVERED and
CANCELLED accept no event at all.
"""
import enum

from storefront.domain.errors import InvalidTransitionError


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class OrderEvent(str, enum.Enum):
    PROCESS = "PROCESS"
    SHIP = "SHIP"
    DELIVER = "DELIVER"
    CANCEL = "CANCEL"


TRANSITIONS: dict[tuple[OrderStatus, OrderEvent], OrderStatus] = {
    (OrderStatus.PENDING, OrderEvent.PROCESS): OrderStatus.PROCESSING,
    (OrderStatus.PENDING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PROCESSING, OrderEvent.SHIP): OrderStatus.SHIPPED,
    (OrderStatus.PROCESSING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.SHIPPED, OrderEvent.DELIVER): OrderStatus.DELIVERED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def transition(current: OrderStatus, event: OrderEvent) -> OrderStatus:
    current = OrderStatus(current)
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransitionError(current, event) from None


def can_cancel(current: OrderStatus) -> bool:
    return (OrderStatus(current), OrderEvent.CANCEL) in TRANSITIONS
