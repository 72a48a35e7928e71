import pytest

from storefront.domain.errors import InvalidTransitionError
from storefront.domain.order_status import (
    OrderEvent,
    OrderStatus,
    TERMINAL_STATUSES,
    can_cancel,
    transition,
)

ALLOWED = {
    (OrderStatus.PENDING, OrderEvent.PROCESS): OrderStatus.PROCESSING,
    (OrderStatus.PENDING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PROCESSING, OrderEvent.SHIP): OrderStatus.SHIPPED,
    (OrderStatus.PROCESSING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.SHIPPED, OrderEvent.DELIVER): OrderStatus.DELIVERED,
}


@pytest.mark.parametrize("status", list(OrderStatus))
@pytest.mark.parametrize("event", list(OrderEvent))
def test_transition_table_is_exhaustive(status, event):
    expected = ALLOWED.get((status, event))
    if expected is None:
        with pytest.raises(InvalidTransitionError):
            transition(status, event)
    else:
        assert transition(status, event) is expected


def test_transition_accepts_plain_status_strings():
    assert transition("PENDING", OrderEvent.CANCEL) is OrderStatus.CANCELLED


def test_only_pending_and_processing_can_be_cancelled():
    assert {s for s in OrderStatus if can_cancel(s)} == {OrderStatus.PENDING, OrderStatus.PROCESSING}


def test_terminal_statuses_accept_no_event():
    for status in TERMINAL_STATUSES:
        for event in OrderEvent:
            with pytest.raises(InvalidTransitionError):
                transition(status, event)


def test_invalid_transition_error_carries_context():
    with pytest.raises(InvalidTransitionError) as exc:
        transition(OrderStatus.SHIPPED, OrderEvent.CANCEL)

    assert exc.value.current is OrderStatus.SHIPPED
    assert exc.value.event is OrderEvent.CANCEL
    assert "SHIPPED" in exc.value.message
