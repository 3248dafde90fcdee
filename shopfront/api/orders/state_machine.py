"""
Order state machine for the customer-facing status flow
Admin status overrides bypass it
"""

from typing import Dict, List, Set
from shopfront.models.order import OrderStatus

class OrderStateMachine:
    """
    Forward order status graph
    """

    def __init__(self):
        self.transitions: Dict[OrderStatus, Set[OrderStatus]] = {
            OrderStatus.PENDING: {
                OrderStatus.CONFIRMED,
                OrderStatus.PROCESSING,
                OrderStatus.CANCELLED
            },
            OrderStatus.CONFIRMED: {
                OrderStatus.PROCESSING,
                OrderStatus.SHIPPED
            },
            OrderStatus.PROCESSING: {
                OrderStatus.SHIPPED
            },
            OrderStatus.SHIPPED: {
                OrderStatus.DELIVERED
            },
            OrderStatus.DELIVERED: set(),
            OrderStatus.CANCELLED: set()
        }

    def can_transition(
        self,
        current_status: OrderStatus,
        new_status: OrderStatus
    ) -> bool:
        """
        Check if transition is valid

        Args:
            current_status: Current order status
            new_status: Desired new status

        Returns:
            True if transition is allowed
        """
        return new_status in self.transitions.get(current_status, set())

    def get_valid_transitions(self, current_status: OrderStatus) -> List[OrderStatus]:
        """Valid next statuses, in enum order"""
        allowed = self.transitions.get(current_status, set())
        return [status for status in OrderStatus if status in allowed]

    def is_terminal_state(self, status: OrderStatus) -> bool:
        return len(self.transitions.get(status, set())) == 0

    def is_cancellable(self, status: OrderStatus) -> bool:
        """Customers may cancel only while the order is still pending"""
        return status == OrderStatus.PENDING and self.can_transition(status, OrderStatus.CANCELLED)

order_state_machine = OrderStateMachine()
