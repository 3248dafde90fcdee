"""
In-process event bus
Services publish events after their transaction commits; handlers such as the
audit writer subscribe by event type
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type
from uuid import UUID
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class DomainEvent:
    """Base class for events published after a successful commit"""

    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)

@dataclass(frozen=True)
class AdminActionEvent(DomainEvent):
    """A privileged mutation that must leave an audit trail"""

    admin_id: UUID
    action: str
    entity: str
    entity_id: Optional[UUID] = None
    changes: Dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

@dataclass(frozen=True)
class OrderPlacedEvent(DomainEvent):
    order_id: UUID
    user_id: UUID
    total: str

@dataclass(frozen=True)
class PaymentStatusChangedEvent(DomainEvent):
    payment_id: UUID
    order_id: UUID
    status: str

Handler = Callable[[DomainEvent], Awaitable[None]]

class EventBus:
    """Dispatches events to the handlers registered for their type"""

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type[DomainEvent], handler: Handler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[Handler]:
        return list(self._handlers.get(event_type, []))

    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver an event to its handlers
        The mutation has already committed, so a failing handler is logged
        and never rolls anything back
        """
        handlers = self.handlers_for(type(event))
        if not handlers:
            logger.debug(f"No handlers for {type(event).__name__}")
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    f"Event handler {getattr(handler, '__name__', handler)} failed "
                    f"for {type(event).__name__}"
                )

event_bus = EventBus()
