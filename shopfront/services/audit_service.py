"""Audit logging service"""

from typing import Any, Dict, Optional
from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from shopfront.core.database import get_db_context
from shopfront.core.event_bus import (
    AdminActionEvent,
    EventBus,
    OrderPlacedEvent,
    PaymentStatusChangedEvent,
    event_bus,
)
from shopfront.models import AuditLog
from shopfront.utils.pagination import paginate

logger = logging.getLogger(__name__)

class AuditService:
    """Service for recording and reading admin actions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(self, event: AdminActionEvent) -> AuditLog:
        """Persist one admin action"""
        log = AuditLog(
            admin_id=event.admin_id,
            action=event.action,
            entity=event.entity,
            entity_id=event.entity_id,
            changes=jsonable_encoder(event.changes),
            ip_address=event.ip_address,
            user_agent=event.user_agent,
            created_at=event.occurred_at,
        )
        self.db.add(log)
        await self.db.commit()
        return log

    async def list_logs(
        self,
        action: Optional[str] = None,
        entity: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Dict[str, Any]:
        """Get audit logs, newest first, with optional filters"""
        stmt = select(AuditLog)

        if action:
            stmt = stmt.where(AuditLog.action == action)
        if entity:
            stmt = stmt.where(AuditLog.entity == entity)

        stmt = stmt.order_by(AuditLog.created_at.desc())
        result = await paginate(self.db, stmt, page, limit)
        result["items"] = [log.to_dict() for log in result["items"]]
        return result

async def write_audit_log(event: AdminActionEvent) -> None:
    """Event handler, runs in its own session after the mutation committed"""
    async with get_db_context() as db:
        await AuditService(db).record(event)
    logger.info(f"Audit: {event.action} {event.entity} {event.entity_id} by {event.admin_id}")

async def log_order_placed(event: OrderPlacedEvent) -> None:
    logger.info(f"Order {event.order_id} placed by {event.user_id} total {event.total}")

async def log_payment_status(event: PaymentStatusChangedEvent) -> None:
    logger.info(f"Payment {event.payment_id} for order {event.order_id} is {event.status}")

def register_audit_handlers(bus: EventBus = event_bus) -> None:
    bus.subscribe(AdminActionEvent, write_audit_log)
    bus.subscribe(OrderPlacedEvent, log_order_placed)
    bus.subscribe(PaymentStatusChangedEvent, log_payment_status)
