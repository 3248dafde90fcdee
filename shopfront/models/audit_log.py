"""Admin audit log model"""

from sqlalchemy import Column, String, Uuid, ForeignKey, JSON, Index
import enum

from .base import BaseModel

class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DISCOUNT = "DISCOUNT"
    ORDER_STATUS = "ORDER_STATUS"

class AuditEntity(str, enum.Enum):
    PRODUCT = "Product"
    ORDER = "Order"
    USER = "User"
    DISCOUNT = "Discount"

class AuditLog(BaseModel):
    """Record of a committed admin mutation"""

    __tablename__ = "audit_logs"

    admin_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(20), nullable=False)
    entity = Column(String(20), nullable=False)
    entity_id = Column(Uuid(as_uuid=True), nullable=True)
    changes = Column(JSON, default=dict)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_audit_logs_action_entity", "action", "entity"),
    )
