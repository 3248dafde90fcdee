"""Services package"""

from .audit_service import AuditService, register_audit_handlers

__all__ = [
    "AuditService",
    "register_audit_handlers",
]
