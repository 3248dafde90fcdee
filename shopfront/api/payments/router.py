"""
Payment API routes
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from .schemas import PaymentInitiate, PaymentVerify
from .services import PaymentService
from .webhooks import process_webhook

router = APIRouter(prefix="/payments", tags=["payments"])

@router.get("/history")
async def payment_history(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's payments"""
    payments = await PaymentService(db).history(principal)
    return success_response(payments, f"{len(payments)} payments")

@router.get("/{payment_id}/status")
async def payment_status(
    payment_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get a payment's current status"""
    payment = await PaymentService(db).get_status(principal, payment_id)
    return success_response(payment, "Payment status retrieved")

@router.post("/webhook/{gateway}")
async def payment_webhook(
    gateway: str,
    request: Request,
    x_razorpay_signature: Optional[str] = Header(None),
    x_webhook_signature: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
):
    """Gateway callback, authenticated by its signature"""
    body = await request.body()
    result = await process_webhook(db, gateway, body, x_razorpay_signature or x_webhook_signature)
    return success_response(result, "Webhook processed")

@router.post("/{gateway}/initiate")
async def initiate_payment(
    gateway: str,
    data: PaymentInitiate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Start a payment for an order"""
    result = await PaymentService(db).initiate(principal, data.order_id, gateway, data.method)
    return success_response(result, "Payment initiated")

@router.post("/{gateway}/verify")
async def verify_payment(
    gateway: str,
    data: PaymentVerify,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Verify a payment after the client completed it at the gateway"""
    payment = await PaymentService(db).verify(
        principal,
        payment_id=data.payment_id,
        gateway_order_id=data.gateway_order_id,
        gateway_payment_id=data.gateway_payment_id,
        signature=data.signature,
        gateway_name=gateway
    )
    return success_response(payment, "Payment verified successfully")
