"""Payment API: QR codes (public read, admin write) and the admin payment request queue."""
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from arena.models import User
from arena.repositories import get_repositories
from arena.services.payments import PaymentService
from web.auth import require_admin_user

router = APIRouter(prefix="/api", tags=["payments"])


class QRCodeUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qr_code_data_uri: str = Field(alias="qrCodeDataUri", min_length=1)
    description: Optional[str] = None


class DeclineBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_notes: Optional[str] = Field(default=None, alias="adminNotes", max_length=500)


# --- QR codes ---


@router.get("/payments/qr-codes")
async def list_qr_codes():
    """QR codes for every top-up amount, smallest first."""
    return [m.to_doc() for m in await get_repositories().qr_codes.list()]


@router.get("/payments/qr-codes/{amount}")
async def get_qr_code(amount: float):
    mapping = await get_repositories().qr_codes.get_for_amount(amount)
    if not mapping:
        raise HTTPException(404, f"No QR code configured for {amount:g} credits")
    return mapping.to_doc()


@router.put("/admin/qr-codes/{amount}")
async def put_qr_code(amount: float, body: QRCodeUpdate, admin: User = Depends(require_admin_user)):
    """Set the QR code image for one amount (admin only)."""
    if amount <= 0:
        raise HTTPException(422, "Amount must be greater than zero")
    mapping = await get_repositories().qr_codes.upsert(amount, body.qr_code_data_uri, body.description)
    return mapping.to_doc()


# --- Payment requests ---


@router.get("/admin/payment-requests")
async def list_payment_requests(
    status: Optional[Literal["pending", "approved", "declined"]] = None,
    admin: User = Depends(require_admin_user),
):
    """All payment requests, newest first (admin only)."""
    return [r.to_doc() for r in await get_repositories().payment_requests.list(status)]


@router.post("/admin/payment-requests/{request_id}/approve")
async def approve_payment_request(request_id: str, admin: User = Depends(require_admin_user)):
    request = await PaymentService().approve_payment_request(request_id)
    return request.to_doc()


@router.post("/admin/payment-requests/{request_id}/decline")
async def decline_payment_request(
    request_id: str,
    body: Optional[DeclineBody] = None,
    admin: User = Depends(require_admin_user),
):
    notes = body.admin_notes if body else None
    request = await PaymentService().decline_payment_request(request_id, notes)
    return request.to_doc()
