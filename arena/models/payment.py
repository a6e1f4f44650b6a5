"""Credit top-up requests and the QR codes users pay through."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from arena.models.base import Record

PaymentStatus = Literal["pending", "approved", "declined"]


class PaymentRequest(Record):
    """Manual top-up; ``id`` is the payment transaction id the user submitted."""

    id: str
    user_id: str
    user_email: str
    amount: float = Field(gt=0)
    status: PaymentStatus = "pending"
    requested_date: str
    processed_date: Optional[str] = None
    admin_notes: Optional[str] = None


class QRCodeMapping(Record):
    id: str  # amount_<n>
    amount: float = Field(gt=0)
    qr_code_data_uri: str
    description: Optional[str] = None


def qr_code_id(amount: float) -> str:
    return f"amount_{int(amount) if float(amount).is_integer() else amount}"


SEED_QR_CODES: list[dict] = [
    {
        "id": qr_code_id(amount),
        "amount": amount,
        "qrCodeDataUri": f"https://placehold.co/250x250.png?text=Scan+for+{amount}+Credits",
        "description": f"QR Code for {amount} Credits",
    }
    for amount in (50, 100, 150)
]
