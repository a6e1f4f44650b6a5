"""Payment request and QR code repositories."""
from __future__ import annotations

from typing import Optional

from arena.errors import DuplicatePaymentRequest, PaymentRequestNotFound
from arena.models import PaymentRequest, QRCodeMapping, parse_iso, utcnow_iso
from arena.models.payment import SEED_QR_CODES, PaymentStatus, qr_code_id
from arena.repositories.base import Repository


def _newest_first(requests: list[PaymentRequest]) -> list[PaymentRequest]:
    def when(r: PaymentRequest) -> float:
        dt = parse_iso(r.requested_date)
        return dt.timestamp() if dt else 0.0

    return sorted(requests, key=when, reverse=True)


class PaymentRequestRepository(Repository[PaymentRequest]):
    document = "paymentRequests"
    model = PaymentRequest

    async def list(self, status: Optional[str] = None) -> list[PaymentRequest]:
        requests = await super().list()
        if status:
            requests = [r for r in requests if r.status == status]
        return _newest_first(requests)

    async def list_by_user(self, user_id: str) -> list[PaymentRequest]:
        return [r for r in await self.list() if r.user_id == user_id]

    async def create(self, transaction_id: str, user_id: str, user_email: str, amount: float) -> PaymentRequest:
        request = PaymentRequest(
            id=transaction_id,
            user_id=user_id,
            user_email=user_email,
            amount=amount,
            status="pending",
            requested_date=utcnow_iso(),
        )

        def insert(rows: list[dict]):
            if self._index(rows, transaction_id) >= 0:
                raise DuplicatePaymentRequest(f'Transaction ID "{transaction_id}" has already been submitted.')
            rows.append(request.to_doc())

        await self._mutate(insert)
        return request

    async def transition(
        self, request_id: str, status: PaymentStatus, admin_notes: Optional[str] = None
    ) -> tuple[PaymentRequest, str]:
        """Move a request out of ``pending``. Returns the request and its previous status.

        Only a pending request changes; any other request is returned as stored
        so the caller can decide whether that's an error.
        """

        def apply(rows: list[dict]):
            i = self._index(rows, request_id)
            if i < 0:
                raise PaymentRequestNotFound()
            previous = rows[i].get("status", "pending")
            if previous == "pending":
                changes = {"status": status, "processed_date": utcnow_iso()}
                if admin_notes is not None:
                    changes["admin_notes"] = admin_notes
                rows[i] = self._merge(rows[i], changes).to_doc()
            return rows[i], previous

        row, previous = await self._mutate(apply)
        return self._parse(row), previous


class QRCodeRepository(Repository[QRCodeMapping]):
    document = "qrCodeMappings"
    model = QRCodeMapping

    async def list(self) -> list[QRCodeMapping]:
        return sorted(await super().list(), key=lambda m: m.amount)

    async def get_for_amount(self, amount: float) -> Optional[QRCodeMapping]:
        return next((m for m in await self.list() if m.amount == amount), None)

    async def seed(self) -> bool:
        """Add any default amount that has no mapping yet."""

        def fill(rows: list[dict]):
            amounts = {r.get("amount") for r in rows}
            missing = [m for m in SEED_QR_CODES if m["amount"] not in amounts]
            rows.extend(missing)
            return bool(missing)

        return await self._mutate(fill)

    async def upsert(self, amount: float, qr_code_data_uri: str, description: Optional[str] = None) -> QRCodeMapping:
        mapping = QRCodeMapping(
            id=qr_code_id(amount),
            amount=amount,
            qr_code_data_uri=qr_code_data_uri,
            description=description or f"QR Code for {amount:g} Credits",
        )

        def put(rows: list[dict]):
            for i, row in enumerate(rows):
                if row.get("amount") == amount:
                    rows[i] = mapping.to_doc()
                    return
            rows.append(mapping.to_doc())

        await self._mutate(put)
        return mapping
