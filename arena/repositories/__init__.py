"""Entity repositories over the document store."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from arena.repositories.enrollments import EnrollmentRepository
from arena.repositories.games import GameRepository
from arena.repositories.payments import PaymentRequestRepository, QRCodeRepository
from arena.repositories.tournaments import TournamentRepository
from arena.repositories.transactions import TransactionRepository
from arena.repositories.users import UserRepository
from arena.store import DocumentStore, get_store


@dataclass
class Repositories:
    """All repositories sharing one store."""

    tournaments: TournamentRepository
    users: UserRepository
    enrollments: EnrollmentRepository
    transactions: TransactionRepository
    games: GameRepository
    payment_requests: PaymentRequestRepository
    qr_codes: QRCodeRepository

    @classmethod
    def for_store(cls, store: DocumentStore) -> "Repositories":
        return cls(
            tournaments=TournamentRepository(store),
            users=UserRepository(store),
            enrollments=EnrollmentRepository(store),
            transactions=TransactionRepository(store),
            games=GameRepository(store),
            payment_requests=PaymentRequestRepository(store),
            qr_codes=QRCodeRepository(store),
        )


def get_repositories(store: Optional[DocumentStore] = None) -> Repositories:
    return Repositories.for_store(store or get_store())


__all__ = [
    "EnrollmentRepository",
    "GameRepository",
    "PaymentRequestRepository",
    "QRCodeRepository",
    "Repositories",
    "TournamentRepository",
    "TransactionRepository",
    "UserRepository",
    "get_repositories",
]
