"""Entity models."""
from arena.models.base import Record, Region, currency_for_region, local_id, normalize_region, parse_iso, utcnow_iso
from arena.models.enrollment import Enrollment, EnrollmentCreate
from arena.models.game import DailyTournamentTemplate, Game, GameCreate, GameMode, GameUpdate
from arena.models.payment import PaymentRequest, QRCodeMapping
from arena.models.tournament import Tournament, TournamentCreate, TournamentUpdate
from arena.models.transaction import Transaction, TransactionCreate, TransactionType
from arena.models.user import User, UserCreate, Wallet

__all__ = [
    "Record",
    "Region",
    "currency_for_region",
    "local_id",
    "normalize_region",
    "parse_iso",
    "utcnow_iso",
    "Enrollment",
    "EnrollmentCreate",
    "DailyTournamentTemplate",
    "Game",
    "GameCreate",
    "GameMode",
    "GameUpdate",
    "PaymentRequest",
    "QRCodeMapping",
    "Tournament",
    "TournamentCreate",
    "TournamentUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "User",
    "UserCreate",
    "Wallet",
]
