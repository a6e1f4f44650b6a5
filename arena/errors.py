"""Domain errors. Each carries the HTTP status the API answers with."""
from __future__ import annotations


class ArenaError(Exception):
    """Base class for errors reported to the end user."""

    status_code = 400
    code = "arena_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.code


class StoreError(ArenaError):
    """Stored document could not be read or written."""

    status_code = 500
    code = "store_error"


# --- Validation ---


class ValidationFailed(ArenaError):
    """Malformed or missing input."""

    status_code = 422
    code = "validation_failed"


class InvalidWallet(ValidationFailed):
    """Wallet balances must be non-negative."""

    code = "invalid_wallet"


# --- Not found ---


class NotFound(ArenaError):
    status_code = 404
    code = "not_found"


class TournamentNotFound(NotFound):
    """Tournament not found."""

    code = "tournament_not_found"


class GameNotFound(NotFound):
    """Game not found."""

    code = "game_not_found"


class UserNotFound(NotFound):
    """User not found."""

    code = "user_not_found"


class EnrollmentNotFound(NotFound):
    """Enrollment not found."""

    code = "enrollment_not_found"


class PaymentRequestNotFound(NotFound):
    """Payment request not found."""

    code = "payment_request_not_found"


class TemplateNotFound(NotFound):
    """Daily tournament template not found."""

    code = "template_not_found"


# --- Policy denials ---


class PolicyDenied(ArenaError):
    status_code = 409
    code = "policy_denied"


class GameMismatch(PolicyDenied):
    """Tournament does not belong to this game."""

    status_code = 404
    code = "game_mismatch"


class RegionMismatch(PolicyDenied):
    """Tournament is not open to your region."""

    status_code = 403
    code = "region_mismatch"


class AlreadyEnrolled(PolicyDenied):
    """User is already enrolled in this tournament."""

    code = "already_enrolled"


class TournamentFull(PolicyDenied):
    """This tournament is already full."""

    code = "tournament_full"


class EmailAlreadyRegistered(PolicyDenied):
    """Email already in use."""

    code = "email_in_use"


class DuplicateGame(PolicyDenied):
    """A game with this id already exists."""

    code = "duplicate_game"


class DuplicatePaymentRequest(PolicyDenied):
    """This transaction id has already been submitted."""

    code = "duplicate_payment_request"


class PaymentRequestProcessed(PolicyDenied):
    """Payment request has already been processed."""

    code = "payment_request_processed"


class TemplateTimePassed(PolicyDenied):
    """The template's time has already passed for today."""

    code = "template_time_passed"


class AppendOnlyLedger(PolicyDenied):
    """Transactions are append-only."""

    code = "append_only"


class InsufficientBalance(ArenaError):
    """Insufficient balance."""

    status_code = 402
    code = "insufficient_balance"


# --- Enrollment failures after payment ---


class SpotUnavailable(ArenaError):
    """Failed to secure a spot. Your wallet balance has been restored."""

    status_code = 409
    code = "spot_unavailable"


class EnrollmentRecordFailed(ArenaError):
    """Enrollment record creation failed. Your balance and the tournament spot have been restored."""

    status_code = 500
    code = "enrollment_record_failed"


class EnrollmentFailed(ArenaError):
    """Enrollment failed unexpectedly. All completed steps have been reversed."""

    status_code = 500
    code = "enrollment_failed"
