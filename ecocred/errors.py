# ecocred/errors.py
"""
Ledger error taxonomy.

Every contract operation is all-or-nothing: raising any of these inside a
ledger transaction rolls the whole session back. The ``kind`` is what API
clients and the off-chain indexer see.
"""
import http


class LedgerError(Exception):
    """Base exception for every rejected ledger operation."""
    kind = "LedgerError"
    http_status = http.HTTPStatus.BAD_REQUEST

    def __init__(self, message: str = None):
        super().__init__(message or self.kind)

    def to_dict(self):
        return {"status": "error", "error": self.kind, "message": str(self)}


class UnauthorizedError(LedgerError):
    """Caller lacks the required role, ownership or minter status."""
    kind = "Unauthorized"
    http_status = http.HTTPStatus.FORBIDDEN


class InsufficientPowerError(UnauthorizedError):
    """Caller's token balance is too small to propose or vote."""
    kind = "InsufficientPower"


class NotFoundError(LedgerError):
    kind = "NotFound"
    http_status = http.HTTPStatus.NOT_FOUND


class InvalidArgumentError(LedgerError):
    kind = "InvalidArgument"
    http_status = http.HTTPStatus.BAD_REQUEST


class InvalidRecipientError(InvalidArgumentError):
    kind = "InvalidRecipient"


class InvalidCreditsError(InvalidArgumentError):
    kind = "InvalidCredits"


class InsufficientBalanceError(LedgerError):
    kind = "InsufficientBalance"
    http_status = http.HTTPStatus.CONFLICT


class InsufficientAllowanceError(LedgerError):
    kind = "InsufficientAllowance"
    http_status = http.HTTPStatus.CONFLICT


class InsufficientPaymentError(LedgerError):
    kind = "InsufficientPayment"
    http_status = http.HTTPStatus.PAYMENT_REQUIRED


class NotActiveError(LedgerError):
    kind = "NotActive"
    http_status = http.HTTPStatus.CONFLICT


class AlreadyFinalizedError(LedgerError):
    kind = "AlreadyFinalized"
    http_status = http.HTTPStatus.CONFLICT


class AlreadyVotedError(LedgerError):
    kind = "AlreadyVoted"
    http_status = http.HTTPStatus.CONFLICT


class AlreadyClaimedError(LedgerError):
    kind = "AlreadyClaimed"
    http_status = http.HTTPStatus.CONFLICT


class AlreadyExecutedError(LedgerError):
    kind = "AlreadyExecuted"
    http_status = http.HTTPStatus.CONFLICT


class StillLockedError(LedgerError):
    kind = "StillLocked"
    http_status = http.HTTPStatus.CONFLICT


class VotingStillOpenError(LedgerError):
    kind = "VotingStillOpen"
    http_status = http.HTTPStatus.CONFLICT


class VotingClosedError(LedgerError):
    kind = "VotingClosed"
    http_status = http.HTTPStatus.CONFLICT


class QuorumNotMetError(LedgerError):
    kind = "QuorumNotMet"
    http_status = http.HTTPStatus.CONFLICT


class ProposalRejectedError(LedgerError):
    kind = "ProposalRejected"
    http_status = http.HTTPStatus.CONFLICT


class ExecutionFailedError(LedgerError):
    """The proposal's target call reverted; the proposal stays unexecuted."""
    kind = "ExecutionFailed"
    http_status = http.HTTPStatus.UNPROCESSABLE_ENTITY


class NotBootstrappedError(LedgerError):
    """Ledger settings have not been seeded yet."""
    kind = "NotBootstrapped"
    http_status = http.HTTPStatus.SERVICE_UNAVAILABLE
