"""Error taxonomy for the billing engine.

Every error carries a stable ``reason`` code so callers (routers, the worker,
the scheduling trigger) can report it without parsing messages.
"""

from typing import Any


class BillingError(Exception):
    """Base class for all billing engine errors."""

    reason = "billing-error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class ValidationError(BillingError):
    """Missing price, malformed membership or an invalid request."""

    reason = "validation-error"


class NotFoundError(BillingError):
    """Member, membership, activity or charge absent."""

    reason = "not-found"


class AlreadyProcessed(BillingError):
    """Automatic generation attempted for a period that already has a processing record."""

    reason = "already-processed"


class AlreadyExists(BillingError):
    """A charge with the same (gym, period, member, membership) key exists."""

    reason = "already-exists"


class AlreadyPaid(BillingError):
    """Settlement attempted on a charge that is not pending."""

    reason = "already-paid"


class ConcurrencyConflict(BillingError):
    """A conditional write on the member debt counter lost a race."""

    reason = "concurrency-conflict"


class CashRegisterClosed(ValidationError):
    """The daily cash register for the payment date is closed."""

    reason = "cash-register-closed"


class PartialBatchFailure(BillingError):
    """Generation finished but some members failed."""

    reason = "partial-batch-failure"

    def __init__(self, errors: list[Any], message: str | None = None):
        super().__init__(message or f"{len(errors)} member(s) failed during generation")
        self.errors = errors
