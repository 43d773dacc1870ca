"""
Error taxonomy for the booking core.

Nothing here is retried inside the core; every error reaches the caller,
which decides whether to re-prompt (different seats, another card) or
escalate (refunds).
"""


class BookingError(Exception):
    """Base class for every failure the booking core reports."""

    status_code = 400
    code = "booking_error"

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__.strip())
        self.message = message or self.__class__.__doc__.strip()

    def to_dict(self):
        return {"status": "error", "error": self.code, "message": self.message}


class NotAuthenticated(BookingError):
    """Please log in before booking."""

    status_code = 401
    code = "not_authenticated"


class InvalidRequest(BookingError):
    """The booking request is invalid."""

    code = "invalid_request"


class RegistrationError(InvalidRequest):
    """Registration failed."""

    status_code = 409
    code = "registration_failed"


class SeatConflict(InvalidRequest):
    """One or more seats are already occupied."""

    status_code = 409
    code = "seat_conflict"

    def __init__(self, conflicting_seats, message=None):
        self.conflicting_seats = frozenset(conflicting_seats)
        super().__init__(
            message or "Seats already occupied: " + ", ".join(sorted(self.conflicting_seats))
        )

    def to_dict(self):
        data = super().to_dict()
        data["conflicting_seats"] = sorted(self.conflicting_seats)
        return data


class PaymentDeclined(BookingError):
    """The payment was declined."""

    status_code = 402
    code = "payment_declined"

    def __init__(self, receipt=None, message=None):
        self.receipt = receipt
        super().__init__(message or (receipt.status_message if receipt else None))


class PersistenceFailure(BookingError):
    """The booking could not be saved."""

    status_code = 500
    code = "persistence_failure"


class RefundRequired(BookingError):
    """
    Payment was captured but the booking could not be committed.

    ``cause`` is the SeatConflict or PersistenceFailure that aborted the
    commit; ``receipt`` identifies the charge an operator has to reverse.
    """

    status_code = 502
    code = "refund_required"

    def __init__(self, receipt, cause):
        self.receipt = receipt
        self.cause = cause
        super().__init__(
            f"Payment {receipt.transaction_id} was captured but the booking failed: {cause.message}"
        )

    @property
    def conflicting_seats(self):
        return getattr(self.cause, "conflicting_seats", frozenset())

    def to_dict(self):
        data = super().to_dict()
        data["transaction_id"] = self.receipt.transaction_id
        data["cause"] = self.cause.code
        if self.conflicting_seats:
            data["conflicting_seats"] = sorted(self.conflicting_seats)
        return data
