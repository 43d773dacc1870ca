"""
Booking orchestrator.

One booking attempt walks

    IDLE -> VALIDATING -> PRICING -> PAYING -> COMMITTING -> CONFIRMED

and drops to ABORTED on the first failure. Seats are checked before the
charge so nobody pays for an unsellable seat, and nothing is written
before the charge succeeds. Once the charge is captured the attempt runs
to the end; a commit failure after that point surfaces as RefundRequired.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from cinebook.extensions import db
from cinebook.models import Booking
from cinebook.services.builders import build_booking
from cinebook.services.catalog import CatalogStore
from cinebook.services.errors import (
    BookingError, InvalidRequest, NotAuthenticated, PaymentDeclined,
    PersistenceFailure, RefundRequired, SeatConflict,
)
from cinebook.services.payments import PaymentMethod, charge_with_timeout, create_gateway
from cinebook.services.pricing import PricingContext, price_breakdown
from cinebook.services.seat_ledger import SeatLedger, normalize_seat_labels

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_TIMEOUT = 5.0


class BookingState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PRICING = "pricing"
    PAYING = "paying"
    COMMITTING = "committing"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"


@dataclass
class BookingAttempt:
    movie_id: int
    seats: list
    state: BookingState = BookingState.IDLE
    total: float = 0.0
    receipt: object = None
    booking: Booking = None

    def advance(self, state):
        logger.debug("Booking attempt movie=%s seats=%s: %s -> %s",
                     self.movie_id, self.seats, self.state.value, state.value)
        self.state = state


@dataclass(frozen=True)
class BookingConfirmation:
    booking: Booking
    receipt: object
    breakdown: object
    state: BookingState = BookingState.CONFIRMED

    def to_dict(self):
        return {
            "status": "success",
            "booking": self.booking.to_dict(),
            "receipt": self.receipt.to_dict(),
            "price": self.breakdown.to_dict(),
        }


class BookingOrchestrator:

    def __init__(self, ledger=None, catalog=None, gateway_factory=create_gateway,
                 payment_timeout=DEFAULT_PAYMENT_TIMEOUT, notifier=None):
        self.ledger = ledger or SeatLedger()
        self.catalog = catalog or CatalogStore()
        self.gateway_factory = gateway_factory
        self.payment_timeout = payment_timeout
        self.notifier = notifier

    def quote(self, seat_labels, pricing=None):
        """Price a seat selection without validating or charging anything."""
        seats = normalize_seat_labels(seat_labels)
        return price_breakdown((pricing or PricingContext()).for_seats(len(seats)))

    def create_booking(self, user_session, movie_id, seat_labels, pricing=None,
                       payment_method=None, payer_info=None):
        """
        Sell ``seat_labels`` of ``movie_id`` to the session's user.

        ``pricing`` and ``payment_method`` default to whatever the session
        remembered at checkout. Returns a BookingConfirmation or raises a
        BookingError subclass.
        """
        attempt = BookingAttempt(movie_id=movie_id, seats=[])
        try:
            return self._run(attempt, user_session, pricing, payment_method, payer_info, seat_labels)
        except BookingError:
            attempt.advance(BookingState.ABORTED)
            raise

    def _run(self, attempt, user_session, pricing, payment_method, payer_info, seat_labels):
        attempt.advance(BookingState.VALIDATING)
        if user_session is None or not user_session.is_authenticated:
            raise NotAuthenticated()
        attempt.seats = normalize_seat_labels(seat_labels)
        if self.catalog.find_movie_by_id(attempt.movie_id) is None:
            raise InvalidRequest(f"Movie {attempt.movie_id} does not exist")
        taken = self.ledger.conflicts(attempt.movie_id, attempt.seats)
        if taken:
            logger.warning("Movie %s seats %s already sold", attempt.movie_id, sorted(taken))
            raise SeatConflict(taken)

        attempt.advance(BookingState.PRICING)
        pricing = pricing or user_session.pricing or PricingContext()
        breakdown = price_breakdown(pricing.for_seats(len(attempt.seats)))
        attempt.total = breakdown.total

        attempt.advance(BookingState.PAYING)
        method = PaymentMethod.parse(payment_method or user_session.payment_method)
        if payer_info is None and method is PaymentMethod.PAYPAL:
            payer_info = user_session.user.email
        gateway = self.gateway_factory(method)
        attempt.receipt = charge_with_timeout(gateway, attempt.total, payer_info, self.payment_timeout)
        if not attempt.receipt.success:
            logger.warning("Payment declined for user %s: %s",
                           user_session.user_id, attempt.receipt.status_message)
            raise PaymentDeclined(attempt.receipt)

        attempt.advance(BookingState.COMMITTING)
        attempt.booking = self._commit(attempt, user_session)

        attempt.advance(BookingState.CONFIRMED)
        user_session.add_active_booking(attempt.movie_id)
        logger.info("Booking %s confirmed: user=%s movie=%s seats=%s total=%.2f tx=%s",
                    attempt.booking.id, user_session.user_id, attempt.movie_id,
                    ", ".join(attempt.seats), attempt.total, attempt.receipt.transaction_id)
        return BookingConfirmation(attempt.booking, attempt.receipt, breakdown)

    def _commit(self, attempt, user_session):
        """Write the booking and its seats in one transaction."""
        try:
            booking = build_booking(user_session.user_id, attempt.movie_id,
                                    attempt.seats, attempt.total)
            db.session.add(booking)
            db.session.flush()
            self.ledger.reserve(attempt.movie_id, booking.id, attempt.seats)
            db.session.commit()
            return booking
        except SeatConflict as e:
            db.session.rollback()
            raise self._refund_required(attempt, user_session, e) from e
        except (SQLAlchemyError, InvalidRequest) as e:
            db.session.rollback()
            logger.exception("Booking commit failed for movie %s", attempt.movie_id)
            cause = PersistenceFailure(f"Could not save booking: {e}")
            raise self._refund_required(attempt, user_session, cause) from e

    def _refund_required(self, attempt, user_session, cause):
        error = RefundRequired(attempt.receipt, cause)
        logger.error("Refund required for transaction %s: %s",
                     attempt.receipt.transaction_id, cause.message)
        if self.notifier is not None:
            self.notifier(error, {
                "user_id": user_session.user_id,
                "movie_id": attempt.movie_id,
                "seats": attempt.seats,
                "total": attempt.total,
            })
        return error

    def bookings_for_user(self, user_session):
        if user_session is None or not user_session.is_authenticated:
            return []
        return Booking.query.filter_by(user_id=user_session.user_id) \
            .order_by(Booking.booking_date.desc(), Booking.id.desc()).all()

    def all_bookings(self):
        return Booking.query.order_by(Booking.id).all()

    def is_seat_occupied(self, movie_id, seat_label):
        return self.ledger.is_occupied(movie_id, seat_label)

    def occupied_seats(self, movie_id):
        return self.ledger.occupied_seats(movie_id)
