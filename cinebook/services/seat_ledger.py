"""
Seat ledger: which (movie, seat) pairs are sold.

The ``seats`` table carries a unique constraint on (movie_id, seat_label),
so the database is the final arbiter when two writers race for a seat.
"""
import logging

from sqlalchemy.exc import IntegrityError

from cinebook.extensions import db
from cinebook.models import Seat
from cinebook.services.errors import InvalidRequest, SeatConflict

logger = logging.getLogger(__name__)

SEAT_ROWS = "ABCDEFGH"
SEAT_COLUMNS = 12


def seat_grid():
    """All seat labels of the auditorium, row by row."""
    return [f"{row}{col}" for row in SEAT_ROWS for col in range(1, SEAT_COLUMNS + 1)]


def is_valid_label(label):
    if len(label) < 2 or label[0] not in SEAT_ROWS or not label[1:].isdigit():
        return False
    return 1 <= int(label[1:]) <= SEAT_COLUMNS


def normalize_seat_labels(labels):
    """
    Clean a caller-supplied seat selection.

    Accepts a list or a comma-separated string, strips and upper-cases
    each label and drops duplicates while keeping the first-seen order.
    """
    if labels is None:
        labels = []
    elif isinstance(labels, str):
        labels = labels.split(",")
    elif not isinstance(labels, (list, tuple)):
        raise InvalidRequest("Seats must be a list or a comma-separated string")
    cleaned = []
    for label in labels:
        if not isinstance(label, str):
            raise InvalidRequest("Seat labels must be strings")
        label = label.strip().upper()
        if label and label not in cleaned:
            cleaned.append(label)
    if not cleaned:
        raise InvalidRequest("At least one seat must be selected")
    invalid = [label for label in cleaned if not is_valid_label(label)]
    if invalid:
        raise InvalidRequest("Unknown seats: " + ", ".join(invalid))
    return cleaned


class SeatLedger:

    def is_occupied(self, movie_id, seat_label):
        return db.session.query(Seat.id).filter_by(
            movie_id=movie_id, seat_label=seat_label, is_occupied=True
        ).first() is not None

    def occupied_seats(self, movie_id):
        rows = db.session.query(Seat.seat_label).filter_by(movie_id=movie_id, is_occupied=True)
        return {label for (label,) in rows}

    def conflicts(self, movie_id, seat_labels):
        """The subset of ``seat_labels`` already occupied for ``movie_id``."""
        rows = db.session.query(Seat.seat_label).filter(
            Seat.movie_id == movie_id,
            Seat.is_occupied.is_(True),
            Seat.seat_label.in_(list(seat_labels)),
        )
        return {label for (label,) in rows}

    def seat_map(self, movie_id):
        occupied = self.occupied_seats(movie_id)
        return [
            {"row": row, "seats": [
                {"label": f"{row}{col}", "occupied": f"{row}{col}" in occupied}
                for col in range(1, SEAT_COLUMNS + 1)
            ]}
            for row in SEAT_ROWS
        ]

    def reserve(self, movie_id, booking_id, seat_labels):
        """
        Mark every seat in ``seat_labels`` occupied by ``booking_id``.

        All or nothing: if any seat is taken no row is written and
        SeatConflict lists the taken seats. The rows are flushed into the
        caller's transaction; committing is the caller's job. A uniqueness
        violation raised by a concurrent writer rolls the session back
        before SeatConflict is raised.
        """
        seat_labels = list(seat_labels)
        taken = self.conflicts(movie_id, seat_labels)
        if taken:
            raise SeatConflict(taken)

        released = {
            seat.seat_label: seat
            for seat in Seat.query.filter(
                Seat.movie_id == movie_id,
                Seat.seat_label.in_(seat_labels),
                Seat.is_occupied.is_(False),
            )
        }
        for label in seat_labels:
            seat = released.get(label)
            if seat is None:
                db.session.add(Seat(movie_id=movie_id, seat_label=label,
                                    is_occupied=True, booking_id=booking_id))
            else:
                seat.is_occupied = True
                seat.booking_id = booking_id
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            taken = self.conflicts(movie_id, seat_labels) or set(seat_labels)
            logger.warning("Seat race on movie %s lost for %s", movie_id, sorted(taken))
            raise SeatConflict(taken)
