from cinebook.extensions import db


class Seat(db.Model):
    """One sold seat of one movie. Rows are created lazily at booking time."""
    __tablename__ = 'seats'
    __table_args__ = (
        db.UniqueConstraint('movie_id', 'seat_label', name='uq_seats_movie_label'),
    )

    id = db.Column(db.Integer, primary_key=True)
    movie_id = db.Column(db.Integer, db.ForeignKey('movies.id'), nullable=False)
    seat_label = db.Column(db.String(10), nullable=False)
    is_occupied = db.Column(db.Boolean, default=False, nullable=False)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=True)

    def __repr__(self):
        return f'<Seat {self.movie_id}:{self.seat_label} occupied={self.is_occupied}>'
