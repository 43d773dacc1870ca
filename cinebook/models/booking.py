from datetime import datetime

from cinebook.extensions import db

SEAT_SEPARATOR = ", "


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    movie_id = db.Column(db.Integer, db.ForeignKey('movies.id'), nullable=False)
    seats = db.Column(db.Text, nullable=False)
    total_price = db.Column(db.Float, nullable=False)
    booking_date = db.Column(db.DateTime, default=datetime.utcnow)

    movie = db.relationship('Movie', lazy='joined')
    seat_rows = db.relationship('Seat', backref='booking', lazy=True)

    @property
    def seat_labels(self):
        """Seat labels in the order they were booked."""
        return [s.strip() for s in self.seats.split(",") if s.strip()]

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "movie_id": self.movie_id,
            "movie_title": self.movie.title if self.movie else None,
            "seats": self.seat_labels,
            "total_price": self.total_price,
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
        }

    def __repr__(self):
        return f'<Booking {self.id} movie={self.movie_id} seats={self.seats}>'
