from datetime import datetime

from cinebook.extensions import db


class Movie(db.Model):
    __tablename__ = 'movies'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    genre = db.Column(db.String(50), nullable=False)
    duration = db.Column(db.String(30), nullable=False)
    rating = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)
    poster_path = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "genre": self.genre,
            "duration": self.duration,
            "rating": self.rating,
            "description": self.description,
            "poster_path": self.poster_path,
        }

    def __repr__(self):
        return f'<Movie {self.title}>'
