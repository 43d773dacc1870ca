import logging

from sqlalchemy.exc import SQLAlchemyError

from cinebook.extensions import db
from cinebook.models import Movie
from cinebook.services.builders import build_movie
from cinebook.services.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class CatalogStore:

    def find_movie_by_id(self, movie_id):
        return db.session.get(Movie, movie_id)

    def find_movie_by_title(self, title):
        return Movie.query.filter(db.func.lower(Movie.title) == title.strip().lower()).first()

    def search_movies_by_title(self, term):
        """Case-insensitive substring match on the title."""
        pattern = f"%{(term or '').strip()}%"
        return Movie.query.filter(Movie.title.ilike(pattern)).order_by(Movie.title).all()

    def all_movies(self):
        return Movie.query.order_by(Movie.id).all()

    def insert_movie(self, movie):
        try:
            db.session.add(movie)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Could not save movie %r", movie.title)
            raise PersistenceFailure(f"Could not save movie: {e}")
        return movie.id

    def add_movie(self, title, genre=None, duration=None, rating=None, description=None,
                  poster_path=None):
        movie = build_movie(title, genre, duration, rating, description, poster_path)
        self.insert_movie(movie)
        logger.info("Added movie %s (%s)", movie.title, movie.id)
        return movie
