"""Validating constructors for Movie and Booking rows."""
from cinebook.models import Booking, Movie
from cinebook.models.booking import SEAT_SEPARATOR
from cinebook.services.errors import InvalidRequest

DEFAULT_GENRE = "General"
DEFAULT_DURATION = "120 min"
DEFAULT_RATING = "PG-13"

RATING_PRESETS = {"family": "G", "teen": "PG-13", "mature": "R"}
CERTIFICATES = {"G", "PG", "PG-13", "R", "NC-17", "NR"}

GENRE_DESCRIPTIONS = {
    "action": "An action-packed thriller with intense sequences and stunts.",
    "comedy": "A hilarious comedy that will make you laugh out loud.",
    "drama": "A compelling drama with emotional depth and character development.",
    "horror": "A terrifying horror experience that will keep you on the edge of your seat.",
    "sci-fi": "A futuristic science fiction adventure exploring new worlds.",
    "romance": "A heartwarming romantic story about love and relationships.",
    "thriller": "A suspenseful thriller with unexpected twists and turns.",
}


def normalize_rating(rating):
    """Accept a 0.0-10.0 score or a certificate such as PG-13."""
    if rating is None or str(rating).strip() == "":
        return DEFAULT_RATING
    rating = str(rating).strip()
    if rating.lower() in RATING_PRESETS:
        return RATING_PRESETS[rating.lower()]
    if rating.upper() in CERTIFICATES:
        return rating.upper()
    try:
        score = float(rating)
    except ValueError:
        raise InvalidRequest(f"Unrecognised rating: {rating}")
    if not 0.0 <= score <= 10.0:
        raise InvalidRequest("Rating must be between 0.0 and 10.0")
    return f"{score:.1f}"


def build_movie(title, genre=None, duration=None, rating=None, description=None, poster_path=None):
    if not title or not str(title).strip():
        raise InvalidRequest("Title is required")
    genre = (genre or DEFAULT_GENRE).strip()
    if not description:
        description = GENRE_DESCRIPTIONS.get(genre.lower().replace("scifi", "sci-fi"), "")
    return Movie(
        title=str(title).strip(),
        genre=genre,
        duration=str(duration).strip() if duration else DEFAULT_DURATION,
        rating=normalize_rating(rating),
        description=description,
        poster_path=poster_path or "",
    )


def build_booking(user_id, movie_id, seat_labels, total_price):
    if not user_id or user_id <= 0:
        raise InvalidRequest("Valid user ID is required")
    if not movie_id or movie_id <= 0:
        raise InvalidRequest("Valid movie ID is required")
    if not seat_labels:
        raise InvalidRequest("At least one seat must be selected")
    return Booking(
        user_id=user_id,
        movie_id=movie_id,
        seats=SEAT_SEPARATOR.join(seat_labels),
        total_price=total_price,
    )
