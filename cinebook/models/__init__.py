from .user import User
from .movie import Movie
from .booking import Booking
from .seat import Seat

__all__ = ["User", "Movie", "Booking", "Seat"]
