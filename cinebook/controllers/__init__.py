from flask import jsonify, current_app

from cinebook.services.errors import BookingError
from .auth_controller import auth_routes
from .movie_controller import movie_routes
from .booking_controller import booking_routes


def register_error_handlers(app):
    @app.errorhandler(BookingError)
    def handle_booking_error(error):
        current_app.logger.info("%s: %s", error.code, error.message)
        return jsonify(error.to_dict()), error.status_code


def register_controllers(app):
    register_error_handlers(app)
    auth_routes(app)
    movie_routes(app)
    booking_routes(app)
