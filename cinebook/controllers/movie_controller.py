from flask import request, jsonify

from cinebook.extensions import cache
from cinebook.services.catalog import CatalogStore
from cinebook.services.errors import NotAuthenticated
from cinebook.services.seat_ledger import SeatLedger
from .auth_controller import load_user_session, request_data

catalog = CatalogStore()
ledger = SeatLedger()


def movie_routes(app):

    @cache.memoize(timeout=300)
    def search_cached(term):
        return [m.to_dict() for m in catalog.search_movies_by_title(term)]

    @app.route("/api/movies")
    def list_movies():
        term = request.args.get("q", "").strip()
        if term:
            return jsonify(search_cached(term))
        return jsonify([m.to_dict() for m in catalog.all_movies()])

    @app.route("/api/movies", methods=["POST"])
    def add_movie():
        if not load_user_session().is_authenticated:
            raise NotAuthenticated()
        data = request_data()
        movie = catalog.add_movie(
            title=data.get("title"),
            genre=data.get("genre"),
            duration=data.get("duration"),
            rating=data.get("rating"),
            description=data.get("description"),
            poster_path=data.get("poster_path"),
        )
        cache.delete_memoized(search_cached)
        return jsonify({"status": "success", "movie": movie.to_dict()}), 201

    @app.route("/api/movies/<int:movie_id>")
    def movie_detail(movie_id):
        movie = catalog.find_movie_by_id(movie_id)
        if not movie:
            return jsonify({"status": "error", "message": "Movie not found"}), 404
        return jsonify(movie.to_dict())

    @app.route("/api/movies/<int:movie_id>/seats")
    def seat_map(movie_id):
        if not catalog.find_movie_by_id(movie_id):
            return jsonify({"status": "error", "message": "Movie not found"}), 404
        return jsonify({
            "movie_id": movie_id,
            "occupied": sorted(ledger.occupied_seats(movie_id)),
            "layout": ledger.seat_map(movie_id),
        })
