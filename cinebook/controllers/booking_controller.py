# cinebook/controllers/booking_controller.py
from flask import jsonify, current_app

from cinebook.services.pricing import pricing_from_options
from cinebook.services.seat_ledger import normalize_seat_labels
from .auth_controller import load_user_session, store_user_session, request_data


def orchestrator():
    return current_app.extensions["cinebook.orchestrator"]


def pricing_for(options, seats):
    config = current_app.config
    return pricing_from_options(
        options,
        seat_count=len(seats),
        base_price=config["CINEBOOK_BASE_PRICE"],
        service_fee=config["CINEBOOK_SERVICE_FEE"],
        tax_rate=config["CINEBOOK_TAX_RATE"],
    )


def booking_routes(app):

    @app.route("/api/quote", methods=["POST"])
    def quote():
        data = request_data()
        seats = normalize_seat_labels(data.get("seats"))
        breakdown = orchestrator().quote(seats, pricing_for(data.get("pricing"), seats))
        return jsonify({"status": "success", "price": breakdown.to_dict(),
                        "summary": breakdown.summary()})

    @app.route("/api/bookings", methods=["POST"])
    def create_booking():
        data = request_data()
        user_session = load_user_session()
        seats = data.get("seats") or []
        try:
            movie_id = int(data.get("movie_id") or 0)
        except (TypeError, ValueError):
            movie_id = 0

        # Pricing options are parsed lazily so an anonymous caller is
        # rejected before anything else is looked at.
        pricing = pricing_for(data.get("pricing"), normalize_seat_labels(seats)) \
            if user_session.is_authenticated else None

        confirmation = orchestrator().create_booking(
            user_session,
            movie_id,
            seats,
            pricing=pricing,
            payment_method=data.get("payment_method"),
            payer_info=data.get("payer_info"),
        )
        store_user_session(user_session)
        return jsonify(confirmation.to_dict()), 201

    @app.route("/api/my-bookings")
    def my_bookings():
        user_session = load_user_session()
        if not user_session.is_authenticated:
            return jsonify({"status": "error", "message": "Not logged in"}), 401
        bookings = orchestrator().bookings_for_user(user_session)
        return jsonify([b.to_dict() for b in bookings])
