from flask import request, session, jsonify, current_app

from cinebook.services.errors import InvalidRequest
from cinebook.services.identity import IdentityStore
from cinebook.services.session import UserSession

identity = IdentityStore()


def request_data():
    """JSON body or form fields, whichever the client sent."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return data


def load_user_session():
    """Rebuild the caller's UserSession from the signed session cookie."""
    user_id = session.get("user_id")
    user = identity.find_user_by_id(user_id) if user_id else None
    if user is None:
        return UserSession()
    return UserSession(user, {int(k): v for k, v in session.get("active_bookings", {}).items()})


def store_user_session(user_session):
    if not user_session.is_authenticated:
        session.clear()
        return
    session["user_id"] = user_session.user_id
    session["username"] = user_session.user.username
    session["active_bookings"] = {str(k): v for k, v in user_session.active_bookings.items()}


def auth_routes(app):

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request_data()
        user = identity.verify_credentials(data.get("email"), data.get("password"))
        if user is None:
            current_app.logger.warning("Failed login for %s", data.get("email"))
            return jsonify({"status": "error", "message": "Invalid email or password"}), 401

        user_session = load_user_session().login(user)
        session.clear()
        store_user_session(user_session)
        current_app.logger.info("User %s logged in", user.username)
        return jsonify({"status": "success", "user": user.to_dict()})

    @app.route("/api/register", methods=["POST"])
    def register():
        data = request_data()
        if data.get("confirm_password") is not None and data.get("password") != data.get("confirm_password"):
            raise InvalidRequest("Passwords do not match")

        user = identity.register(
            name=data.get("name"),
            email=data.get("email"),
            username=data.get("username"),
            password=data.get("password"),
        )
        session.clear()
        store_user_session(UserSession(user))
        return jsonify({"status": "success", "user": user.to_dict()}), 201

    @app.route("/api/logout", methods=["POST"])
    def logout():
        user_session = load_user_session()
        user_session.logout()
        store_user_session(user_session)
        return jsonify({"status": "success"})

    @app.route("/api/me")
    def me():
        user_session = load_user_session()
        if not user_session.is_authenticated:
            return jsonify({"status": "error", "message": "Not logged in"}), 401
        return jsonify({
            "status": "success",
            "user": user_session.user.to_dict(),
            "active_bookings": {str(k): v for k, v in user_session.active_bookings.items()},
        })
