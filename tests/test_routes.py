import pytest

from cinebook.models import Booking


def register(client, email="dana@example.com", username="dana", password="pw123"):
    return client.post("/api/register", json={
        "name": "Dana Le", "email": email, "username": username,
        "password": password, "confirm_password": password,
    })


def add_movie(client, title="Dune"):
    return client.post("/api/movies", json={"title": title, "genre": "Sci-Fi", "rating": "8.1"})


def test_register_login_logout(client):
    assert register(client).status_code == 201
    assert client.get("/api/me").status_code == 200

    client.post("/api/logout")
    assert client.get("/api/me").status_code == 401

    bad = client.post("/api/login", json={"email": "dana@example.com", "password": "nope"})
    assert bad.status_code == 401
    good = client.post("/api/login", json={"email": "dana@example.com", "password": "pw123"})
    assert good.status_code == 200
    assert good.get_json()["user"]["username"] == "dana"


def test_duplicate_registration(client):
    register(client)
    response = register(client)
    assert response.status_code == 409
    assert response.get_json()["error"] == "registration_failed"


def test_password_confirmation_must_match(client):
    response = client.post("/api/register", json={
        "name": "Eve", "email": "eve@example.com", "username": "eve",
        "password": "a", "confirm_password": "b",
    })
    assert response.status_code == 400


def test_adding_movies_requires_login(client):
    assert add_movie(client).status_code == 401
    register(client)
    response = add_movie(client)
    assert response.status_code == 201
    assert response.get_json()["movie"]["rating"] == "8.1"


def test_search_and_detail(client):
    register(client)
    movie_id = add_movie(client, "Dune: Part Two").get_json()["movie"]["id"]
    add_movie(client, "Oppenheimer")

    found = client.get("/api/movies?q=dune").get_json()
    assert [m["title"] for m in found] == ["Dune: Part Two"]
    assert len(client.get("/api/movies").get_json()) == 2
    assert client.get(f"/api/movies/{movie_id}").get_json()["genre"] == "Sci-Fi"
    assert client.get("/api/movies/999").status_code == 404


def test_quote(client):
    response = client.post("/api/quote", json={
        "seats": ["A1", "A2", "A3", "A4", "A5"],
        "pricing": {"discounts": ["group"]},
    })
    body = response.get_json()
    assert body["price"]["total"] == 46.50
    assert "Total: $46.50" in body["summary"]


def test_booking_flow(client, gateway):
    register(client)
    movie_id = add_movie(client).get_json()["movie"]["id"]

    response = client.post("/api/bookings", json={
        "movie_id": movie_id,
        "seats": ["A1", "A2"],
        "pricing": {"extras": ["3d_glasses"]},
        "payment_method": "credit_card",
        "payer_info": "4111111111111111,123",
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["booking"]["seats"] == ["A1", "A2"]
    assert body["booking"]["total_price"] == 25.0
    assert body["receipt"]["transaction_id"] == "FAKE-1"

    seats = client.get(f"/api/movies/{movie_id}/seats").get_json()
    assert seats["occupied"] == ["A1", "A2"]

    conflict = client.post("/api/bookings", json={"movie_id": movie_id, "seats": ["A1", "B3"]})
    assert conflict.status_code == 409
    assert conflict.get_json()["conflicting_seats"] == ["A1"]

    mine = client.get("/api/my-bookings").get_json()
    assert len(mine) == 1
    assert client.get("/api/me").get_json()["active_bookings"] == {str(movie_id): "Created"}


def test_anonymous_booking_is_rejected(client, gateway):
    response = client.post("/api/bookings", json={"movie_id": 1, "seats": ["A1"]})
    assert response.status_code == 401
    assert response.get_json()["error"] == "not_authenticated"
    assert gateway.calls == []


def test_declined_payment_over_http(client, gateway):
    register(client)
    movie_id = add_movie(client).get_json()["movie"]["id"]
    gateway.success = False

    response = client.post("/api/bookings", json={"movie_id": movie_id, "seats": ["C3"]})
    assert response.status_code == 402
    assert Booking.query.count() == 0


def test_client_pricing_cannot_override_prices(client, gateway):
    register(client)
    movie_id = add_movie(client).get_json()["movie"]["id"]

    response = client.post("/api/bookings", json={
        "movie_id": movie_id,
        "seats": ["A1", "A2", "A3"],
        "pricing": {"base_price": 0, "service_fee": 0, "tax_rate": 0, "discount_rate": 1},
    })
    assert response.status_code == 201
    assert response.get_json()["booking"]["total_price"] == 31.50
    assert gateway.calls[0][0] == 31.5

    quote = client.post("/api/quote", json={"seats": ["B1"], "pricing": {"base_price": 0}})
    assert quote.get_json()["price"]["total"] == 11.50


@pytest.mark.parametrize("payload", [
    {"seats": ["A1"], "pricing": ["student"]},
    {"seats": ["A1"], "pricing": {"discounts": ["group"], "group_size": "five"}},
    {"seats": ["A1"], "pricing": {"package": 5}},
    {"seats": ["A1"], "pricing": {"extras": [{"name": "popcorn", "option": 1}]}},
    {"seats": 5},
])
def test_malformed_booking_payload_is_a_bad_request(client, gateway, payload):
    register(client)
    movie_id = add_movie(client).get_json()["movie"]["id"]

    response = client.post("/api/bookings", json=dict(payload, movie_id=movie_id))
    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_request"
    assert gateway.calls == []
    assert Booking.query.count() == 0


def test_group_size_text_number_is_accepted(client, gateway):
    register(client)
    movie_id = add_movie(client).get_json()["movie"]["id"]

    response = client.post("/api/bookings", json={
        "movie_id": movie_id,
        "seats": ["A1", "A2"],
        "pricing": {"discounts": ["group"], "group_size": "5"},
    })
    assert response.status_code == 201
    # 20 * 0.9 + 1.5
    assert response.get_json()["price"]["total"] == 19.50


def test_json_body_must_be_an_object(client):
    response = client.post("/api/quote", json=["A1"])
    assert response.status_code == 400
